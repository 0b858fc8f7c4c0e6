"""Tesseract OCR engine wrapper for region recognition.

Forwards one rendered region and its language hint to Tesseract,
reports progress tagged with the region label, and retries a bounded
number of times before surfacing the engine's own error message.
"""

import io
import time
from collections.abc import Callable

import pytesseract
from PIL import Image, UnidentifiedImageError

from idscan.exceptions import RecognitionError
from idscan.utils.cancellation import CancelToken
from idscan.utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int, str], None]


class TesseractEngine:
    """Wrapper around Tesseract OCR for identity-document regions.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language hint, e.g. ``"eng+tam"``.
        psm: Tesseract page segmentation mode.
        timeout_s: Per-call timeout in seconds; 0 disables it.
        max_retries: Extra attempts after a failed call.
        retry_delay_s: Pause between attempts.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng+tam",
        psm: int = 3,
        timeout_s: float = 0.0,
        max_retries: int = 1,
        retry_delay_s: float = 0.5,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.retry_delay_s = retry_delay_s

    def recognize(
        self,
        image: bytes,
        lang: str | None = None,
        label: str = "region",
        on_progress: ProgressCallback | None = None,
        cancel_token: CancelToken | None = None,
    ) -> str:
        """Recognize the text in an encoded region image.

        Args:
            image: Encoded image bytes (PNG).
            lang: Language hint. Defaults to the engine default.
            label: Region label used to tag progress and log lines.
            on_progress: Called with ``(percent, label)``; receives 0 when
                an attempt starts and 100 when recognition completes.
            cancel_token: Checked before every attempt.

        Returns:
            Recognized text, possibly empty.

        Raises:
            RecognitionError: If every attempt fails.
            ScanCancelledError: If the token is cancelled between attempts.
        """
        lang = lang or self.default_lang
        config = f"--psm {self.psm}"
        attempts = self.max_retries + 1
        last_error = ""

        for attempt in range(1, attempts + 1):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            if on_progress:
                on_progress(0, label)
            try:
                text = self._image_to_string(image, lang, config)
            except (pytesseract.TesseractError, RuntimeError, OSError) as exc:
                last_error = _error_message(exc)
                logger.warning(
                    "Recognition of %s failed (attempt %d/%d): %s",
                    label,
                    attempt,
                    attempts,
                    last_error,
                )
                if attempt < attempts and self.retry_delay_s > 0:
                    time.sleep(self.retry_delay_s)
                continue

            if on_progress:
                on_progress(100, label)
            logger.info("Recognized %d characters from %s", len(text), label)
            return text

        raise RecognitionError(last_error, label=label)

    def _image_to_string(self, image: bytes, lang: str, config: str) -> str:
        try:
            pil_image = Image.open(io.BytesIO(image))
        except UnidentifiedImageError as exc:
            raise RecognitionError(f"Unreadable region image: {exc}") from exc
        kwargs: dict[str, object] = {"lang": lang, "config": config}
        if self.timeout_s > 0:
            kwargs["timeout"] = self.timeout_s
        return pytesseract.image_to_string(pil_image, **kwargs) or ""


def _error_message(exc: Exception) -> str:
    # TesseractError keeps the engine's stderr in ``message``.
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__
