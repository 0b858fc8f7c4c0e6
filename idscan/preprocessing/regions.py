"""Region cropping and enhancement for per-region recognition.

Decodes the uploaded photo once, then renders each planned region as a
PNG payload: cropped by fractional coordinates, optionally upscaled and
contrast-boosted to help faint print survive recognition.
"""

import io
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from idscan.exceptions import ImageDecodeError
from idscan.utils.config import RegionSpec
from idscan.utils.logger import get_logger

logger = get_logger(__name__)


def decode_image(source: Path | bytes) -> np.ndarray:
    """Decode an uploaded image into an RGB array.

    Args:
        source: Path to an image file, or raw file bytes.

    Returns:
        Image as an ``(height, width, 3)`` uint8 array.

    Raises:
        ImageDecodeError: If the file is missing or not a readable image.
    """
    try:
        if isinstance(source, bytes):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(Path(source))
        img = ImageOps.exif_transpose(img)
        return np.array(img.convert("RGB"))
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        raise ImageDecodeError(f"Image load failed: {exc}") from exc


def crop_box(shape: tuple[int, ...], spec: RegionSpec) -> tuple[int, int, int, int]:
    """Convert a region's fractional rectangle into pixel bounds.

    The box is clamped to the image and is always at least one pixel
    in each dimension.

    Args:
        shape: ``(height, width, ...)`` of the source image.
        spec: Region specification in fractional coordinates.

    Returns:
        ``(x0, y0, x1, y1)`` pixel bounds.
    """
    h, w = shape[:2]
    x0 = min(max(round(spec.x * w), 0), w - 1)
    y0 = min(max(round(spec.y * h), 0), h - 1)
    x1 = min(max(x0 + round(spec.width * w), x0 + 1), w)
    y1 = min(max(y0 + round(spec.height * h), y0 + 1), h)
    return x0, y0, x1, y1


def crop(image: np.ndarray, spec: RegionSpec) -> np.ndarray:
    """Crop the region described by ``spec`` out of ``image``."""
    x0, y0, x1, y1 = crop_box(image.shape, spec)
    return image[y0:y1, x0:x1].copy()


def enhance(image: np.ndarray, scale: float = 1.0, contrast: int = 100) -> np.ndarray:
    """Upscale an image and stretch its contrast around mid-gray.

    Contrast follows the usual percentage convention: 100 leaves pixels
    untouched, 180 pushes every pixel 1.8x further from mid-gray.

    Args:
        image: Input image (RGB or grayscale).
        scale: Linear resize factor.
        contrast: Contrast as a percentage of the original.

    Returns:
        Enhanced uint8 image.
    """
    result = image
    if scale != 1.0:
        result = cv2.resize(
            result, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC
        )
    if contrast != 100:
        factor = contrast / 100.0
        stretched = (result.astype(np.float32) - 127.5) * factor + 127.5
        result = np.clip(stretched, 0, 255).astype(np.uint8)
    logger.debug("Enhanced region (scale=%.1f, contrast=%d%%)", scale, contrast)
    return result


def encode_png(image: np.ndarray) -> bytes:
    """Encode an RGB or grayscale array as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(image).save(buf, format="PNG")
    return buf.getvalue()


class RegionExtractor:
    """Renders planned regions of a decoded image into recognition payloads."""

    def render(self, image: np.ndarray, spec: RegionSpec) -> bytes:
        """Crop, enhance, and encode one region.

        Args:
            image: Decoded source image.
            spec: Region to render.

        Returns:
            PNG bytes ready for the recognition engine.

        Raises:
            ImageDecodeError: If the region cannot be rendered.
        """
        try:
            region = crop(image, spec)
            if spec.is_enhanced:
                region = enhance(region, spec.scale, spec.contrast)
            payload = encode_png(region)
        except (cv2.error, ValueError, OSError) as exc:
            raise ImageDecodeError(
                f"Could not render region '{spec.label}': {exc}"
            ) from exc

        logger.debug(
            "Rendered region %s: %dx%d px, %d bytes",
            spec.label,
            region.shape[1],
            region.shape[0],
            len(payload),
        )
        return payload
