"""Staged scan pipeline: detect, recognize regions, extract fields.

Sequences the cheap detection pass, profile selection, per-region
recognition, and rule-based extraction into one strictly linear run,
publishing stage and progress to observers along the way.
"""

import threading
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import numpy as np

from idscan.exceptions import PipelineBusyError, ScanError
from idscan.extraction.classifier import DocumentClassifier
from idscan.extraction.profiles import select_profile
from idscan.models import (
    PipelineState,
    RecognitionResult,
    ScanOutcome,
    Stage,
    quality_bucket,
    quality_thresholds,
)
from idscan.ocr.tesseract_engine import TesseractEngine
from idscan.preprocessing.regions import RegionExtractor, decode_image
from idscan.storage.cache import ResultCache
from idscan.utils.cancellation import CancelToken
from idscan.utils.config import AppConfig, RegionSpec
from idscan.utils.logger import get_logger

from .progress import StageWeight, WeightedProgress

logger = get_logger(__name__)

StateListener = Callable[[PipelineState], None]

_EXTRACT_STAGE = "extract"


class ScanPipeline:
    """End-to-end identity-document scan pipeline.

    One run at a time: a second :meth:`run` while one is active raises
    :class:`PipelineBusyError` rather than racing on the shared state.

    Args:
        config: Application configuration.
        engine: Recognition engine. Built from ``config.ocr`` if omitted.
        regions: Region renderer.
        classifier: Document classifier.
        cache: Last-result cache; ``None`` disables caching.
    """

    def __init__(
        self,
        config: AppConfig,
        engine: TesseractEngine | None = None,
        regions: RegionExtractor | None = None,
        classifier: DocumentClassifier | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self.config = config
        self.engine = engine or TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
            psm=config.ocr.psm,
            timeout_s=config.ocr.timeout_s,
            max_retries=config.ocr.max_retries,
            retry_delay_s=config.ocr.retry_delay_s,
        )
        self.regions = regions or RegionExtractor()
        self.classifier = classifier or DocumentClassifier(config.classifier)
        self.cache = cache
        self.state = PipelineState()
        self._listeners: list[StateListener] = []
        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._reset_timer: threading.Timer | None = None

    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    def subscribe(self, listener: StateListener) -> None:
        """Register a callback invoked with a snapshot on every state change."""
        self._listeners.append(listener)

    def run(
        self,
        source: Path | bytes,
        filename: str = "document",
        cancel_token: CancelToken | None = None,
    ) -> ScanOutcome:
        """Scan one document image.

        Args:
            source: Path to the image, or its raw bytes.
            filename: Display name for logging.
            cancel_token: Checked before every crop and recognition call.

        Returns:
            The extracted record with its quality assessment.

        Raises:
            PipelineBusyError: If another run is in progress.
            ScanError: If decoding or recognition fails, or the run is
                cancelled. The state is ``FAILED`` with the message set.
        """
        if not self._run_lock.acquire(blocking=False):
            raise PipelineBusyError("A scan is already in progress")
        try:
            self._cancel_reset()
            logger.info("Scanning document: %s", filename)
            try:
                outcome = self._run(source, cancel_token)
            except ScanError as exc:
                logger.error("Scan of %s failed: %s", filename, exc)
                self._publish(stage=Stage.FAILED, message=str(exc), region=None)
                raise
            except Exception as exc:
                logger.exception("Unexpected error while scanning %s", filename)
                self._publish(stage=Stage.FAILED, message=str(exc), region=None)
                raise
        finally:
            self._run_lock.release()
            self._schedule_reset()

        if self.cache is not None:
            self.cache.save(outcome.record)
        return outcome

    def _run(
        self, source: Path | bytes, cancel_token: CancelToken | None
    ) -> ScanOutcome:
        detect = self.config.regions.detect
        self._publish(stage=Stage.DETECTING, progress=0, message=detect.stage)
        image = decode_image(source)

        # The plan is unknown until classification; size the detection share
        # against the longest plan.
        longest = max(
            (self.config.regions.aadhaar, self.config.regions.voter), key=len
        )
        detect_progress = self._progress_for(tuple(spec.label for spec in longest))
        detection = self._recognize(image, detect, detect_progress, 0, cancel_token)
        doc_type = self.classifier.classify(detection.text)
        profile = select_profile(doc_type, self.config)

        progress = self._progress_for(
            profile.region_labels, start=detect_progress.current
        )
        results: list[RecognitionResult] = []
        for index, spec in enumerate(profile.regions, start=1):
            self._publish(
                stage=Stage.RECOGNIZING,
                progress=progress.percent(index, 0.0),
                message=spec.stage or f"Scanning {spec.label}...",
                region=spec.label,
            )
            results.append(
                self._recognize(image, spec, progress, index, cancel_token)
            )

        extract_index = progress.index_of(_EXTRACT_STAGE)
        self._publish(
            stage=Stage.EXTRACTING,
            progress=progress.percent(extract_index, 0.0),
            message="Extracting fields...",
            region=None,
        )
        record = profile.build_record({r.label: r.text for r in results})

        found = record.found_count(profile.field_names)
        success_at, partial_at = quality_thresholds(
            len(profile.field_names),
            self.config.pipeline.success_ratio,
            self.config.pipeline.partial_ratio,
        )
        quality = quality_bucket(found, success_at, partial_at)
        outcome = ScanOutcome(
            record=record,
            doc_type=doc_type,
            quality=quality,
            found=found,
            field_names=profile.field_names,
        )
        self._publish(
            stage=Stage.DONE,
            progress=progress.complete(),
            message=outcome.status_message,
        )
        logger.info(
            "Extracted %d/%d fields from %s (%s)",
            found,
            len(profile.field_names),
            profile.display_name,
            quality.value,
        )
        return outcome

    def _progress_for(
        self, region_labels: tuple[str, ...], start: int = 0
    ) -> WeightedProgress:
        weights = self.config.pipeline
        stages = [StageWeight(self.config.regions.detect.label, weights.detect_weight)]
        stages.extend(
            StageWeight(label, weights.region_weight) for label in region_labels
        )
        stages.append(StageWeight(_EXTRACT_STAGE, weights.extract_weight))
        return WeightedProgress(stages, start=start)

    def _recognize(
        self,
        image: np.ndarray,
        spec: RegionSpec,
        progress: WeightedProgress,
        index: int,
        cancel_token: CancelToken | None,
    ) -> RecognitionResult:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        payload = self.regions.render(image, spec)

        def on_progress(percent: int, label: str) -> None:
            self._publish(progress=progress.percent(index, percent / 100.0))

        text = self.engine.recognize(
            payload,
            lang=spec.lang,
            label=spec.label,
            on_progress=on_progress,
            cancel_token=cancel_token,
        )
        logger.debug("[%s raw]\n%s", spec.label, text)
        return RecognitionResult(label=spec.label, text=text)

    def _publish(self, **changes: object) -> None:
        with self._state_lock:
            self.state = replace(self.state, **changes)
            snapshot = replace(self.state)
        for listener in self._listeners:
            listener(snapshot)

    def _schedule_reset(self) -> None:
        delay = self.config.pipeline.reset_delay_s
        if delay <= 0:
            self._reset()
            return
        timer = threading.Timer(delay, self._reset)
        timer.daemon = True
        self._reset_timer = timer
        timer.start()

    def _cancel_reset(self) -> None:
        if self._reset_timer is not None:
            self._reset_timer.cancel()
            self._reset_timer = None

    def _reset(self) -> None:
        if self.busy:
            return
        self._publish(stage=Stage.IDLE, progress=0, region=None)
