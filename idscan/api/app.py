"""FastAPI application for the ID document scanner.

Provides REST endpoints to scan an uploaded Aadhaar or Voter ID photo,
read or clear the cached last result, and check service health.
"""

import shutil
import time
import uuid
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from idscan import __version__
from idscan.exceptions import ImageDecodeError, PipelineBusyError, ScanError
from idscan.models import restored_message
from idscan.pipeline.orchestrator import ScanPipeline
from idscan.storage.cache import build_cache
from idscan.utils.config import AppConfig, load_config
from idscan.utils.logger import get_logger

from .schemas import (
    CachedRecordResponse,
    ClearResponse,
    DisplayRow,
    HealthResponse,
    RecordResponse,
    ScanResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="ID Document Scanner API",
    description="Extract structured fields from Aadhaar and Voter ID photos",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_pipeline: ScanPipeline | None = None


def configure(config: AppConfig) -> ScanPipeline:
    """Build the shared pipeline from ``config``, replacing any existing one."""
    global _pipeline
    _pipeline = ScanPipeline(config, cache=build_cache(config.cache))
    return _pipeline


def _get_pipeline() -> ScanPipeline:
    """Return the shared pipeline, building it on first use.

    The pipeline owns the single-run lock, so every request must go
    through the same instance.
    """
    if _pipeline is None:
        return configure(load_config())
    return _pipeline


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/webp",
    "image/bmp",
    "application/octet-stream",
}


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        tesseract_available=shutil.which("tesseract") is not None,
        scan_in_progress=_get_pipeline().busy,
    )


@app.post("/scan", response_model=ScanResponse)
async def scan_document(file: Annotated[UploadFile, File(...)]) -> ScanResponse:
    """Scan an uploaded identity document photo.

    Args:
        file: Uploaded image (PNG, JPEG, TIFF, WebP, or BMP).

    Returns:
        Detected document type, extracted fields, and quality verdict.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    pipeline = _get_pipeline()
    if pipeline.busy:
        raise HTTPException(status_code=409, detail="A scan is already in progress")

    content = await file.read()
    try:
        outcome = await run_in_threadpool(
            pipeline.run, content, file.filename or "document"
        )
    except ImageDecodeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PipelineBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ScanError as exc:
        raise HTTPException(status_code=502, detail=f"OCR error: {exc}") from exc
    except Exception as exc:
        logger.error("Scan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    record = outcome.record
    return ScanResponse(
        success=True,
        document_id=str(uuid.uuid4()),
        document_type=record.doc_type,
        quality=outcome.quality.value,
        status_message=outcome.status_message,
        found_fields=outcome.found,
        record=RecordResponse.from_record(record),
        rows=[
            DisplayRow(label=label, value=value)
            for label, value in record.display_rows(outcome.field_names)
        ],
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.get("/result", response_model=CachedRecordResponse)
async def last_result() -> CachedRecordResponse:
    """Return the cached last result, if one exists and has not expired."""
    cache = _get_pipeline().cache
    if cache is None:
        raise HTTPException(status_code=404, detail="Result cache is disabled")
    record = cache.load()
    if record is None:
        raise HTTPException(status_code=404, detail="No cached result")
    return CachedRecordResponse(
        record=RecordResponse.from_record(record),
        status_message=restored_message(record),
    )


@app.delete("/result", response_model=ClearResponse)
async def clear_result() -> ClearResponse:
    """Forget the cached last result."""
    cache = _get_pipeline().cache
    if cache is None:
        return ClearResponse(cleared=False)
    cache.clear()
    return ClearResponse(cleared=True)
