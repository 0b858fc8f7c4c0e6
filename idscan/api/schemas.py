"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel

from idscan.models import ExtractedRecord


class RecordResponse(BaseModel):
    """Response schema for an extracted record.

    Every field holds a value or the ``"Not found"`` sentinel.
    """

    doc_type: str
    name: str
    dob: str
    gender: str
    aadhaar: str
    card_no: str
    father_name: str
    raw_texts: dict[str, str] = {}

    @classmethod
    def from_record(cls, record: ExtractedRecord) -> "RecordResponse":
        return cls(**record.to_dict())


class DisplayRow(BaseModel):
    """A label/value pair for rendering."""

    label: str
    value: str


class ScanResponse(BaseModel):
    """Response schema for a document scan request."""

    success: bool
    document_id: str
    document_type: str
    quality: str
    status_message: str
    found_fields: int
    record: RecordResponse
    rows: list[DisplayRow]
    processing_time_ms: float


class CachedRecordResponse(BaseModel):
    """Response schema for the cached last result."""

    record: RecordResponse
    status_message: str


class ClearResponse(BaseModel):
    """Response schema for clearing the cached result."""

    cleared: bool


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    scan_in_progress: bool
