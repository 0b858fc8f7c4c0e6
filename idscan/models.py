"""Core data model shared by the pipeline, the cache, and the outer surfaces."""

import math
from dataclasses import dataclass, field, fields
from enum import StrEnum

NOT_FOUND = "Not found"


class DocumentType(StrEnum):
    """Document variants recognized by the classifier."""

    AADHAAR = "aadhaar"
    VOTER = "voter"
    UNKNOWN = "unknown"


DISPLAY_NAMES: dict[DocumentType, str] = {
    DocumentType.AADHAAR: "Aadhaar Card",
    DocumentType.VOTER: "Voter ID",
    DocumentType.UNKNOWN: "Unknown",
}


def slug_for(display_name: str) -> str:
    """Map a record's display document type back to its short slug."""
    for doc_type, name in DISPLAY_NAMES.items():
        if name.lower() == display_name.lower():
            return doc_type.value
    return DocumentType.UNKNOWN.value


class Stage(StrEnum):
    """Pipeline stages, traversed strictly in order within a run.

    A single ``RECOGNIZING`` stage covers every planned region in turn;
    ``PipelineState.region`` names the region being read (for example
    ``aadhaar-r1`` then ``aadhaar-r2``).
    """

    IDLE = "idle"
    DETECTING = "detecting"
    RECOGNIZING = "recognizing"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineState:
    """Observable state of the current run. Mutated only by the pipeline."""

    stage: Stage = Stage.IDLE
    progress: int = 0
    message: str = ""
    region: str | None = None


@dataclass
class RecognitionResult:
    """Raw text recognized for a single region."""

    label: str
    text: str


# Field name -> display label, in display order.
_FIELD_LABELS: dict[str, str] = {
    "card_no": "Card Number",
    "name": "Name",
    "father_name": "Father's Name",
    "dob": "Date of Birth",
    "gender": "Gender",
    "aadhaar": "Aadhaar Number",
}
FIELD_NAMES: tuple[str, ...] = tuple(_FIELD_LABELS)


@dataclass
class ExtractedRecord:
    """Structured fields extracted from one document.

    Every field holds either a value or the ``"Not found"`` sentinel.
    Fields that do not belong to the document type stay at the sentinel
    and are left out of quality counting and display.
    """

    doc_type: str
    name: str = NOT_FOUND
    dob: str = NOT_FOUND
    gender: str = NOT_FOUND
    aadhaar: str = NOT_FOUND
    card_no: str = NOT_FOUND
    father_name: str = NOT_FOUND
    raw_texts: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for f in fields(self):
            if f.name in _FIELD_LABELS and not getattr(self, f.name):
                setattr(self, f.name, NOT_FOUND)

    def found_count(self, field_names: tuple[str, ...] | list[str]) -> int:
        """Count fields among ``field_names`` holding a real value."""
        return sum(1 for name in field_names if getattr(self, name) != NOT_FOUND)

    def display_rows(
        self, field_names: tuple[str, ...] | list[str]
    ) -> list[tuple[str, str]]:
        """Label/value pairs for rendering, document type first."""
        rows = [("Document Type", self.doc_type)]
        rows.extend((_FIELD_LABELS[name], getattr(self, name)) for name in field_names)
        return rows

    def to_dict(self) -> dict[str, object]:
        return {
            "doc_type": self.doc_type,
            "name": self.name,
            "dob": self.dob,
            "gender": self.gender,
            "aadhaar": self.aadhaar,
            "card_no": self.card_no,
            "father_name": self.father_name,
            "raw_texts": dict(self.raw_texts),
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ExtractedRecord":
        """Rebuild a record, restoring the sentinel for absent or null fields.

        Raises:
            ValueError: If ``data`` carries no document type.
        """
        doc_type = data.get("doc_type")
        if not isinstance(doc_type, str) or not doc_type:
            raise ValueError("record is missing its document type")
        values = {
            name: str(data[name]) if data.get(name) else NOT_FOUND
            for name in _FIELD_LABELS
        }
        raw_texts = data.get("raw_texts") or {}
        if not isinstance(raw_texts, dict):
            raise ValueError("raw_texts must be a mapping")
        return cls(
            doc_type=doc_type,
            raw_texts={str(k): str(v) for k, v in raw_texts.items()},
            **values,
        )


class QualityBucket(StrEnum):
    """Coarse extraction quality, derived from how many fields were found."""

    SUCCESS = "success"
    PARTIAL = "partial"
    POOR = "poor"

    def status_message(self, found: int) -> str:
        if self is QualityBucket.SUCCESS:
            return "Extraction successful"
        if self is QualityBucket.PARTIAL:
            return f"Partial: {found} fields found"
        return "Poor image quality — try a clearer, well-lit photo"


def quality_bucket(
    found: int, success_at: int = 4, partial_at: int = 2
) -> QualityBucket:
    """Bucket a found-field count against explicit thresholds."""
    if found >= success_at:
        return QualityBucket.SUCCESS
    if found >= partial_at:
        return QualityBucket.PARTIAL
    return QualityBucket.POOR


def quality_thresholds(
    field_count: int, success_ratio: float, partial_ratio: float
) -> tuple[int, int]:
    """Scale the success/partial thresholds to a document's field-set size.

    With the default ratios (0.8, 0.4) a four-field Aadhaar set and a
    five-field Voter set both land on the fixed 4 / 2 thresholds.
    """
    success_at = max(1, math.ceil(success_ratio * field_count - 1e-9))
    partial_at = max(1, math.ceil(partial_ratio * field_count - 1e-9))
    return success_at, min(partial_at, success_at)


@dataclass
class ScanOutcome:
    """What a finished run hands back to its caller."""

    record: ExtractedRecord
    doc_type: DocumentType
    quality: QualityBucket
    found: int
    field_names: tuple[str, ...]

    @property
    def status_message(self) -> str:
        return self.quality.status_message(self.found)


def restored_message(record: ExtractedRecord, success_at: int = 4) -> str:
    """Status shown when a cached record is restored instead of scanned."""
    found = record.found_count(FIELD_NAMES)
    if found >= success_at:
        return "Restored from previous scan"
    return f"Restored ({found} fields)"
