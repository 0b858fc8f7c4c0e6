"""On-demand export of extracted records to JSON files."""

import json
from pathlib import Path

from idscan.models import ExtractedRecord, slug_for
from idscan.storage.cache import now_millis
from idscan.utils.logger import get_logger

logger = get_logger(__name__)


def export_filename(record: ExtractedRecord, timestamp_ms: int) -> str:
    """Build ``<doctype>_<epochMillis>.json`` for a record."""
    return f"{slug_for(record.doc_type)}_{timestamp_ms}.json"


def export_record(
    record: ExtractedRecord,
    output_dir: Path,
    timestamp_ms: int | None = None,
) -> Path:
    """Write a record to a UTF-8 JSON file.

    Args:
        record: Record to export.
        output_dir: Directory for the file; created if missing.
        timestamp_ms: Epoch milliseconds for the filename. Defaults to now.

    Returns:
        Path of the written file.
    """
    timestamp_ms = now_millis() if timestamp_ms is None else timestamp_ms
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(record, timestamp_ms)
    path.write_text(
        json.dumps(record.to_dict(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.info("Exported %s record to %s", record.doc_type, path)
    return path
