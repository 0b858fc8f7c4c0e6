"""Command-line interface for scanning identity documents.

Provides subcommands to scan one photo, show the cached last result,
and clear it. Results print as JSON on stdout; logs and progress go to
stderr.
"""

import argparse
import json
import sys
from pathlib import Path

from idscan.exceptions import ScanError
from idscan.models import PipelineState, ScanOutcome, restored_message
from idscan.pipeline.orchestrator import ScanPipeline
from idscan.storage.cache import ResultCache, build_cache
from idscan.storage.export import export_record
from idscan.utils.config import AppConfig, load_config
from idscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def outcome_to_dict(outcome: ScanOutcome, filename: str) -> dict[str, object]:
    """Flatten a scan outcome into a JSON-ready dictionary.

    Args:
        outcome: Finished scan.
        filename: Name of the scanned file.

    Returns:
        Dictionary with the detected type, quality, fields, and raw text.
    """
    record = outcome.record
    return {
        "filename": filename,
        "doc_type": record.doc_type,
        "quality": outcome.quality.value,
        "status": outcome.status_message,
        "fields": {name: getattr(record, name) for name in outcome.field_names},
        "raw_texts": record.raw_texts,
    }


def _print_progress(state: PipelineState) -> None:
    message = state.message or state.stage.value
    print(f"[{state.progress:3d}%] {message}", file=sys.stderr)


def scan_file(
    file_path: Path,
    config: AppConfig,
    use_cache: bool = True,
    export_dir: Path | None = None,
    verbose: bool = False,
) -> dict[str, object]:
    """Scan a single document photo and return structured results.

    Args:
        file_path: Path to the image.
        config: Application configuration.
        use_cache: Whether to store the result as the last scan.
        export_dir: If set, also export the record there as JSON.
        verbose: Whether to print progress to stderr.

    Returns:
        Dictionary of extraction results.

    Raises:
        ScanError: If the scan fails.
    """
    cache = build_cache(config.cache) if use_cache else None
    pipeline = ScanPipeline(config, cache=cache)
    if verbose:
        pipeline.subscribe(_print_progress)

    outcome = pipeline.run(file_path, file_path.name)
    logger.info("%s: %s", file_path.name, outcome.status_message)
    result = outcome_to_dict(outcome, file_path.name)
    if export_dir is not None:
        result["export_path"] = str(export_record(outcome.record, export_dir))
    return result


def show_last(cache: ResultCache) -> dict[str, object] | None:
    """Return the cached last result with a restore message, if any."""
    record = cache.load()
    if record is None:
        return None
    data = record.to_dict()
    data["status"] = restored_message(record)
    return data


def _emit(payload: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Aadhaar / Voter ID document scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="Path to a YAML config file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan a document photo")
    scan_parser.add_argument("file", type=Path, help="Image file to scan")
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")
    scan_parser.add_argument(
        "--export-dir",
        type=Path,
        help="Also export the record as <doctype>_<millis>.json into this directory",
    )
    scan_parser.add_argument(
        "--no-cache", action="store_true", help="Do not remember this result"
    )
    scan_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print progress to stderr"
    )

    subparsers.add_parser("last", help="Show the last cached result")
    subparsers.add_parser("clear", help="Forget the last cached result")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level, stream=sys.stderr)

    if args.command == "scan":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = scan_file(
                args.file,
                config,
                use_cache=not args.no_cache,
                export_dir=args.export_dir,
                verbose=args.verbose,
            )
        except ScanError as exc:
            print(f"OCR error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command in ("last", "clear"):
        cache = build_cache(config.cache)
        if cache is None:
            print("Error: result cache is disabled", file=sys.stderr)
            sys.exit(1)
        if args.command == "clear":
            cache.clear()
            print("Cleared cached result")
            return
        last = show_last(cache)
        if last is None:
            print("No cached result", file=sys.stderr)
            sys.exit(1)
        _emit(last, None)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
