"""Exception hierarchy for scan runs.

A field rule finding nothing is never an exception; it yields the
"Not found" sentinel. Only failures that abort a run live here.
"""


class ScanError(Exception):
    """Base class for errors that abort a scan run."""


class RecognitionError(ScanError):
    """Raised when the OCR engine rejects or fails on a region.

    The message is the engine's own, surfaced verbatim to the user.
    """

    def __init__(self, message: str, label: str = "") -> None:
        super().__init__(message)
        self.label = label


class ImageDecodeError(ScanError):
    """Raised when the source image cannot be decoded, cropped, or encoded."""


class ScanCancelledError(ScanError):
    """Raised at a suspension point once the run's cancel token is set."""


class PipelineBusyError(ScanError):
    """Raised when a scan is requested while another run is in progress."""
