"""Cooperative cancellation for scan runs."""

import threading

from idscan.exceptions import ScanCancelledError


class CancelToken:
    """Thread-safe flag checked by the pipeline at every suspension point."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason = "Scan cancelled"

    def cancel(self, reason: str | None = None) -> None:
        if reason:
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelledError(self.reason)
