from dataclasses import dataclass
from typing import Callable, Optional

from utils.logging import log_message

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class StatusEvent:
    """A status/log record pushed to whoever is listening."""

    level: str  # "info", "warning" or "error"
    message: str


StatusCallback = Callable[[StatusEvent], None]


class ProgressReporter:
    """
    Pushes percent-complete and status events to optional callbacks.

    Percentages never decrease until ``reset()`` is called for the next
    document. A failing callback is logged and otherwise ignored so that
    listeners cannot stall a translation job.
    """

    def __init__(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        status_callback: Optional[StatusCallback] = None,
        verbose: bool = False,
    ):
        self.progress_callback = progress_callback
        self.status_callback = status_callback
        self.verbose = verbose
        self._percent = 0

    @property
    def percent(self) -> int:
        return self._percent

    def reset(self) -> None:
        self._percent = 0

    def progress(self, percent: int) -> None:
        percent = max(0, min(100, int(percent)))
        if percent < self._percent:
            return
        self._percent = percent
        if self.progress_callback:
            try:
                self.progress_callback(percent)
            except Exception as e:
                log_message(f"Progress callback failed: {e}", always_print=True)

    def status(self, message: str, level: str = "info") -> None:
        if not self.status_callback:
            log_message(message, verbose=self.verbose, always_print=level != "info")
            return
        try:
            self.status_callback(StatusEvent(level=level, message=message))
        except Exception as e:
            log_message(f"Status callback failed: {e}", always_print=True)

    def warning(self, message: str) -> None:
        self.status(message, level="warning")

    def error(self, message: str) -> None:
        self.status(message, level="error")
