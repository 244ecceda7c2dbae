"""
Progress reporting for compatibility batches.

The engine reports human-readable status lines to an injected observer. The
observer must never be able to stall or fail a batch, so sink errors are
logged and dropped. Messages are delivered in emission order and also kept in
``history`` for callers that poll rather than subscribe.
"""

from typing import Callable, List, Optional

from marketcompat.utils.logging_config import logger

ProgressCallback = Callable[[str], None]


class ProgressReporter:
    """Fan-out of status lines to a callback and the log."""

    def __init__(self, callback: Optional[ProgressCallback] = None, keep_history: bool = True):
        self.callback = callback
        self.keep_history = keep_history
        self.history: List[str] = []

    def __call__(self, message: str) -> None:
        self.emit(message)

    def emit(self, message: str) -> None:
        logger.info(message)
        if self.keep_history:
            self.history.append(message)
        if self.callback is None:
            return
        try:
            self.callback(message)
        except Exception as e:
            logger.warning(f"Progress callback raised {type(e).__name__}: {e}")


def ensure_reporter(progress) -> ProgressReporter:
    """Wrap a plain callable (or None) in a ProgressReporter."""
    if isinstance(progress, ProgressReporter):
        return progress
    return ProgressReporter(progress)
