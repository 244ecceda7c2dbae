"""
Error handling for marketcompat.

Tier failures (``AcquisitionError`` and its subclasses) are recovered by the
fetch orchestrator, plugin failures (``AllMethodsExhaustedError``) by the batch
runner. Only ``InputValidationError`` and ``ResourceError`` reach the caller of
a batch.
"""

import traceback
from datetime import datetime
from typing import Dict, Any, Optional, List, Sequence

from loguru import logger


class CompatError(Exception):
    """Base class for all marketcompat exceptions."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize a marketcompat error.

        Args:
            message: Error message
            details: Additional error details
            cause: Original exception that caused this error
        """
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now().isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        error_dict = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "timestamp": self.timestamp,
            "details": self.details
        }

        if self.cause:
            error_dict["cause"] = {
                "error_type": self.cause.__class__.__name__,
                "message": str(self.cause)
            }

        return error_dict

    def log(self, log_level: str = "error") -> None:
        """
        Log the error with structured context.

        Args:
            log_level: Log level to use (default: error)
        """
        error_dict = self.to_dict()
        log_func = getattr(logger.bind(**error_dict), log_level)
        log_func(f"{self.__class__.__name__}: {self.message}")

        if log_level in ["error", "critical"] and self.cause is not None:
            logger.bind(**error_dict).debug(
                "Traceback:\n" + "".join(traceback.format_exception(
                    type(self.cause), self.cause, self.cause.__traceback__
                ))
            )


class ConfigurationError(CompatError):
    """Error raised when there is a configuration error."""
    pass


class InputValidationError(CompatError):
    """Error raised when batch input is rejected before any network activity."""

    def __init__(self, message: str, field: Optional[str] = None, cause: Optional[Exception] = None):
        details = {"field": field} if field else None
        super().__init__(message, details, cause)
        self.field = field


class ResourceError(CompatError):
    """Error raised when a shared resource (the headless browser) cannot be provisioned."""
    pass


class AcquisitionError(CompatError):
    """A single acquisition method failed for one plugin."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        details = {}
        if method:
            details["method"] = method
        if url:
            details["url"] = url
        super().__init__(message, details, cause)
        self.method = method
        self.url = url


class NetworkError(AcquisitionError):
    """Transport failure, timeout or non-200 response."""
    pass


class MalformedUpstreamDataError(AcquisitionError):
    """Upstream responded but the payload could not be interpreted."""
    pass


class SourceFailure:
    """A failure reason tagged with the method that produced it."""

    __slots__ = ("method", "reason")

    def __init__(self, method: str, reason: str):
        self.method = method
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.method}: {self.reason}"

    def __repr__(self) -> str:
        return f"SourceFailure(method={self.method!r}, reason={self.reason!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SourceFailure):
            return NotImplemented
        return (self.method, self.reason) == (other.method, other.reason)


class AllMethodsExhaustedError(CompatError):
    """Every acquisition method failed for one plugin."""

    def __init__(self, failures: Sequence[SourceFailure]):
        self.failures: List[SourceFailure] = list(failures)
        lines = "\n • ".join(str(f) for f in self.failures)
        message = f"All methods failed:\n • {lines}" if self.failures else "All methods failed"
        super().__init__(message, {"failures": [str(f) for f in self.failures]})
