"""
Error taxonomy for StableGuard.

Recoverable conditions (DataUnavailable, Skipped, PublishFailed,
DeliveryFailed) are created and logged inside their component and never
raised past it. Only SchemaMismatch and MalformedResponse propagate to the
invocation caller.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standard error codes for StableGuard."""
    # Data errors (2xxx)
    DATA_UNAVAILABLE = "E2000"
    SCHEMA_MISMATCH = "E2001"

    # Pipeline outcomes (3xxx)
    SKIPPED = "E3000"
    PUBLISH_FAILED = "E3001"

    # Collaborator errors (4xxx)
    MALFORMED_RESPONSE = "E4000"
    DELIVERY_FAILED = "E4001"


class StableGuardError(Exception):
    """
    Base exception for StableGuard.

    All custom exceptions inherit from this class.
    """

    error_code: ErrorCode = ErrorCode.DATA_UNAVAILABLE
    recoverable: bool = True

    def __init__(self, message: str, cause: Optional[BaseException] = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        result: Dict[str, Any] = {
            "error_code": self.error_code.value,
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.cause is not None:
            result["cause"] = str(self.cause)
        result.update(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"


class DataUnavailable(StableGuardError):
    """Upstream reserve data could not be fetched or parsed."""
    error_code = ErrorCode.DATA_UNAVAILABLE


class Skipped(StableGuardError):
    """Zero-supply verdict: nothing to publish. Not a failure."""
    error_code = ErrorCode.SKIPPED


class PublishFailed(StableGuardError):
    """The ledger rejected or did not accept a report submission."""
    error_code = ErrorCode.PUBLISH_FAILED


class DeliveryFailed(StableGuardError):
    """A webhook could not be delivered."""
    error_code = ErrorCode.DELIVERY_FAILED


class SchemaMismatch(StableGuardError):
    """Encoded report does not match the declared wire layout."""
    error_code = ErrorCode.SCHEMA_MISMATCH
    recoverable = False


class MalformedResponse(StableGuardError):
    """The text generator returned no usable text."""
    error_code = ErrorCode.MALFORMED_RESPONSE
    recoverable = False
