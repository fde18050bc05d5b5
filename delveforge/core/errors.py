"""
Delveforge - Custom Error Types
Structured exceptions for generation and library errors with recovery hints.
"""
from typing import Dict, Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the generation engine."""
    # General errors
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Generation errors
    GENERATION_INFEASIBLE = "GENERATION_INFEASIBLE"
    GENERATION_EXHAUSTED = "GENERATION_EXHAUSTED"

    # Reference data errors
    LIBRARY_INVALID = "LIBRARY_INVALID"
    LIBRARY_NOT_FOUND = "LIBRARY_NOT_FOUND"


class GameError(Exception):
    """
    Base exception for all delveforge errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Additional context details
    - Recovery hints for the caller
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None,
        http_status: int = 500
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# =============================================================================
# Request Errors
# =============================================================================

class ValidationError(GameError):
    """Raised when a request carries values the engine cannot use."""

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {}) or {}
        if field:
            details["field"] = field
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details=details,
            http_status=400,
            **kwargs
        )


class NotFoundError(GameError):
    """Raised when a named resource (template group, tile library...) does not exist."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        details = {"resource": resource}
        if identifier:
            details["id"] = identifier
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{resource} not found",
            details=details,
            http_status=404,
            recovery_hint=f"Check the {resource.lower()} name and try again"
        )


# =============================================================================
# Generation Errors
# =============================================================================

class GenerationError(GameError):
    """Raised at the HTTP edge when a generation run produced nothing usable."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.GENERATION_EXHAUSTED,
        message: str = "Generation failed",
        **kwargs
    ):
        super().__init__(code=code, message=message, http_status=422, **kwargs)


class InfeasibleGenerationError(GenerationError):
    """No candidates at all survived filtering."""

    def __init__(self, reason: str = "No creatures or templates match the request"):
        super().__init__(
            code=ErrorCode.GENERATION_INFEASIBLE,
            message=reason,
            recovery_hint="Relax the category, keyword or template filters"
        )


class ExhaustedGenerationError(GenerationError):
    """Every retry was spent without producing a valid result."""

    def __init__(self, attempts: int):
        super().__init__(
            code=ErrorCode.GENERATION_EXHAUSTED,
            message=f"No valid encounter found after {attempts} attempts",
            details={"attempts": attempts},
            recovery_hint="Try again, or widen the creature library"
        )


# =============================================================================
# Library Errors
# =============================================================================

class LibraryError(GameError):
    """Raised when reference data (creatures, tiles, traps) is malformed."""

    def __init__(
        self,
        message: str = "Reference library is invalid",
        code: ErrorCode = ErrorCode.LIBRARY_INVALID,
        **kwargs
    ):
        super().__init__(
            code=code,
            message=message,
            recoverable=False,
            http_status=500,
            **kwargs
        )
