"""Custom exceptions for the Box 3 deduplication engine.

The engine itself has no error path: normalizers fall back to defined values
and "no match" is a regular return value. Exceptions are raised only at the
boundary, when loading a blueprint or reading configuration. All of them
inherit from Box3Error.

Example:
    try:
        blueprint = load_blueprint(raw)
    except BlueprintValidationError as e:
        for err in e.errors:
            logger.warning("blueprint_invalid_field", loc=err["loc"], msg=err["msg"])
        raise
"""

from typing import Any, Optional


class Box3Error(Exception):
    """Base exception for all Box 3 engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class BlueprintValidationError(Box3Error):
    """Raised when a blueprint does not match the expected schema.

    Typically caused by malformed extraction output. Recoverable in the
    sense that a corrected extraction pass can be fed in again.

    Attributes:
        errors: List of ``{"loc": ..., "msg": ...}`` dicts, one per field.

    Example:
        >>> raise BlueprintValidationError(
        ...     "Blueprint failed validation with 1 error(s)",
        ...     errors=[{"loc": "assets.bank_savings.0.id", "msg": "Field required"}],
        ... )
        BlueprintValidationError: Blueprint failed validation with 1 error(s)
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[list[dict[str, str]]] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.errors = errors or []

        if self.errors:
            self.details["errors"] = self.errors


class ConfigurationError(Box3Error):
    """Raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "Box3Error",
    "BlueprintValidationError",
    "ConfigurationError",
]
