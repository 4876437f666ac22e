"""
Exception hierarchy for inkpress.

Structural failures (malformed PNG input, invalid style configuration) are
raised to the caller. Quantization quality problems are never raised; the
conversion orchestrator absorbs them and reports them through logging and the
returned result metadata.
"""

from typing import Any, Optional


class InkpressError(Exception):
    """Base exception for all inkpress errors.

    Args:
        message: Human-readable error description
        details: Optional dictionary containing additional error context

    Example:
        >>> raise InkpressError("Conversion failed", {"stage": "encode"})
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = dict(details or {})
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class FormatError(InkpressError):
    """Raised when PNG input is malformed or uses an unsupported feature.

    Args:
        message: Human-readable description of the format problem
        chunk_type: PNG chunk type being processed when the error occurred
        details: Additional context about the failure

    Example:
        >>> raise FormatError("Unsupported bit depth 16", chunk_type="IHDR")
    """

    def __init__(
        self,
        message: str,
        chunk_type: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.chunk_type = chunk_type
        context = dict(details or {})
        if chunk_type:
            context["chunk_type"] = chunk_type
        super().__init__(message, context)


class ConfigurationError(InkpressError):
    """Raised when a style, settings model or style catalog is invalid.

    Not a ValueError subclass, so pydantic validators pass it through to the
    caller instead of wrapping it in a ValidationError. The offending field,
    its value and the individual messages are copied into ``details``.
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        validation_errors: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field_name = field_name
        self.field_value = field_value
        self.validation_errors = list(validation_errors or [])

        context = {
            "field_name": field_name,
            "field_value": None if field_value is None else str(field_value),
            "validation_errors": self.validation_errors or None,
        }
        super().__init__(
            message, {**(details or {}), **{k: v for k, v in context.items() if v is not None}}
        )
