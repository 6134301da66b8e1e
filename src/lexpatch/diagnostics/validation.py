"""Structured validation results for patch documents.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .codes import PatchErrorCode

__all__ = [
    "ValidationError",
    "ValidationResult",
]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Single path-qualified validation problem.

    Attributes:
        path: Dotted location inside the document ("" for the document itself)
        message: Human-readable description
        code: Machine-readable error code
    """

    path: str
    message: str
    code: PatchErrorCode

    def format(self) -> str:
        """Format error as ``[CODE] path: message``."""
        location = self.path or "<document>"
        return f"[{self.code}] {location}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        """Return the wire representation ``{path, message, code}``."""
        return {"path": self.path, "message": self.message, "code": str(self.code)}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one patch document.

    Warnings never affect validity; a result is valid iff it has no errors.

    Attributes:
        errors: Blocking problems
        warnings: Informational messages

    Example:
        >>> result = ValidationResult.success()
        >>> result.valid
        True
        >>> bad = ValidationResult.failure(
        ...     ValidationError("metadata", "Metadata is required", PatchErrorCode.MISSING_METADATA)
        ... )
        >>> bad.valid
        False
    """

    errors: tuple[ValidationError, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        """True if validation produced no errors."""
        return not self.errors

    @property
    def error_count(self) -> int:
        """Number of errors."""
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        """Number of warnings."""
        return len(self.warnings)

    def has_code(self, code: PatchErrorCode) -> bool:
        """Check whether any error carries the given code."""
        return any(error.code == code for error in self.errors)

    def errors_for(self, code: PatchErrorCode) -> tuple[ValidationError, ...]:
        """Get all errors carrying the given code."""
        return tuple(error for error in self.errors if error.code == code)

    @staticmethod
    def success(warnings: tuple[str, ...] = ()) -> ValidationResult:
        """Create a valid result, optionally carrying warnings."""
        return ValidationResult(errors=(), warnings=warnings)

    @staticmethod
    def failure(*errors: ValidationError, warnings: tuple[str, ...] = ()) -> ValidationResult:
        """Create an invalid result from one or more errors."""
        return ValidationResult(errors=errors, warnings=warnings)

    def format(self, *, include_warnings: bool = True) -> str:
        """Format result as human-readable multi-line text.

        Args:
            include_warnings: If True (default), include warnings in output.

        Returns:
            One line per error (and warning), or a short success line.
        """
        if self.valid and not (include_warnings and self.warnings):
            return "Patch is valid"

        lines = [error.format() for error in self.errors]
        if include_warnings:
            lines.extend(f"[warning] {warning}" for warning in self.warnings)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation ``{valid, errors, warnings}``."""
        return {
            "valid": self.valid,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
        }
