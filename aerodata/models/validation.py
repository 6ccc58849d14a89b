"""
Validation results for entity mutations.

A mutation collects every violated constraint into one ValidationResult
before anything is applied. DataConstraintsError carries that result to
the caller as a field to reason mapping.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass
class ValidationError:
    """Represents a single validation error."""

    field: str
    message: str
    value: Any = None

    @property
    def base_field(self) -> str:
        """Field name without any ``[index]`` suffix."""
        return self.field.split('[', 1)[0]

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (value: {self.value})"
        return f"{self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        """Check if validation has warnings."""
        return len(self.warnings) > 0

    def add_error(self, field: str, message: str, value: Any = None) -> None:
        """Add a validation error."""
        self.errors.append(ValidationError(field, message, value))

    def add_warning(self, message: str) -> None:
        """Add a validation warning."""
        self.warnings.append(message)

    def has_error(self, field: str) -> bool:
        return any(error.field == field or error.base_field == field for error in self.errors)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Append the errors and warnings of another result to this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def only(self, fields: Iterable[str]) -> 'ValidationResult':
        """
        Restrict the result to errors raised against the given fields.

        Indexed errors such as ``takeoff_times[2]`` belong to their base
        field. Warnings are kept as they are not tied to a field.
        """
        wanted = set(fields)
        return ValidationResult(
            errors=[error for error in self.errors if error.base_field in wanted],
            warnings=list(self.warnings),
        )

    @classmethod
    def success(cls) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(errors=[])

    @classmethod
    def error(cls, field: str, message: str, value: Any = None) -> 'ValidationResult':
        """Create a validation result with a single error."""
        return cls(errors=[ValidationError(field, message, value)])

    def to_mapping(self) -> Dict[str, str]:
        """
        Map each failing field to its reason.

        Several reasons for the same field are joined with `` AND `` in the
        order they were raised.
        """
        mapping: Dict[str, str] = {}
        for error in self.errors:
            if error.field in mapping:
                mapping[error.field] = f"{mapping[error.field]} AND {error.message}"
            else:
                mapping[error.field] = error.message
        return mapping

    def raise_if_invalid(self, message: str) -> None:
        if not self.is_valid:
            raise DataConstraintsError(message, self)

    def __str__(self) -> str:
        if self.is_valid:
            if self.has_warnings:
                return f"Valid (with {len(self.warnings)} warnings)"
            return "Valid"
        return f"Invalid ({len(self.errors)} errors)"

    def get_error_messages(self) -> List[str]:
        """Get all error messages as strings."""
        return [str(error) for error in self.errors]


class DataConstraintsError(Exception):
    """Raised when one or more fields of an entity are rejected."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None, details: Any = None):
        """
        Initialize the error.

        Args:
            message: Error message
            validation_result: ValidationResult holding every rejected field
            details: Optional additional details
        """
        super().__init__(message)
        self.validation_result = validation_result or ValidationResult()
        self.details = details

    @classmethod
    def for_field(cls, field: str, message: str, value: Any = None) -> 'DataConstraintsError':
        return cls(message, ValidationResult.error(field, message, value))

    @property
    def errors(self) -> Dict[str, str]:
        """Field to reason mapping."""
        return self.validation_result.to_mapping()

    @property
    def fields(self) -> List[str]:
        return list(self.errors)

    def error(self, field: str) -> Optional[str]:
        """Reason the given field was rejected, or None if it was accepted."""
        return self.errors.get(field)

    def __str__(self) -> str:
        if self.validation_result.errors:
            error_messages = "\n  - ".join(self.validation_result.get_error_messages())
            return f"{super().__str__()}\nErrors:\n  - {error_messages}"
        return super().__str__()
