"""
Validation module for sheet consistency checks.
"""

from prompt_canvas.validation.sheet_validator import (
    SheetValidator,
    SheetValidationResult,
    ValidationIssue,
    ValidationSeverity,
    validate_sheet,
)

__all__ = [
    "SheetValidator",
    "SheetValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_sheet",
]
