"""Error taxonomy and the structured error model returned by the orchestrator."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    PARSE_FAILED = "PARSE_FAILED"
    PATTERN_NOT_FOUND = "PATTERN_NOT_FOUND"
    PATTERN_UNSUPPORTED = "PATTERN_UNSUPPORTED"
    PATTERN_SEED_INVALID = "PATTERN_SEED_INVALID"
    PARAMETER_MISSING = "PARAMETER_MISSING"
    PARAMETER_INVALID = "PARAMETER_INVALID"
    SOURCE_TOO_LARGE = "SOURCE_TOO_LARGE"
    UNKNOWN = "UNKNOWN"


class MotionCodegenError(Exception):
    """Base class for the errors that may fail an operation."""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str, *, category: ErrorCategory | None = None):
        super().__init__(message)
        if category is not None:
            self.category = category


class ParseError(MotionCodegenError):
    """Input text is not valid for the declared or inferred syntax."""

    category = ErrorCategory.PARSE_FAILED

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None):
        if line is not None:
            message = f"{message} (line {line}, column {column or 1})"
        super().__init__(message)
        self.line = line
        self.column = column


class PatternError(MotionCodegenError):
    category = ErrorCategory.PATTERN_NOT_FOUND


class ParameterError(MotionCodegenError):
    category = ErrorCategory.PARAMETER_INVALID


class SourceTooLargeError(ParameterError):
    category = ErrorCategory.SOURCE_TOO_LARGE


class ToolError(BaseModel):
    """Structured error carried by a failed operation response."""

    error: str
    category: str
    hint: str


_HINTS: dict[ErrorCategory, str] = {
    ErrorCategory.PARSE_FAILED: "Check the code compiles for the given framework and typescript setting",
    ErrorCategory.PATTERN_NOT_FOUND: "Unknown pattern id; list available ids with PatternLibrary.all_patterns()",
    ErrorCategory.PATTERN_UNSUPPORTED: "Pattern does not support this framework; pick another pattern or framework",
    ErrorCategory.PATTERN_SEED_INVALID: "Pattern seed failed validation; fix the seed file",
    ErrorCategory.PARAMETER_MISSING: "A required parameter is missing",
    ErrorCategory.PARAMETER_INVALID: "A parameter has an invalid value",
    ErrorCategory.SOURCE_TOO_LARGE: "Source exceeds the configured maximum length; split it into smaller snippets",
}


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, MotionCodegenError):
        cat = error.category
        return cat, _HINTS.get(cat, str(error))
    return ErrorCategory.UNKNOWN, f"Unexpected {type(error).__name__}: {error}"


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    return ToolError(error=str(error), category=cat.value, hint=hint).model_dump(mode="json")
