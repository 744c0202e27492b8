"""
Custom exception types for the nuposix translator.

The translation core degrades gracefully instead of failing, so these are
only raised at the host boundary (missing or unreadable input) and inside the
parser to signal that the strict grammar tier gave up.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):

    # --- Host Input Errors ---
    NO_INPUT_PROVIDED = "No input provided."
    INPUT_NOT_TEXT = "Input must be a string, got '{type_name}'."
    FILE_READ_FAILED = "Failed to read file '{path}': {reason}"
    UNKNOWN_COMMAND = "Unknown command '{name}'. Expected one of: {choices}."

    # --- Parse Strategy Signals ---
    # Raised by the strict grammar tier and always caught by `parse`.
    STRICT_GRAMMAR_DISABLED = "The strict grammar parser is disabled."
    STRICT_GRAMMAR_UNSUPPORTED = "Construct '{construct}' is not covered by the strict grammar."
    STRICT_GRAMMAR_SYNTAX = "Strict grammar could not parse the input. Details: {details}"
    STRICT_GRAMMAR_UNAVAILABLE = "The strict grammar could not be loaded. Details: {details}"


class NuPosixError(Exception):
    def __init__(self, code: ErrorCode, line: Optional[int] = None, **kwargs):
        self.code = code
        self.line = line
        self.details = kwargs

        core_message = code.value.format(**kwargs)

        location_prefix = ""
        if line is not None and line > 0:
            location_prefix = f"Line {line}: "

        self.message = location_prefix + core_message

        super().__init__(self.message)


class ParseStrategyError(NuPosixError):
    """Signals that a parse tier could not handle the input; never surfaced to users."""


class InternalConverterError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
