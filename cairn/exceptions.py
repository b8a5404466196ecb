"""
Custom exception types for the Cairn configuration loader.

Every failed load surfaces exactly one `CairnError` subclass. None of them are
retried or recovered internally.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from cairn.positions import Utf16Range


class ErrorCode(Enum):

    # --- Encoding Errors ---
    IMPORT_PATH_NOT_UTF8 = "Import path {import_path!r} is not valid utf-8."

    # --- Syntax Errors ---
    SYNTAX_UNEXPECTED_TOKEN = "Syntax Error: Invalid syntax. {details}"
    SYNTAX_INVALID_CHARACTER = "Syntax Error: Invalid character '{char}' found."
    SYNTAX_UNEXPECTED_EOF = "Syntax Error: Unexpected end of file. {details}"
    SYNTAX_INVALID_ESCAPE = "Syntax Error: Invalid escape sequence '{escape}' in string literal."
    SYNTAX_PARSING_ERROR = "Syntax Error: A general parsing error occurred. Details: {details}"
    INVALID_JSON = "Cannot parse JSON document: {details}"
    INVALID_YAML = "Cannot parse YAML document: {details}"

    # --- Resolution Errors ---
    CANNOT_RESOLVE_IMPORT = "Cannot resolve import '{import_path}': {reason}"
    IMPORT_FILE_NOT_FOUND = "Imported file not found: '{import_path}'"
    INVALID_FILE_URI = "Cannot resolve import '{import_path}': invalid file uri."

    # --- Fetch Errors ---
    CANNOT_FETCH_TEXT = "Cannot fetch '{resolved_path}': {reason}"
    CANNOT_READ_FILE = "Cannot fetch '{resolved_path}': cannot read file."
    FILE_NOT_UTF8 = "Cannot fetch '{resolved_path}': file contains invalid utf-8 characters."

    # --- Evaluation Errors ---
    UNBOUND_IDENTIFIER = "Unbound identifier '{name}'."
    MISSING_FIELD = "Record has no field '{name}'."
    DUPLICATE_FIELD = "Field '{name}' is defined more than once."
    FIELD_ACCESS_ON_NON_RECORD = "Cannot access field '{name}' on a value of type '{provided}'."
    OPERATOR_TYPE_MISMATCH = "The '{op}' operator cannot be applied to '{left_type}' and '{right_type}'."
    UNARY_TYPE_MISMATCH = "The '{op}' operator cannot be applied to '{provided}'."
    CONDITION_NOT_BOOLEAN = "The condition of an 'if' expression must be a boolean, but got a '{provided}'."
    LOGICAL_OPERAND_NOT_BOOLEAN = "The '{op}' operator can only be used with boolean values, but got a '{provided}'."
    DIVISION_BY_ZERO = "Division by zero."
    NOT_A_FUNCTION = "Cannot call a value of type '{provided}'."
    ARGUMENT_COUNT_MISMATCH = "Function expects {expected} argument(s), but got {provided}."
    INFINITE_RECURSION = "Infinite recursion: '{document}' imports itself while being evaluated."

    # --- Serialization Errors ---
    UNSERIALIZABLE_VALUE = "Cannot serialize a value of type '{provided}'."
    NON_STRING_KEY = "Cannot serialize a record key of type '{provided}'; keys must be strings."
    CYCLIC_VALUE = "Cannot serialize a value of type '{provided}' that contains itself."


class CairnError(Exception):
    """Base class for every error a load can end with."""

    def __init__(
        self,
        code: ErrorCode,
        path: Optional[str] = None,
        range: Optional["Utf16Range"] = None,
        **kwargs,
    ):
        self.code = code
        self.path = path
        self.range = range
        self.details = kwargs
        self.message = self._build_message()

        super().__init__(self.message)

    def locate(self, path: str, range: Optional["Utf16Range"] = None) -> "CairnError":
        """Attaches a location to an error that was raised without one."""
        if self.path is None:
            self.path = path
            self.range = range
            self.message = self._build_message()
            self.args = (self.message,)
        return self

    def _build_message(self) -> str:
        core_message = self.code.value.format(**self.details)

        # The range is 0-indexed UTF-16; the prefix shows it the same way hosts receive it.
        if self.path and self.range:
            start = self.range.start
            return f"Error in '{self.path}' (Line: {start.line}, Character: {start.character}):\n{core_message}"
        if self.path:
            return f"Error in '{self.path}': {core_message}"
        return core_message


class EncodingError(CairnError):
    """An unresolved import path cannot be represented as utf-8."""


class ParseError(CairnError):
    """A document failed to parse."""


class ResolutionError(CairnError):
    """The host could not resolve an import."""


class FetchError(CairnError):
    """The host could not retrieve the text of a resolved path."""


class EvaluationError(CairnError):
    """The root document failed to evaluate."""


class SerializationError(CairnError):
    """The evaluated value cannot be converted to a host-native structure."""


class InternalLoaderError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
