"""Map parse errors onto editor markers (1-based lines and columns)."""

from __future__ import annotations

from json_graph.models import ParseError, ParseErrorCode, ValidationMarker

SEVERITY_ERROR = 8
SEVERITY_WARNING = 4
SEVERITY_INFO = 2

ERROR_MESSAGES: dict[ParseErrorCode, str] = {
    ParseErrorCode.INVALID_SYMBOL: "Invalid symbol",
    ParseErrorCode.INVALID_NUMBER_FORMAT: "Invalid number format",
    ParseErrorCode.PROPERTY_NAME_EXPECTED: "Property name expected",
    ParseErrorCode.VALUE_EXPECTED: "Value expected",
    ParseErrorCode.COLON_EXPECTED: "Colon expected",
    ParseErrorCode.COMMA_EXPECTED: "Comma expected",
    ParseErrorCode.CLOSE_BRACE_EXPECTED: "Closing brace expected",
    ParseErrorCode.CLOSE_BRACKET_EXPECTED: "Closing bracket expected",
    ParseErrorCode.END_OF_FILE_EXPECTED: "Unexpected end of input",
    ParseErrorCode.INVALID_COMMENT_TOKEN: "Invalid comment token",
    ParseErrorCode.UNEXPECTED_END_OF_COMMENT: "Unexpected end of comment",
    ParseErrorCode.UNEXPECTED_END_OF_STRING: "Unexpected end of string",
    ParseErrorCode.INVALID_UNICODE: "Invalid unicode escape sequence",
    ParseErrorCode.INVALID_ESCAPE_CHARACTER: "Invalid escape character",
    ParseErrorCode.INVALID_CHARACTER: "Invalid character",
}


def error_message(code: ParseErrorCode) -> str:
    return ERROR_MESSAGES.get(code, "Unknown error")


def offset_to_position(text: str, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of a character offset into ``text``."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def create_validation_markers(errors: list[ParseError], text: str) -> list[ValidationMarker]:
    markers: list[ValidationMarker] = []
    for error in errors:
        start_line, start_column = offset_to_position(text, error.offset)
        end_line, end_column = offset_to_position(text, error.offset + error.length)
        markers.append(
            ValidationMarker(
                severity=SEVERITY_ERROR,
                message=error_message(error.code),
                start_line=start_line,
                start_column=start_column,
                end_line=end_line,
                end_column=end_column,
            )
        )
    return markers
