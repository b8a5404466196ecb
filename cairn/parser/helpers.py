from lark.exceptions import LarkError, UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from cairn.config import FRIENDLY_TOKEN_NAMES
from cairn.exceptions import ErrorCode, ParseError
from cairn.positions import offset_to_range


def _describe_expected(expected) -> str:
    if not expected:
        return ""
    friendly_expected = sorted({FRIENDLY_TOKEN_NAMES.get(e, e) for e in expected})
    if len(friendly_expected) > 1:
        return f"Expected one of: {', '.join(friendly_expected[:-1])} or {friendly_expected[-1]}"
    return f"Expected {friendly_expected[0]}"


def translate_lark_error(err: LarkError, source: str, file_path: str) -> ParseError:
    """
    Translates a LarkError into a ParseError. The raw Lark diagnostic is kept in
    `details["raw"]`; the offset Lark reports is mapped to a UTF-16 range.
    """
    raw = str(err)
    offset = getattr(err, "pos_in_stream", None)
    if offset is None or offset < 0:
        offset = len(source)
    location = offset_to_range(source, offset)

    if isinstance(err, UnexpectedToken):
        expected_str = _describe_expected(err.expected)
        found_token = err.token
        if found_token.type == "$END":
            found_str = "but reached the end of the file instead."
        else:
            found_str = f"but found '{found_token.value}' instead."

        details = f"{expected_str}, {found_str}" if expected_str else f"Found unexpected token '{found_token.value}'."
        return ParseError(ErrorCode.SYNTAX_UNEXPECTED_TOKEN, path=file_path, range=location, details=details, raw=raw)

    elif isinstance(err, UnexpectedCharacters):
        return ParseError(ErrorCode.SYNTAX_INVALID_CHARACTER, path=file_path, range=location, char=err.char, raw=raw)

    elif isinstance(err, UnexpectedEOF):
        return ParseError(ErrorCode.SYNTAX_UNEXPECTED_EOF, path=file_path, range=location, details=_describe_expected(err.expected), raw=raw)

    # Fallback for any other Lark error
    return ParseError(ErrorCode.SYNTAX_PARSING_ERROR, path=file_path, range=location, details=raw, raw=raw)
