"""
Translation from codepoint offsets into the UTF-16 `(line, character)`
coordinates hosts use for diagnostics.

The syntax tree records spans as codepoint offsets into a document's text. Hosts
(editors, language servers) count characters in UTF-16 code units, so a
codepoint outside the Basic Multilingual Plane is two characters wide.
"""

from typing import Optional

from pydantic import BaseModel

from cairn.parser.classes import Span


class Utf16Position(BaseModel):
    """A 0-indexed line and UTF-16 character offset."""

    line: int
    character: int


class Utf16Range(BaseModel):
    start: Utf16Position
    end: Utf16Position

    def as_tuple(self):
        """Returns `(start_line, start_char, end_line, end_char)`."""
        return (self.start.line, self.start.character, self.end.line, self.end.character)


SENTINEL_RANGE = Utf16Range(start=Utf16Position(line=0, character=0), end=Utf16Position(line=0, character=0))


def _utf16_width(char: str) -> int:
    return 2 if ord(char) > 0xFFFF else 1


class PositionMapper:
    """
    Forward-only cursor over one document's text.

    Offsets must be requested in non-decreasing order. Imports cannot contain
    other imports, so the spans collected from one document are sorted and
    non-overlapping, and a single pass over the text converts all of them.
    """

    def __init__(self, text: str):
        self.text = text
        self.cursor = 0
        self.line = 0
        self.character = 0

    def advance_to(self, offset: int) -> Utf16Position:
        assert offset >= self.cursor, f"offset {offset} is behind the cursor at {self.cursor}"
        assert offset <= len(self.text), f"offset {offset} is past the end of the text ({len(self.text)})"

        while self.cursor < offset:
            char = self.text[self.cursor]
            self.cursor += 1

            if char == "\r":
                continue
            if char == "\n":
                self.line += 1
                self.character = 0
            else:
                self.character += _utf16_width(char)

        return Utf16Position(line=self.line, character=self.character)

    def span_to_range(self, span: Optional[Span]) -> Utf16Range:
        if span is None:
            return SENTINEL_RANGE
        start = self.advance_to(span.start)
        end = self.advance_to(span.end)
        return Utf16Range(start=start, end=end)


def offset_to_range(text: str, offset: int) -> Utf16Range:
    """Maps a single offset (e.g. a parser error location) to an empty range."""
    offset = max(0, min(offset, len(text)))
    position = PositionMapper(text).advance_to(offset)
    return Utf16Range(start=position, end=position)


def span_to_range(text: str, span: Optional[Span]) -> Utf16Range:
    """Maps one span with a fresh mapper, for one-off lookups outside a crawl."""
    return PositionMapper(text).span_to_range(span)
