"""Quote tracking and the low-level splitting of a command line."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

REDIRECTION_CHARS = "<>"
QUOTE_CHARS = "\"'"


class Quote(IntEnum):
    """Quoting context of a character."""

    NONE = 0
    SINGLE = 1
    DOUBLE = 2
    BOTH = 3


@dataclass
class QuoteState:
    """Tracks whether the scan is inside single or double quotes."""

    in_double: bool = False
    in_single: bool = False

    def feed(self, char: str) -> Quote:
        """Account for ``char`` and return the quoting context after it."""
        if char == '"' and not self.in_single:
            self.in_double = not self.in_double
        elif char == "'" and not self.in_double:
            self.in_single = not self.in_single
        if self.in_double and self.in_single:
            return Quote.BOTH
        if self.in_single:
            return Quote.SINGLE
        if self.in_double:
            return Quote.DOUBLE
        return Quote.NONE


def is_space(char: str) -> bool:
    """True for the ASCII whitespace characters tab to carriage return and space."""
    return char == " " or "\t" <= char <= "\r"


def strip_quotes(text: str) -> str:
    """Remove the quote characters that delimit quoted sections."""
    state = QuoteState()
    kept = []
    for char in text:
        mode = state.feed(char)
        if (
            char not in QUOTE_CHARS
            or (mode is Quote.SINGLE and char == '"')
            or (mode is Quote.DOUBLE and char == "'")
        ):
            kept.append(char)
    return "".join(kept)


def space_redirections(text: str) -> str:
    """Surround every unquoted run of ``<`` and ``>`` with spaces."""
    state = QuoteState()
    pieces = []
    pos = 0
    length = len(text)
    while pos < length:
        char = text[pos]
        if not state.feed(char) and char in REDIRECTION_CHARS:
            end = pos
            while end < length and text[end] in REDIRECTION_CHARS:
                end += 1
            pieces.append(f" {text[pos:end]} ")
            pos = end
        else:
            pieces.append(char)
            pos += 1
    return "".join(pieces)


def split_words(text: str) -> list[str]:
    """Split on unquoted whitespace, keeping quotes in the words."""
    words = []
    current: list[str] = []
    state = QuoteState()
    for char in text:
        if not state.feed(char) and is_space(char):
            if current:
                words.append("".join(current))
                current = []
        else:
            current.append(char)
    if current:
        words.append("".join(current))
    return words


def split_pipes(text: str) -> list[str]:
    """Split a line into the segments between unquoted ``|`` characters."""
    if not text:
        return []
    state = QuoteState()
    count = 1
    for char, following in zip(text, text[1:] + "\0"):
        if not state.feed(char) and char == "|" and following != "|":
            count += 1

    segments = []
    pos = 0
    length = len(text)
    for _ in range(count):
        while pos < length and text[pos] == "|":
            pos += 1
        start = pos
        state = QuoteState()
        while pos < length:
            if not state.feed(text[pos]) and text[pos] == "|":
                break
            pos += 1
        segments.append(text[start:pos])
    return segments