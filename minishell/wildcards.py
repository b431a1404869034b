"""Matching of unquoted ``*`` patterns against directory entries."""

from __future__ import annotations

import os

from .quoting import QuoteState, strip_quotes

_NUL = "\0"


def has_wildcard(word: str) -> bool:
    """True if ``word`` holds a ``*`` outside of quotes."""
    state = QuoteState()
    for char in word:
        mode = state.feed(char)
        if char == "*" and not mode:
            return True
    return False


def _star_at_or_before(pattern: str, pos: int) -> bool:
    """True if an unquoted ``*`` is found scanning back from ``pos``."""
    state = QuoteState()
    for index in range(pos, -1, -1):
        mode = state.feed(pattern[index])
        if not mode and pattern[index] == "*":
            return True
    return False


def _segment_before(pattern: str, pos: int) -> str:
    """The text between the previous unquoted ``*`` and position ``pos``."""
    state = QuoteState()
    start = 0
    for index in range(pos - 1, -1, -1):
        mode = state.feed(pattern[index])
        if pattern[index] == "*" and not mode:
            start = index + 1
            break
    return pattern[start:pos]


def _star_position(pattern: str, pos: int) -> int:
    """0 if an unquoted ``*`` follows ``pos``, 1 if ``pos`` is last, else 2."""
    state = QuoteState()
    for char in pattern[pos + 1:]:
        if not state.feed(char) and char == "*":
            return 0
    if pos == len(pattern) - 1:
        return 1
    return 2


def _char_at(name: str, index: int) -> str:
    return name[index] if 0 <= index < len(name) else _NUL


def _prefix_fails(segment: str, name: str, index: int) -> tuple[bool, int]:
    for char in segment:
        if char != _char_at(name, index):
            return True, index
        index += 1
    return False, index


def _middle_fails(segment: str, name: str, index: int) -> tuple[bool, int]:
    while index < len(name):
        matched = 0
        while (
            matched < len(segment)
            and index < len(name)
            and name[index] == segment[matched]
        ):
            matched += 1
            index += 1
        if matched == len(segment):
            return False, index
        index += 1
    return True, index


def _suffix_fails(segment: str, name: str) -> bool:
    index = len(name)
    for char in reversed(segment):
        if index - 1 < 0 or name[index - 1] != char:
            return True
        index -= 1
    return False


def matches(pattern: str, name: str) -> bool:
    """True if ``name`` is matched by the wildcard ``pattern``."""
    state = QuoteState()
    index = 0
    for pos, char in enumerate(pattern):
        mode = state.feed(char)
        if not mode and char == "*" and pos >= 1 and index != -1:
            segment = strip_quotes(_segment_before(pattern, pos))
            if _star_at_or_before(pattern, pos - 1):
                failed, index = _middle_fails(segment, name, index)
            else:
                failed, index = _prefix_fails(segment, name, index)
            if failed:
                return False
        elif index == -1:
            if _suffix_fails(strip_quotes(pattern[pos:]), name):
                return False
        if not mode and _star_position(pattern, pos) == 2:
            index = -1
    return True


def expand_wildcard(pattern: str, directory: str | os.PathLike[str] = ".") -> list[str]:
    """Sorted names of the non-hidden entries of ``directory`` matching ``pattern``."""
    names = (
        entry
        for entry in os.listdir(directory)
        if not entry.startswith(".") and matches(pattern, entry)
    )
    return sorted(names)