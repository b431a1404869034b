"""Expansion of ``$NAME`` and ``$?`` in command lines."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .quoting import Quote, QuoteState, is_space

_SPECIAL_IN_VALUE = "'<>|\""
_FIELD_SEPARATOR = re.compile(r"[\t-\r ]+")


def _is_name_start(char: str) -> bool:
    return char.isascii() and (char.isalpha() or char == "_")


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def lookup(envp: Iterable[str] | None, name: str) -> str | None:
    """Return the value of ``name`` in a list of ``NAME=value`` entries."""
    if not envp:
        return None
    size = len(name)
    for entry in envp:
        if entry.startswith(name) and entry[size:size + 1] == "=":
            return entry[size + 1:]
    return None


def variable_name(text: str) -> str:
    """Return the variable name that follows the first ``$`` of ``text``.

    A name starting with a letter or underscore runs over letters, digits and
    underscores; any other first character is a one-character name.
    """
    _, found, rest = text.partition("$")
    if not found or not rest:
        return ""
    if not _is_name_start(rest[0]):
        return rest[0]
    end = 1
    while end < len(rest) and _is_name_char(rest[end]):
        end += 1
    return rest[:end]


def _expands_here(line: str, pos: int, mode: Quote) -> bool:
    following = line[pos + 1:pos + 2]
    if (
        line[pos] != "$"
        or mode is Quote.SINGLE
        or not following
        or is_space(following)
        or following == "$"
    ):
        return False
    back = pos - 1 if pos > 0 else pos
    if back > 0 and line[back] not in "<>":
        while back >= 0 and not is_space(line[back]):
            back -= 1
    # A word right after a redirection operator (or a heredoc) is left alone.
    while back >= 0:
        if (not mode or (back > 0 and line[back - 1] == "<")) and line[back] in "<>":
            return False
        if not is_space(line[back]):
            return True
        back -= 1
    return True


def _quote_value(value: str | None, mode: Quote) -> str:
    if value is None:
        return ""
    has_double = '"' in value
    pieces = []
    for char in value:
        if has_double and mode is Quote.DOUBLE and char == '"':
            pieces.append('""')
        elif not mode and char in _SPECIAL_IN_VALUE:
            pieces.append(f"'{char}'" if char == '"' else f'"{char}"')
        else:
            pieces.append(char)
    return "".join(pieces)


def expand_variables(line: str, envp: Iterable[str] | None, status: int) -> str:
    """Replace variables in ``line``; ``status`` is the value of ``$?``."""
    envp = list(envp) if envp else []
    state = QuoteState()
    pieces = []
    pos = 0
    length = len(line)
    while pos < length:
        char = line[pos]
        mode = state.feed(char)
        if _expands_here(line, pos, mode):
            following = line[pos + 1]
            if following == "?":
                pieces.append(str(status))
                pos += 1
            elif not (is_space(following) or following in "'\""):
                name = variable_name(line[pos:])
                pos += len(name)
                pieces.append(_quote_value(lookup(envp, name), mode))
        else:
            pieces.append(char)
        pos += 1
    return "".join(pieces)


def _is_blank(value: str) -> bool:
    return all(is_space(char) for char in value)


def _field_count(value: str) -> int:
    return sum(1 for field in _FIELD_SEPARATOR.split(value) if field)


def is_ambiguous(word: str | None, envp: Iterable[str] | None) -> bool:
    """True if a redirection target expands to no word or to several words."""
    if word is None:
        return False
    envp = list(envp) if envp else []
    state = QuoteState()
    produced = False
    pos = 0
    length = len(word)
    while pos < length:
        char = word[pos]
        mode = state.feed(char)
        following = word[pos + 1:pos + 2]
        if (
            not mode
            and char == "$"
            and following
            and not is_space(following)
            and following != "$"
        ):
            name = variable_name(word[pos:])
            pos += len(name)
            value = lookup(envp, name)
            if value is not None and not _is_blank(value):
                if _field_count(value) > 1:
                    return True
                produced = True
        else:
            produced = True
        pos += 1
    return not produced