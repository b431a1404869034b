"""The shell's environment: an ordered list of ``NAME`` or ``NAME=value`` entries."""

from __future__ import annotations

import string
from collections.abc import Iterable, Iterator

from .expand import lookup as _lookup_entry

_NAME_START = frozenset(string.ascii_letters + "_")
_NAME_CHARS = _NAME_START | frozenset(string.digits)


def valid_identifier(name: str) -> bool:
    """True if ``name`` is a letter or underscore followed by letters, digits or underscores."""
    return (
        bool(name)
        and name[0] in _NAME_START
        and all(char in _NAME_CHARS for char in name[1:])
    )


def valid_export(entry: str) -> bool:
    """True if ``entry`` is acceptable to ``export``: ``NAME``, ``NAME=value`` or ``NAME+=value``."""
    head, sep, _ = entry.partition("=")
    if sep and head.endswith("+"):
        head = head[:-1]
    return valid_identifier(head)


def _key(name: str) -> str:
    """The variable name in ``NAME``, ``NAME=value`` or ``NAME+=value``."""
    head = name.partition("=")[0]
    if head.endswith("+"):
        head = head[:-1]
    return head


class Environment:
    """Ordered environment entries, as kept by the shell between commands."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def _index(self, name: str) -> int | None:
        key = _key(name)
        if not key:
            return None
        size = len(key)
        for index, entry in enumerate(self._entries):
            if entry.startswith(key) and entry[size:size + 1] in ("", "="):
                return index
        return None

    def find(self, name: str) -> str | None:
        """The entry for the variable named in ``name`` (which may carry ``=value``)."""
        index = self._index(name)
        return None if index is None else self._entries[index]

    def lookup(self, name: str) -> str | None:
        """The value of ``name``, or None if it is unset or has no value."""
        return _lookup_entry(self._entries, name)

    def add(self, entry: str) -> None:
        """Set, append to or declare a variable; raises ValueError for a bad name."""
        if not valid_export(entry):
            raise ValueError(f"{entry}: not a valid identifier")
        index = self._index(entry)
        if index is None:
            self._entries.append(entry)
            return
        if "=" not in entry:
            return
        current = self._entries[index]
        plus = entry.find("+")
        equals = entry.find("=")
        if 0 <= plus < equals:
            suffix = entry[equals + 1:] if "=" in current else entry[equals:]
            self._entries[index] = current + suffix
        else:
            self._entries[index] = entry

    def remove(self, name: str) -> None:
        """Remove the variable named in ``name``, if present."""
        index = self._index(name)
        if index is not None:
            del self._entries[index]

    def to_list(self) -> list[str]:
        """A copy of the entries, in order."""
        return list(self._entries)

    def env_lines(self) -> list[str]:
        """The entries that carry a value, as ``env`` prints them."""
        return [entry for entry in self._entries if "=" in entry]

    def export_lines(self) -> list[str]:
        """Sort the entries in place and return them as ``export`` prints them."""
        self._entries.sort()
        lines = []
        for entry in self._entries:
            name, sep, value = entry.partition("=")
            if sep:
                lines.append(f'declare -x {name}="{value}"')
            else:
                lines.append(f"declare -x {entry}")
        return lines