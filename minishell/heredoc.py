"""Here-documents: reading the body up to a delimiter line."""

from __future__ import annotations

import os
import sys
import tempfile
from collections.abc import Iterable
from typing import TextIO

from .expand import lookup, variable_name


def heredoc_path(delimiter: str) -> str:
    """The temporary file that holds the body of the heredoc ``delimiter``."""
    return os.path.join(tempfile.gettempdir(), delimiter)


def expand_heredoc_line(line: str, envp: Iterable[str] | None, status: int) -> str:
    """Replace ``$NAME`` and ``$?`` in one line of a heredoc body."""
    envp = list(envp) if envp else []
    pieces = []
    pos = 0
    length = len(line)
    while pos < length:
        char = line[pos]
        following = line[pos + 1:pos + 2]
        if char == "$" and following and following not in "$ ?":
            name = variable_name(line[pos:])
            value = lookup(envp, name)
            if value is not None:
                pieces.append(value)
            pos += len(name)
        elif char == "$" and following == "?":
            pieces.append(str(status))
            pos += 1
        else:
            pieces.append(char)
        pos += 1
    return "".join(pieces)


def read_heredoc(
    delimiter: str,
    stream: TextIO,
    envp: Iterable[str] | None = None,
    status: int = 0,
    quoted: bool = False,
    prompt_out: TextIO | None = None,
) -> str:
    """Read lines from ``stream`` until the delimiter line or end of input.

    Each line is prompted with ``> ``. Unless the delimiter was quoted, the
    lines have their variables expanded. Returns the collected body.
    """
    prompt_out = prompt_out if prompt_out is not None else sys.stdout
    envp = list(envp) if envp else []
    terminator = f"{delimiter}\n"
    collected = []
    while True:
        prompt_out.write("> ")
        prompt_out.flush()
        line = stream.readline()
        if not line or line == terminator:
            break
        collected.append(line if quoted else expand_heredoc_line(line, envp, status))
    return "".join(collected)