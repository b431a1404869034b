"""Turning a command line into a pipeline of commands."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

from .expand import expand_variables, is_ambiguous
from .quoting import QUOTE_CHARS, space_redirections, split_pipes, split_words, strip_quotes
from .syntax import check_syntax
from .wildcards import expand_wildcard, has_wildcard


class RedirectKind(IntEnum):
    """The four redirection operators."""

    OUTPUT = 1
    APPEND = 2
    INPUT = 3
    HEREDOC = 4


OPERATORS = {
    ">": RedirectKind.OUTPUT,
    ">>": RedirectKind.APPEND,
    "<": RedirectKind.INPUT,
    "<<": RedirectKind.HEREDOC,
}

_INPUT_KINDS = (RedirectKind.INPUT, RedirectKind.HEREDOC)
_OUTPUT_KINDS = (RedirectKind.OUTPUT, RedirectKind.APPEND)


@dataclass
class Redirection:
    """One redirection; for a heredoc, ``target`` is the delimiter."""

    kind: RedirectKind
    target: str | None
    quoted: bool = False
    ambiguous: bool = False


@dataclass
class Command:
    """A simple command: its arguments and its redirections in order."""

    arguments: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)

    def inputs(self) -> list[Redirection]:
        """The input and heredoc redirections, in order."""
        return [r for r in self.redirections if r.kind in _INPUT_KINDS]

    def outputs(self) -> list[Redirection]:
        """The output and append redirections, in order."""
        return [r for r in self.redirections if r.kind in _OUTPUT_KINDS]


def parse_arguments(
    words: Iterable[str], directory: str | os.PathLike[str] = "."
) -> list[str]:
    """The arguments of a command: words that are not redirections, unquoted."""
    arguments: list[str] = []
    skip_next = False
    for word in words:
        if skip_next:
            skip_next = False
            continue
        if word in OPERATORS:
            skip_next = True
            continue
        if has_wildcard(word):
            names = expand_wildcard(word, directory)
            if names:
                arguments.extend(names)
                continue
        arguments.append(strip_quotes(word))
    return arguments


def _redirection(
    kind: RedirectKind, word: str | None, envp: Sequence[str], status: int
) -> Redirection:
    heredoc = kind is RedirectKind.HEREDOC
    quoted = heredoc and word is not None and any(c in QUOTE_CHARS for c in word)
    if word in OPERATORS:
        word = None
    ambiguous = not heredoc and is_ambiguous(word, envp)
    if word is None:
        target = None
    elif not heredoc and not ambiguous:
        target = strip_quotes(expand_variables(word, envp, status))
    else:
        target = strip_quotes(word)
    return Redirection(kind, target, quoted, ambiguous)


def parse_redirections(
    words: Sequence[str], envp: Iterable[str] | None = None, status: int = 0
) -> list[Redirection]:
    """The redirections of a command, with their targets expanded."""
    envp = list(envp) if envp else []
    words = list(words)
    followers: list[str | None] = [*words[1:], None]
    return [
        _redirection(OPERATORS[word], target, envp, status)
        for word, target in zip(words, followers)
        if word in OPERATORS
    ]


def parse_command(
    words: Sequence[str],
    envp: Iterable[str] | None = None,
    status: int = 0,
    directory: str | os.PathLike[str] = ".",
) -> Command:
    """Build a Command from the words of one pipeline segment."""
    words = list(words)
    return Command(
        arguments=parse_arguments(words, directory),
        redirections=parse_redirections(words, envp, status),
    )


def parse_line(
    line: str,
    envp: Iterable[str] | None = None,
    status: int = 0,
    directory: str | os.PathLike[str] = ".",
) -> list[Command]:
    """Parse a whole line into its pipeline; raises ShellSyntaxError."""
    if not line:
        return []
    envp = list(envp) if envp else []
    expanded = expand_variables(line, envp, status)
    check_syntax(line)
    return [
        parse_command(split_words(space_redirections(segment)), envp, status, directory)
        for segment in split_pipes(expanded)
    ]