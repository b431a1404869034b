"""Syntax checks on a raw command line."""

from __future__ import annotations

from .quoting import Quote, QuoteState, is_space

SYNTAX_STATUS = 258
TOKENS_ERROR = "minishell: syntax error near unexpected token"
QUOTES_ERROR = "minishell: unexpected EOF while looking for matching"
NEW_LINE_ERROR = "minishell: syntax error near unexpected token `newline'"


class ShellSyntaxError(Exception):
    """A line that cannot be parsed; ``status`` is the exit status to set."""

    def __init__(self, message: str, status: int = SYNTAX_STATUS) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


def _token_error(prefix: str, char: str) -> ShellSyntaxError:
    return ShellSyntaxError(f"{prefix} `{char}'")


def _pipe_follows(line: str, pos: int) -> bool:
    for char in line[pos + 1:]:
        if char == "|":
            return True
        if not is_space(char):
            return False
    return False


def _rest_blank(line: str, pos: int) -> bool:
    return all(is_space(char) for char in line[pos:])


def check_syntax(line: str) -> None:
    """Raise ShellSyntaxError if the line has misplaced operators or open quotes."""
    length = len(line)
    pos = 0
    while pos < length and is_space(line[pos]):
        pos += 1
    first = pos
    state = QuoteState()
    mode = Quote.NONE
    while pos < length:
        char = line[pos]
        mode = state.feed(char)
        if not mode and char == "|" and (
            _pipe_follows(line, pos) or _rest_blank(line, pos + 1) or pos == first
        ):
            raise _token_error(TOKENS_ERROR, char)
        if not mode and char in "<>":
            pos += 1
            if pos < length and line[pos] == char:
                pos += 1
            while pos < length and is_space(line[pos]):
                pos += 1
            if pos == length:
                raise ShellSyntaxError(NEW_LINE_ERROR)
            if line[pos] in "|<>":
                raise _token_error(TOKENS_ERROR, line[pos])
        else:
            pos += 1
    if mode is Quote.DOUBLE:
        raise _token_error(QUOTES_ERROR, '"')
    if mode is Quote.SINGLE:
        raise _token_error(QUOTES_ERROR, "'")