"""The interactive read-parse-run loop of the shell."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from collections.abc import Iterable, Mapping
from typing import TextIO

from .builtins import ExitRequest
from .command import Command, RedirectKind, parse_line
from .environment import Environment
from .executor import Executor
from .heredoc import heredoc_path, read_heredoc
from .syntax import ShellSyntaxError

PROMPT = "minishell$ "
INTERRUPT_STATUS = 1
SIGNAL_BASE = 128


def _is_tty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


class Shell:
    """A shell session: its environment, last status and executor."""

    def __init__(self, environ: Mapping[str, str] | Iterable[str] | None = None) -> None:
        if environ is None:
            environ = os.environ
        if isinstance(environ, Mapping):
            entries = [f"{name}={value}" for name, value in environ.items()]
        else:
            entries = list(environ)
        self.env = Environment(entries)
        self.executor = Executor(self.env)
        self.stdin: TextIO = sys.stdin

    @property
    def status(self) -> int:
        """The exit status of the last command, the value of ``$?``."""
        return self.executor.status

    @status.setter
    def status(self, value: int) -> None:
        self.executor.status = value

    def _error(self, text: str) -> None:
        self.executor.stderr.write(text)
        self.executor.stderr.flush()

    def _prepare_heredocs(self, commands: Iterable[Command], created: list[str]) -> bool:
        """Read every heredoc body into a file and point the redirection at it."""
        for command in commands:
            for redirection in command.inputs():
                if redirection.kind is not RedirectKind.HEREDOC:
                    continue
                delimiter = redirection.target or ""
                try:
                    body = read_heredoc(
                        delimiter,
                        self.stdin,
                        self.env.to_list(),
                        self.status,
                        redirection.quoted,
                        self.executor.stdout,
                    )
                except KeyboardInterrupt:
                    self.executor.stdout.write("\n")
                    self.status = INTERRUPT_STATUS
                    return False
                path = heredoc_path(delimiter)
                try:
                    with open(path, "w", encoding="utf-8") as handle:
                        handle.write(body)
                except OSError as exc:
                    self._error(f"open failed: {exc.strerror or exc}\n")
                else:
                    created.append(path)
                redirection.target = path
        return True

    def execute_line(self, line: str) -> int:
        """Parse and run one line, returning the new status.

        ``exit`` run on its own raises ExitRequest.
        """
        if not line:
            return self.status
        try:
            commands = parse_line(line, self.env.to_list(), self.status)
        except ShellSyntaxError as exc:
            self._error(f"{exc.message}\n")
            self.status = exc.status
            return self.status
        if not commands:
            return self.status
        created: list[str] = []
        try:
            if not self._prepare_heredocs(commands, created):
                return self.status
            return self.executor.run(commands)
        finally:
            for path in created:
                with contextlib.suppress(OSError):
                    os.remove(path)

    def _read_line(self, stream: TextIO, interactive: bool) -> str | None:
        """The next line without its newline; None at the end of input."""
        if interactive:
            try:
                if stream is sys.stdin:
                    line = input(PROMPT)
                else:
                    self.executor.stdout.write(PROMPT)
                    self.executor.stdout.flush()
                    line = stream.readline()
                    if not line:
                        raise EOFError
            except EOFError:
                self._error("exit\n")
                return None
            return line.removesuffix("\n")
        return stream.readline().removesuffix("\n")

    def run(self, stream: TextIO | None = None) -> int:
        """Read and run lines from ``stream`` until its end or ``exit``.

        Without a terminal, an empty line also ends the session.
        """
        stream = stream if stream is not None else sys.stdin
        self.stdin = stream
        interactive = _is_tty(stream)
        while True:
            try:
                line = self._read_line(stream, interactive)
            except KeyboardInterrupt:
                self.executor.stdout.write("\n")
                self.status = INTERRUPT_STATUS
                continue
            if line is None or (not interactive and not line):
                break
            if not line:
                continue
            try:
                self.execute_line(line)
            except ExitRequest as exc:
                return exc.status
            except KeyboardInterrupt:
                self.executor.stdout.write("\n")
                self.status = SIGNAL_BASE + signal.SIGINT
        return self.status


def _install_signals() -> None:
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def main(argv: list[str] | None = None) -> int:
    """Start a shell on standard input and return its final status."""
    del argv
    _install_signals()
    if _is_tty(sys.stdin):
        with contextlib.suppress(ImportError):
            import readline  # noqa: F401  line editing and history for input()
    shell = Shell()
    return shell.run(sys.stdin)


if __name__ == "__main__":
    sys.exit(main())