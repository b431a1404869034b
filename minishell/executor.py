"""Running parsed commands: builtins in-process, other programs as child processes."""

from __future__ import annotations

import io
import os
import signal
import subprocess
import sys
import tempfile
from collections.abc import Iterable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Any

from .builtins import ExitRequest, is_builtin, run_builtin
from .command import Command, RedirectKind
from .environment import Environment
from .expand import lookup

QUIT_STATUS = 131
QUIT_MESSAGE = "Quit: 3\n"


class ExecError(Exception):
    """A command that cannot be run; ``message`` is the text for stderr."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class _RedirectFailed(Exception):
    """A redirection file could not be opened; the error is already reported."""


def _check_directory(cmd: str, path_value: str | None) -> None:
    if cmd == ".":
        raise ExecError(
            "minishell: .: filename argument required\n"
            ".: usage: . filename [arguments]\n",
            2,
        )
    bare = "/" in cmd or path_value is None
    if os.path.isdir(cmd):
        if bare:
            raise ExecError(f"minishell: {cmd}: is a directory\n", 126)
        return
    if bare and not os.path.exists(cmd):
        raise ExecError(f"minishell: {cmd}: No such file or directory\n", 127)
    if bare and not os.access(cmd, os.X_OK):
        raise ExecError(f"minishell: {cmd}: Permission denied\n", 126)


def resolve_path(cmd: str | None, envp: Iterable[str] | None) -> str | None:
    """The program to run for ``cmd``, or None if it is not found.

    Raises ExecError for a directory, a missing file or one that cannot be run.
    """
    if cmd is None:
        return None
    envp = list(envp) if envp else []
    path_value = lookup(envp, "PATH")
    _check_directory(cmd, path_value)
    directories = (
        None if path_value is None else [part for part in path_value.split(":") if part]
    )
    if os.access(cmd, os.X_OK) and (directories is None or "/" in cmd):
        return cmd
    if directories is None or cmd == "" or "." in cmd:
        return None
    for directory in directories:
        candidate = f"{directory}/{cmd}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def _restore_signals() -> None:
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)
    signal.signal(signal.SIGINT, signal.SIG_DFL)


def _exit_status(returncode: int) -> int:
    return returncode if returncode >= 0 else 128 - returncode


@dataclass
class _Stage:
    process: subprocess.Popen[bytes] | None
    status: int
    capture: bool = False


class Executor:
    """Runs pipelines of commands against a shell environment."""

    def __init__(self, env: Environment) -> None:
        self.env = env
        self.status = 0
        self.stdout: IO[str] = sys.stdout
        self.stderr: IO[str] = sys.stderr

    def _error(self, text: str) -> None:
        self.stderr.write(text)
        self.stderr.flush()

    def _report_file(self, target: str, exc: OSError) -> None:
        self._error(f"minishell: {target}: {exc.strerror or exc}\n")

    def open_redirections(self, command: Command) -> bool:
        """Check every redirection can be opened, creating output files.

        Reports the first failure, sets the status to 1 and returns False.
        """
        for redirection in command.redirections:
            target = redirection.target or ""
            if redirection.ambiguous:
                self._error(f"minishell: {target}: ambiguous redirect\n")
                self.status = 1
                return False
            if redirection.kind is RedirectKind.HEREDOC:
                continue
            mode = "rb" if redirection.kind is RedirectKind.INPUT else "ab"
            try:
                with open(target, mode):
                    pass
            except OSError as exc:
                self._report_file(target, exc)
                self.status = 1
                return False
        return True

    def _open_streams(self, command: Command, binary: bool) -> tuple[Any, Any]:
        extra: dict[str, Any] = {} if binary else {"encoding": "utf-8"}
        suffix = "b" if binary else ""
        stdin_handle = None
        stdout_handle = None
        current = ""
        try:
            for redirection in command.inputs():
                current = redirection.target or ""
                if stdin_handle is not None:
                    stdin_handle.close()
                    stdin_handle = None
                stdin_handle = open(current, "r" + suffix, **extra)
            for redirection in command.outputs():
                current = redirection.target or ""
                if stdout_handle is not None:
                    stdout_handle.close()
                    stdout_handle = None
                mode = "a" if redirection.kind is RedirectKind.APPEND else "w"
                stdout_handle = open(current, mode + suffix, **extra)
        except OSError as exc:
            for handle in (stdin_handle, stdout_handle):
                if handle is not None:
                    handle.close()
            self._report_file(current, exc)
            raise _RedirectFailed from exc
        return stdin_handle, stdout_handle

    def _child_environment(self) -> dict[str, str]:
        environment = {}
        for entry in self.env.to_list():
            name, sep, value = entry.partition("=")
            if sep:
                environment[name] = value
        return environment

    def _final_stdout(self) -> Any:
        try:
            descriptor = self.stdout.fileno()
        except (AttributeError, OSError, ValueError):
            return subprocess.PIPE
        self.stdout.flush()
        return descriptor

    def _spawn(
        self, path: str, args: Sequence[str], stdin: Any, stdout: Any
    ) -> subprocess.Popen[bytes] | None:
        try:
            return subprocess.Popen(
                list(args),
                executable=path,
                stdin=stdin,
                stdout=stdout,
                env=self._child_environment(),
                preexec_fn=_restore_signals,
            )
        except OSError:
            return None

    def _finish_process(self, process: subprocess.Popen[bytes]) -> int:
        output, _ = process.communicate()
        if output:
            self.stdout.write(output.decode(errors="replace"))
        status = _exit_status(process.returncode)
        if process.returncode < 0 and status == QUIT_STATUS:
            self._error(QUIT_MESSAGE)
        return status

    def run(self, commands: Iterable[Command]) -> int:
        """Run a pipeline and return its exit status, also kept in ``status``.

        A single builtin runs in the shell itself; ``exit`` there raises
        ExitRequest.
        """
        commands = list(commands)
        if not commands:
            return self.status
        if len(commands) == 1:
            self.status = self._run_single(commands[0])
        else:
            self.status = self._run_pipeline(commands)
        return self.status

    def _run_single(self, command: Command) -> int:
        if not self.open_redirections(command):
            return self.status
        args = command.arguments
        if args and is_builtin(args[0]):
            return self._single_builtin(command)
        try:
            stdin_handle, stdout_handle = self._open_streams(command, binary=True)
        except _RedirectFailed:
            return 1
        with ExitStack() as stack:
            for handle in (stdin_handle, stdout_handle):
                if handle is not None:
                    stack.callback(handle.close)
            if not args:
                return self.status
            try:
                path = resolve_path(args[0], self.env.to_list())
            except ExecError as exc:
                self._error(exc.message)
                return exc.status
            if path is None:
                self._error(f"minishell: {args[0]}: command not found\n")
                return 127
            stdout = stdout_handle if stdout_handle is not None else self._final_stdout()
            process = self._spawn(path, args, stdin_handle, stdout)
        if process is None:
            return 1
        return self._finish_process(process)

    def _single_builtin(self, command: Command) -> int:
        try:
            stdin_handle, stdout_handle = self._open_streams(command, binary=False)
        except _RedirectFailed:
            return self.status
        if stdin_handle is not None:
            stdin_handle.close()
        out = stdout_handle if stdout_handle is not None else self.stdout
        try:
            return run_builtin(command.arguments, self.env, self.status, out, self.stderr)
        finally:
            if stdout_handle is not None:
                stdout_handle.close()

    def _pipeline_builtin(self, args: Sequence[str]) -> tuple[int, str]:
        buffer = io.StringIO()
        env = Environment(self.env.to_list())
        cwd = os.getcwd()
        try:
            status = run_builtin(args, env, self.status, buffer, self.stderr)
        except ExitRequest as exc:
            status = exc.status
        finally:
            os.chdir(cwd)
        return status, buffer.getvalue()

    @staticmethod
    def _feed(data: bytes) -> IO[bytes]:
        handle = tempfile.TemporaryFile()
        handle.write(data)
        handle.seek(0)
        return handle

    def _finished(
        self, status: int, data: bytes, is_last: bool
    ) -> tuple[_Stage, IO[bytes] | None]:
        return _Stage(None, status), (None if is_last else self._feed(data))

    def _run_pipeline(self, commands: Sequence[Command]) -> int:
        stages = []
        upstream: IO[bytes] | None = None
        last = len(commands) - 1
        for index, command in enumerate(commands):
            try:
                stage, downstream = self._start_stage(command, upstream, index == last)
            finally:
                if upstream is not None:
                    upstream.close()
            stages.append(stage)
            upstream = downstream
        return self._wait_all(stages)

    def _start_stage(
        self, command: Command, upstream: IO[bytes] | None, is_last: bool
    ) -> tuple[_Stage, IO[bytes] | None]:
        if not self.open_redirections(command):
            return self._finished(1, b"", is_last)
        try:
            stdin_handle, stdout_handle = self._open_streams(command, binary=True)
        except _RedirectFailed:
            return self._finished(1, b"", is_last)
        with ExitStack() as stack:
            for handle in (stdin_handle, stdout_handle):
                if handle is not None:
                    stack.callback(handle.close)
            args = command.arguments
            if args and is_builtin(args[0]):
                status, text = self._pipeline_builtin(args)
                if stdout_handle is not None:
                    stdout_handle.write(text.encode())
                    return self._finished(status, b"", is_last)
                if is_last:
                    self.stdout.write(text)
                    return _Stage(None, status), None
                return self._finished(status, text.encode(), is_last)
            try:
                path = resolve_path(args[0] if args else None, self.env.to_list())
            except ExecError as exc:
                self._error(exc.message)
                return self._finished(exc.status, b"", is_last)
            if path is None:
                if args:
                    shown = f"{args[0]} " if args[0] else ""
                    self._error(f"minishell: {shown}:command not found\n")
                return self._finished(127, b"", is_last)
            if stdout_handle is not None:
                stdout = stdout_handle
            elif not is_last:
                stdout = subprocess.PIPE
            else:
                stdout = self._final_stdout()
            stdin = stdin_handle if stdin_handle is not None else upstream
            process = self._spawn(path, args, stdin, stdout)
            if process is None:
                return self._finished(1, b"", is_last)
            piped = isinstance(stdout, int) and stdout == subprocess.PIPE
            if is_last:
                return _Stage(process, 0, piped), None
            downstream = process.stdout if piped else self._feed(b"")
            return _Stage(process, 0), downstream

    def _wait_all(self, stages: Sequence[_Stage]) -> int:
        for stage in stages:
            if stage.capture and stage.process is not None and stage.process.stdout:
                data = stage.process.stdout.read()
                stage.process.stdout.close()
                if data:
                    self.stdout.write(data.decode(errors="replace"))
        status = 0
        reported = False
        for stage in stages:
            if stage.process is None:
                status = stage.status
                continue
            returncode = stage.process.wait()
            status = _exit_status(returncode)
            if returncode < 0 and status == QUIT_STATUS and not reported:
                self._error(QUIT_MESSAGE)
                reported = True
        return status