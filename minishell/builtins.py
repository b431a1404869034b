"""The commands the shell runs itself: cd, echo, pwd, export, unset, env and exit."""

from __future__ import annotations

import os
import string
import sys
from collections.abc import Sequence
from itertools import dropwhile
from typing import TextIO

from .environment import Environment, valid_identifier

BUILTINS = frozenset({"cd", "echo", "pwd", "export", "unset", "env", "exit"})

_OVERFLOW_GUARD = 922337203685477580
_INT64_RANGE = 1 << 64
_INT64_HALF = 1 << 63


class ExitRequest(Exception):
    """Raised by ``exit``: the shell should stop with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def is_builtin(name: str | None) -> bool:
    """True if ``name`` is one of the shell's own commands."""
    return name in BUILTINS


def _wrap64(value: int) -> int:
    return (value + _INT64_HALF) % _INT64_RANGE - _INT64_HALF


def parse_exit_argument(text: str) -> int:
    """The number given to ``exit``; raises ValueError if it is not numeric."""
    sign = -1 if text[:1] == "-" else 1
    body = text[1:] if text[:1] in ("-", "+") else text
    if not body or any(char not in string.digits for char in body):
        raise ValueError(f"{text}: numeric argument required")
    result = 0
    for char in body:
        digit = int(char)
        result = _wrap64(result * 10 + digit)
        if (result >= _OVERFLOW_GUARD and digit > 7) or result < 0:
            raise ValueError(f"{text}: numeric argument required")
    return _wrap64(result * sign)


def _is_n_flag(word: str) -> bool:
    return len(word) > 1 and word[0] == "-" and set(word[1:]) == {"n"}


def echo(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments after ``args[0]``; leading ``-n`` flags drop the newline."""
    out = out or sys.stdout
    words = list(args[1:])
    rest = list(dropwhile(_is_n_flag, words))
    out.write(" ".join(rest))
    if len(rest) == len(words):
        out.write("\n")
    return 0


def pwd(out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print the current directory."""
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        cwd = os.getcwd()
    except OSError as exc:
        err.write(f"getcwd: {exc.strerror}\n")
        return 1
    out.write(f"{cwd}\n")
    return 0


def cd(args: Sequence[str], env: Environment, err: TextIO | None = None) -> int:
    """Change directory to ``args[1]``, or to HOME when it is missing or ``~``."""
    err = err or sys.stderr
    if len(args) == 1 or (len(args) == 2 and args[1] == "~"):
        home = env.lookup("HOME")
        if home is None:
            err.write("minishell: cd: HOME not set\n")
            return 1
        try:
            os.chdir(home)
        except OSError:
            pass
        return 0
    try:
        os.chdir(args[1])
    except OSError:
        err.write(f"minishell: cd: {args[1]}: No such file or directory\n")
        return 1
    return 0


def export(
    args: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Add the given entries, or list the environment when there are none."""
    out = out or sys.stdout
    err = err or sys.stderr
    if len(args) == 1:
        for line in env.export_lines():
            out.write(f"{line}\n")
        return 0
    failed = False
    for entry in args[1:]:
        try:
            env.add(entry)
        except ValueError:
            err.write(f"minishell: export: '{entry}': not a valid identifier\n")
            failed = True
    return int(failed)


def unset(args: Sequence[str], env: Environment, err: TextIO | None = None) -> int:
    """Remove the named variables; reports names that are not identifiers."""
    err = err or sys.stderr
    failed = False
    for name in args[1:]:
        if not valid_identifier(name):
            err.write(f"minishell: unset: '{name}': not a valid identifier\n")
            failed = True
        env.remove(name)
    return int(failed)


def print_env(env: Environment, out: TextIO | None = None) -> int:
    """Print the entries that carry a value."""
    out = out or sys.stdout
    for line in env.env_lines():
        out.write(f"{line}\n")
    return 0


def exit_builtin(
    args: Sequence[str],
    status: int,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Raise ExitRequest; returns 1 instead when given too many arguments."""
    out = out or sys.stdout
    err = err or sys.stderr
    out.write("exit\n")
    if len(args) >= 2:
        try:
            value = parse_exit_argument(args[1])
        except ValueError:
            err.write(f"minishell: exit: {args[1]}: numeric argument required\n")
            raise ExitRequest(255) from None
        if len(args) > 2:
            err.write("minishell: exit: too many arguments\n")
            return 1
        raise ExitRequest(value & 0xFF)
    raise ExitRequest(status & 0xFF)


def run_builtin(
    args: Sequence[str],
    env: Environment,
    status: int = 0,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run the builtin named by ``args[0]`` and return its exit status."""
    if not args or not is_builtin(args[0]):
        raise ValueError(f"not a builtin: {args[0] if args else ''}")
    match args[0]:
        case "cd":
            return cd(args, env, err)
        case "echo":
            return echo(args, out)
        case "pwd":
            return pwd(out, err)
        case "export":
            return export(args, env, out, err)
        case "unset":
            return unset(args, env, err)
        case "env":
            return print_env(env, out)
        case _:
            return exit_builtin(args, status, out, err)