"""A small interactive shell with pipes, redirections, here-documents and builtins."""

__version__ = "0.1.0"
__all__ = [
    "builtins",
    "command",
    "environment",
    "executor",
    "expand",
    "heredoc",
    "quoting",
    "shell",
    "syntax",
    "wildcards",
]