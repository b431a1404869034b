# minishell

A small POSIX-style command shell. It reads command lines and runs them,
with support for:

- pipelines (`cmd1 | cmd2 | cmd3`)
- redirections: `<` input, `>` truncate, `>>` append, `<<` here-documents
- single and double quotes
- `$NAME` and `$?` expansion, with "ambiguous redirect" detection
- `*` wildcards matched against the non-hidden entries of the current directory
- the builtins `echo` (with `-n`), `cd`, `pwd`, `export`, `unset`, `env` and `exit`

Programs other than builtins are found through `PATH` and run as child
processes. A builtin on its own runs inside the shell, so `cd` and `export`
change the session; inside a pipeline a builtin works on a copy of the
environment and directory.

## Installation

```
pip install .
```

## Running

```
minishell
```

When standard input is a terminal you get a `minishell$ ` prompt; press
Ctrl-D to leave. When input is piped in, each line is run in turn, and an
empty line or the end of input ends the session:

```
printf 'echo hello | tr a-z A-Z\nexit 3\n' | minishell
```

The process exits with the status of the last command. A syntax error such
as an unclosed quote or a dangling `|` sets the status to 258, a failed or
ambiguous redirection sets it to 1, and an unknown command sets it to 127.

Here-document bodies are read after the line is parsed, with a `> ` prompt
for each line. Variables in the body are expanded unless the delimiter was
quoted. The body is kept in a temporary file that is removed once the line
has run.

## Using it from Python

```python
import os
from minishell.shell import Shell

shell = Shell(os.environ)
shell.execute_line("export GREETING=hi")
shell.execute_line('echo "$GREETING there" > out.txt')
print(shell.status)
```

`Shell.execute_line` returns the new status; `exit` raises
`minishell.builtins.ExitRequest`, whose `status` attribute holds the exit
code. `Shell.run(stream)` reads and runs lines from any text stream.

The parsing pieces can also be used on their own:

```python
from minishell.command import parse_line

commands = parse_line("cat < in.txt | wc -l >> count.txt", ["HOME=/home/user"], 0, ".")
for command in commands:
    print(command.arguments, command.inputs(), command.outputs())
```

`parse_line` raises `minishell.syntax.ShellSyntaxError` for a malformed
line. Other useful parts:

- `minishell.expand.expand_variables(line, envp, status)` and `is_ambiguous(word, envp)`
- `minishell.wildcards.matches(pattern, name)` and `expand_wildcard(pattern, directory)`
- `minishell.environment.Environment`, the ordered `NAME=value` store behind `export`, `unset` and `env`
- `minishell.executor.Executor` and `resolve_path(cmd, envp)`

## Limits

The shell has no `;`, `&&` or `||` lists, no subshells or grouping, no
background jobs or job control, and no shell functions, aliases or scripts
beyond reading lines from standard input.

## Tests

```
pip install .[test]
pytest
```