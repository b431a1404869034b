import pytest

from minishell.command import (
    Command,
    RedirectKind,
    Redirection,
    parse_arguments,
    parse_command,
    parse_line,
    parse_redirections,
)
from minishell.syntax import ShellSyntaxError


@pytest.fixture
def files(tmp_path):
    for name in ["b.txt", "a.txt", "c.log"]:
        (tmp_path / name).write_text("")
    return tmp_path


@pytest.mark.parametrize(
    "operator, kind, code",
    [
        (">", RedirectKind.OUTPUT, 1),
        (">>", RedirectKind.APPEND, 2),
        ("<", RedirectKind.INPUT, 3),
        ("<<", RedirectKind.HEREDOC, 4),
    ],
)
def test_redirect_kind_codes(operator, kind, code):
    (redirection,) = parse_redirections([operator, "target"], [], 0)
    assert redirection.kind == kind
    assert int(redirection.kind) == code


def test_arguments_plain():
    assert parse_arguments(["echo", "hi"]) == ["echo", "hi"]


def test_arguments_skip_redirections():
    words = ["cat", "<", "in", "-e", ">>", "log"]
    assert parse_arguments(words) == ["cat", "-e"]


def test_arguments_strip_quotes():
    assert parse_arguments(['"a b"', "'c'"]) == ["a b", "c"]


def test_arguments_wildcard(files):
    assert parse_arguments(["ls", "*.txt"], files) == ["ls", "a.txt", "b.txt"]


def test_arguments_wildcard_without_match(files):
    assert parse_arguments(["ls", "*.zz"], files) == ["ls", "*.zz"]


def test_redirections_kinds_and_targets():
    words = ["cat", ">", "out", ">>", "log", "<", "in", "<<", "EOF"]
    result = parse_redirections(words, [], 0)
    assert [r.kind for r in result] == [
        RedirectKind.OUTPUT,
        RedirectKind.APPEND,
        RedirectKind.INPUT,
        RedirectKind.HEREDOC,
    ]
    assert [r.target for r in result] == ["out", "log", "in", "EOF"]


def test_heredoc_quoted_delimiter():
    (redirection,) = parse_redirections(["<<", "'EOF'"], [], 0)
    assert redirection.quoted is True
    assert redirection.target == "EOF"


def test_heredoc_delimiter_not_expanded():
    (redirection,) = parse_redirections(["<<", "$X"], ["X=value"], 0)
    assert redirection.target == "$X"
    assert redirection.ambiguous is False
    assert redirection.quoted is False


def test_output_target_expanded():
    (redirection,) = parse_redirections([">", "$F"], ["F=file"], 0)
    assert redirection == Redirection(RedirectKind.OUTPUT, "file", False, False)


def test_ambiguous_when_value_has_spaces():
    (redirection,) = parse_redirections([">", "$X"], ["X=a b"], 0)
    assert redirection.ambiguous is True
    assert redirection.target == "$X"


def test_ambiguous_when_unset():
    (redirection,) = parse_redirections(["<", "$NOPE"], [], 0)
    assert redirection.ambiguous is True


def test_inputs_and_outputs():
    command = parse_command(["cat", "<", "in", ">", "out", "<<", "END"], [], 0)
    assert [r.target for r in command.inputs()] == ["in", "END"]
    assert [r.target for r in command.outputs()] == ["out"]
    assert command.arguments == ["cat"]


def test_inputs_outputs_partition_redirections():
    command = Command(
        ["x"],
        [
            Redirection(RedirectKind.APPEND, "a"),
            Redirection(RedirectKind.INPUT, "b"),
        ],
    )
    assert len(command.inputs()) + len(command.outputs()) == len(command.redirections)


def test_line_pipeline():
    commands = parse_line("echo hi | cat -e > out", [], 0)
    assert [c.arguments for c in commands] == [["echo", "hi"], ["cat", "-e"]]
    assert [r.target for r in commands[1].outputs()] == ["out"]
    assert commands[0].redirections == []


def test_line_empty():
    assert parse_line("", [], 0) == []


def test_line_syntax_error():
    with pytest.raises(ShellSyntaxError):
        parse_line("echo |", [], 0)


def test_line_unclosed_quote():
    with pytest.raises(ShellSyntaxError):
        parse_line('echo "abc', [], 0)


def test_line_variable():
    (command,) = parse_line("echo $X", ["X=hello"], 0)
    assert command.arguments == ["echo", "hello"]


def test_line_status():
    (command,) = parse_line("echo $?", [], 42)
    assert command.arguments == ["echo", str(42)]


def test_line_redirections_without_spaces():
    (command,) = parse_line("cat<in>out", [], 0)
    assert command.arguments == ["cat"]
    assert [(r.kind, r.target) for r in command.redirections] == [
        (RedirectKind.INPUT, "in"),
        (RedirectKind.OUTPUT, "out"),
    ]


def test_line_quoted_pipe():
    (command,) = parse_line('echo "a|b"', [], 0)
    assert command.arguments == ["echo", "a|b"]


def test_line_variable_with_pipe_stays_one_command():
    (command,) = parse_line("echo $X", ["X=a|b"], 0)
    assert command.arguments == ["echo", "a|b"]


def test_line_wildcard(files):
    (command,) = parse_line("ls *.log", [], 0, files)
    assert command.arguments == ["ls", "c.log"]