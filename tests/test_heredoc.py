import io
import os
import tempfile

from minishell.heredoc import expand_heredoc_line, heredoc_path, read_heredoc


def test_heredoc_path_is_in_temp_directory():
    path = heredoc_path("EOF")
    assert os.path.dirname(path) == tempfile.gettempdir()
    assert os.path.basename(path) == "EOF"


def test_expand_known_variable():
    assert expand_heredoc_line("hi $USER\n", ["USER=alice"], 0) == "hi alice\n"


def test_expand_status():
    assert expand_heredoc_line("code $?\n", [], 3) == "code 3\n"


def test_unknown_variable_is_removed():
    assert expand_heredoc_line("a $NOPE b\n", ["USER=alice"], 0) == "a  b\n"


def test_dollar_at_end_is_kept():
    assert expand_heredoc_line("cost $", [], 0) == "cost $"


def test_digit_name_is_one_character():
    assert expand_heredoc_line("$1abc", ["1abc=x"], 0) == "abc"


def test_read_heredoc_stops_at_delimiter():
    stream = io.StringIO("one $X\ntwo\nEOF\nafter\n")
    prompts = io.StringIO()
    body = read_heredoc("EOF", stream, ["X=1"], 0, False, prompts)
    assert body == "one 1\ntwo\n"
    assert prompts.getvalue() == "> " * 3
    assert stream.readline() == "after\n"


def test_read_heredoc_quoted_keeps_variables():
    stream = io.StringIO("one $X\nEOF\n")
    body = read_heredoc("EOF", stream, ["X=1"], 0, True, io.StringIO())
    assert body == "one $X\n"


def test_read_heredoc_until_end_of_input():
    stream = io.StringIO("a\nb\n")
    prompts = io.StringIO()
    assert read_heredoc("EOF", stream, [], 0, False, prompts) == "a\nb\n"
    assert prompts.getvalue() == "> " * 3


def test_delimiter_without_newline_is_not_matched():
    stream = io.StringIO("a\nEOF")
    assert read_heredoc("EOF", stream, [], 0, True, io.StringIO()) == "a\nEOF"