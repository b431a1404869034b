import pytest

from minishell.expand import expand_variables, is_ambiguous, lookup, variable_name
from minishell.quoting import split_pipes, split_words, strip_quotes

ENV = ["USER=bob", "USERNAME=robert", "HOME=/home/bob"]


def test_lookup_exact_name():
    assert lookup(ENV, "USER") == "bob"
    assert lookup(ENV, "USERNAME") == "robert"


def test_lookup_prefix_does_not_match():
    assert lookup(ENV, "US") is None


def test_lookup_missing_and_empty():
    assert lookup(ENV, "PATH") is None
    assert lookup([], "USER") is None
    assert lookup(None, "USER") is None


@pytest.mark.parametrize(
    "text, name",
    [("$HOME/x", "HOME"), ("$1abc", "1"), ("$?", "?"), ("$_a1-b", "_a1"), ("$", "")],
)
def test_variable_name(text, name):
    assert variable_name(text) == name


def test_expand_simple():
    assert expand_variables("echo $USER", ENV, 0) == "echo bob"


def test_expand_status():
    assert expand_variables("echo $?", ENV, 7) == "echo 7"


def test_expand_in_double_quotes():
    assert expand_variables('echo "$USER"', ENV, 0) == 'echo "bob"'


@pytest.mark.parametrize(
    "line", ["echo '$USER'", "cat << $USER", "cat > $USER", "cat <$USER", "echo $", "echo $$"]
)
def test_not_expanded(line):
    assert expand_variables(line, ENV, 0) == line


def test_missing_variable_expands_to_nothing():
    assert expand_variables("a$MISSING", ENV, 0) == "a"


def test_dollar_before_quote_is_dropped():
    assert expand_variables('$"USER"', ENV, 0) == '"USER"'


def test_special_characters_in_value_are_quoted():
    value = "a|b<c>d'e\"f"
    expanded = expand_variables("$Q", [f"Q={value}"], 0)
    assert strip_quotes(expanded) == value
    assert len(split_pipes(expanded)) == 1
    assert len(split_words(expanded)) == 1


def test_pipe_in_value_is_protected():
    assert expand_variables("$X", ["X=a|b"], 0) == 'a"|"b'


def test_ambiguous_multiple_words():
    assert is_ambiguous("$A", ["A=x y"]) is True


def test_single_word_not_ambiguous():
    assert is_ambiguous("$A", ["A=x"]) is False
    assert is_ambiguous("$A", ["A= x "]) is False


def test_empty_expansion_ambiguous():
    assert is_ambiguous("$MISSING", ENV) is True
    assert is_ambiguous("$A", ["A=   "]) is True


def test_quoted_variable_not_ambiguous():
    assert is_ambiguous('"$A"', ["A=x y"]) is False


def test_none_word_not_ambiguous():
    assert is_ambiguous(None, ENV) is False