import pytest

from minishell.quoting import (
    Quote,
    QuoteState,
    is_space,
    space_redirections,
    split_pipes,
    split_words,
    strip_quotes,
)


def test_quote_state_tracks_nesting():
    state = QuoteState()
    assert [state.feed(c) for c in "\"'\""] == [Quote.DOUBLE, Quote.DOUBLE, Quote.NONE]


def test_quote_state_single_quotes():
    state = QuoteState()
    assert [state.feed(c) for c in "'\"a'"] == [
        Quote.SINGLE,
        Quote.SINGLE,
        Quote.SINGLE,
        Quote.NONE,
    ]


@pytest.mark.parametrize("char", list("\t\n\v\f\r "))
def test_is_space_true(char):
    assert is_space(char) is True


@pytest.mark.parametrize("char", ["a", "|", "$", "\x0e"])
def test_is_space_false(char):
    assert is_space(char) is False


def test_strip_quotes_keeps_inner_quotes():
    assert strip_quotes("'\"a\"'") == '"a"'
    assert strip_quotes("\"it's\"") == "it's"


def test_strip_quotes_plain_text_unchanged():
    assert strip_quotes("abc") == "abc"


def test_space_redirections_splits_operators():
    spaced = space_redirections("cat<in>>out")
    assert split_words(spaced) == ["cat", "<", "in", ">>", "out"]


def test_space_redirections_ignores_quoted():
    assert space_redirections("echo '>'") == "echo '>'"


def test_split_words_collapses_spaces():
    assert split_words("  ls   -l  ") == ["ls", "-l"]


def test_split_words_keeps_quoted_spaces():
    assert split_words('echo "a b" c') == ["echo", '"a b"', "c"]


def test_split_words_empty():
    assert split_words("") == []
    assert split_words("   ") == []


def test_split_pipes_basic():
    assert split_pipes("ls | wc") == ["ls ", " wc"]


def test_split_pipes_quoted_pipe_kept():
    assert split_pipes("echo '|' x") == ["echo '|' x"]


def test_split_pipes_empty():
    assert split_pipes("") == []


def test_split_pipes_trailing_pipe():
    assert split_pipes("a|") == ["a", ""]


def test_split_pipes_join_roundtrip():
    line = "cat f | grep 'a|b' | wc -l"
    assert "|".join(split_pipes(line)) == line