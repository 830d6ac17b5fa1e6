"""Tokenizer - tests for lexing rules and cursor cloning.

Tests cover:
    - Words, quotes, and the three terminators
    - "." is a DOT only before whitespace or end of input
    - None at end of input is distinct from END_OF_LINE
    - Unterminated quotes raise LexError from both peek and next
    - clone() is independent; adopt() moves the original forward
"""

import pytest

from triagebot.core.errors import LexError
from triagebot.core.tokenizer import Token, Tokenizer, TokenKind


def _tokens(text: str) -> list[Token]:
    return list(Tokenizer(text))


def test_words_are_split_on_whitespace():
    assert _tokens("ack  1\tfoo") == [Token.word("ack"), Token.word("1"), Token.word("foo")]


def test_quote_excludes_the_quotes():
    assert _tokens('add "https://x/y" z') == [
        Token.word("add"), Token.quote("https://x/y"), Token.word("z"),
    ]


def test_quote_may_contain_spaces_and_terminators():
    assert _tokens('"a b; c."') == [Token.quote("a b; c.")]


def test_semicolon_ends_a_word():
    assert _tokens("a;b") == [Token.word("a"), Token(TokenKind.SEMI), Token.word("b")]


def test_newline_is_end_of_line():
    assert _tokens("a\nb") == [
        Token.word("a"), Token(TokenKind.END_OF_LINE), Token.word("b"),
    ]


def test_dot_before_whitespace_terminates():
    assert _tokens("foo. bar") == [
        Token.word("foo"), Token(TokenKind.DOT), Token.word("bar"),
    ]


def test_dot_at_end_of_input_terminates():
    assert _tokens("foo.") == [Token.word("foo"), Token(TokenKind.DOT)]


def test_dot_inside_word_is_kept():
    assert _tokens("1.5 github.com/x") == [Token.word("1.5"), Token.word("github.com/x")]


def test_end_of_input_is_none():
    toks = Tokenizer("a")
    assert toks.next() == Token.word("a")
    assert toks.next() is None
    assert toks.peek() is None


def test_positions_are_offsets_into_input():
    tokens = _tokens('ab "c" d')
    assert [t.position for t in tokens] == [0, 3, 7]


def test_position_does_not_take_part_in_equality():
    assert Token.word("a", 0) == Token.word("a", 10)


def test_unterminated_quote_raises_from_next():
    toks = Tokenizer('add "https://x')
    toks.next()
    with pytest.raises(LexError) as exc:
        toks.next()
    assert exc.value.position == 4


def test_unterminated_quote_raises_from_peek():
    with pytest.raises(LexError):
        Tokenizer('"oops').peek()


def test_peek_does_not_advance():
    toks = Tokenizer("a b")
    assert toks.peek() == Token.word("a")
    assert toks.next() == Token.word("a")


def test_clone_is_independent():
    toks = Tokenizer("a b c")
    trial = toks.clone()
    trial.next()
    trial.next()
    assert toks.next() == Token.word("a")
    assert trial.next() == Token.word("c")


def test_adopt_moves_to_clone_position():
    toks = Tokenizer("a b c")
    trial = toks.clone()
    trial.next()
    toks.adopt(trial)
    assert toks.next() == Token.word("b")


def test_tokenizer_starts_at_given_position():
    assert Tokenizer("@bot ack 1", 4).next() == Token.word("ack")


def test_str_renders_quotes_back():
    assert str(Token.quote("x y")) == '"x y"'
    assert str(Token(TokenKind.SEMI)) == ";"
