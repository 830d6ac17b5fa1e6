"""Tokenizer - lexes one command's text into words, quoted literals and terminators.

Invariants:
    - Whitespace other than newline separates tokens and is never emitted
    - "\\n" is END_OF_LINE; running out of input is None (never a token)
    - "." is DOT only when followed by whitespace or end of input (URLs and versions stay words)
    - An unterminated quote raises LexError naming the opening quote's position
    - clone() is O(1): the input string is shared, only the read position is copied

Design Decisions:
    - Mutable cursor + cheap clone over an immutable cursor: grammars try an
      interpretation on a clone and either adopt its position or drop it
"""

from dataclasses import dataclass, field
from enum import Enum

from triagebot.core.errors import LexError


class TokenKind(str, Enum):
    WORD = "word"
    QUOTE = "quote"
    SEMI = "semi"
    DOT = "dot"
    END_OF_LINE = "end_of_line"


TERMINATORS = frozenset({TokenKind.SEMI, TokenKind.DOT, TokenKind.END_OF_LINE})

_SEPARATORS = " \t\r\f\v"
_WORD_STOPS = _SEPARATORS + '\n;"'


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str = ""
    position: int = field(default=0, compare=False)

    @classmethod
    def word(cls, text: str, position: int = 0) -> "Token":
        return cls(TokenKind.WORD, text, position)

    @classmethod
    def quote(cls, text: str, position: int = 0) -> "Token":
        return cls(TokenKind.QUOTE, text, position)

    @property
    def is_terminator(self) -> bool:
        return self.kind in TERMINATORS

    def __str__(self) -> str:
        if self.kind is TokenKind.WORD:
            return self.text
        if self.kind is TokenKind.QUOTE:
            return f'"{self.text}"'
        if self.kind is TokenKind.SEMI:
            return ";"
        if self.kind is TokenKind.DOT:
            return "."
        return "\n"


class Tokenizer:
    """Cursor over command text with one-token look-ahead."""

    def __init__(self, text: str, position: int = 0):
        self._text = text
        self._position = position

    @property
    def position(self) -> int:
        return self._position

    def clone(self) -> "Tokenizer":
        return Tokenizer(self._text, self._position)

    def adopt(self, other: "Tokenizer") -> None:
        """Advance to a clone's position after a successful trial parse."""
        self._position = other._position

    def peek(self) -> Token | None:
        return self.clone().next()

    def next(self) -> Token | None:
        text = self._text
        pos = self._skip_separators(self._position)
        if pos >= len(text):
            self._position = pos
            return None

        ch = text[pos]
        if ch == "\n":
            self._position = pos + 1
            return Token(TokenKind.END_OF_LINE, "", pos)
        if ch == ";":
            self._position = pos + 1
            return Token(TokenKind.SEMI, "", pos)
        if ch == "." and self._ends_word(pos + 1):
            self._position = pos + 1
            return Token(TokenKind.DOT, "", pos)
        if ch == '"':
            end = text.find('"', pos + 1)
            if end == -1:
                raise LexError("unterminated quote", pos)
            self._position = end + 1
            return Token(TokenKind.QUOTE, text[pos + 1:end], pos)

        end = pos
        while end < len(text) and text[end] not in _WORD_STOPS:
            if text[end] == "." and self._ends_word(end + 1):
                break
            end += 1
        self._position = end
        return Token(TokenKind.WORD, text[pos:end], pos)

    def _skip_separators(self, pos: int) -> int:
        while pos < len(self._text) and self._text[pos] in _SEPARATORS:
            pos += 1
        return pos

    def _ends_word(self, pos: int) -> bool:
        """True if position is end of input or whitespace (a '.' before it terminates)."""
        return pos >= len(self._text) or self._text[pos].isspace()

    def __iter__(self):
        token = self.next()
        while token is not None:
            yield token
            token = self.next()
