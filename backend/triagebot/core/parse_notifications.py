"""Notification Command Grammar - acknowledge / add / move / meta, with optional `as <user>`.

Invariants:
    - Commit-on-keyword: an unrecognized first word returns None and leaves the caller's cursor untouched
    - After a recognized keyword every failure raises CommandParseError (family "notifications")
    - Numeric positions are validated here: 0 is rejected before anything executes
    - Descriptions are the words up to a terminator joined by single spaces (possibly empty)

Design Decisions:
    - `as` with no following name returns None instead of raising; the prefix is
      ambiguous on its own and is treated as ordinary text
"""

from triagebot.core.commands import Acknowledge, Add, Meta, Move, NotifCommand, NotifCommandKind
from triagebot.core.domain_types import Identifier, Position
from triagebot.core.errors import CommandParseError, LexError
from triagebot.core.tokenizer import Token, Tokenizer, TokenKind

FAMILY = "notifications"

ACKNOWLEDGE_KEYWORDS = frozenset({"acknowledge", "ack"})
KEYWORDS = ACKNOWLEDGE_KEYWORDS | {"add", "move", "meta"}


def parse(cursor: Tokenizer) -> NotifCommand | None:
    """Parse a notification command from the cursor, advancing it only on success."""
    toks = cursor.clone()
    user_override = None

    token = _peek_lenient(toks)
    if _is_word(token, "as"):
        toks.next()
        user = _peek_lenient(toks)
        if user is None or user.kind is not TokenKind.WORD:
            return None
        toks.next()
        user_override = user.text.lstrip("@")
        token = _peek_lenient(toks)

    if token is None or token.kind is not TokenKind.WORD:
        return None
    keyword = token.text.lower()
    if keyword not in KEYWORDS:
        return None
    toks.next()

    try:
        command = _parse_arguments(toks, keyword)
    except LexError as e:
        raise CommandParseError(e.message, FAMILY) from e

    cursor.adopt(toks)
    return NotifCommand(command=command, user_override=user_override)


def _parse_arguments(toks: Tokenizer, keyword: str) -> NotifCommandKind:
    if keyword in ACKNOWLEDGE_KEYWORDS:
        return Acknowledge(_parse_identifier(toks, keyword))
    if keyword == "add":
        url = toks.next()
        if url is None or url.kind is not TokenKind.QUOTE:
            raise _error('`add` expects a quoted URL, e.g. add "https://..." description', url)
        return Add(url.text, parse_description(toks))
    if keyword == "move":
        from_ = _parse_identifier(toks, keyword)
        return Move(from_, _parse_identifier(toks, keyword))
    position = _parse_position(toks.next(), keyword)
    return Meta(position, parse_description(toks))


def parse_description(toks: Tokenizer) -> str:
    """Consume words up to a terminator or end of input, joined by single spaces."""
    description = ""
    while True:
        token = toks.peek()
        if token is None or token.is_terminator:
            return description[:-1]
        toks.next()
        description += f"{token} "


def parse_position_text(text: str) -> Position | None:
    """Return the 1-based position written in text, or None if text is not a number."""
    if not text.isdecimal():
        return None
    return Position(int(text))


def _parse_identifier(toks: Tokenizer, keyword: str) -> Identifier:
    token = toks.next()
    if token is None or token.kind not in (TokenKind.WORD, TokenKind.QUOTE):
        raise _error(f"`{keyword}` expects a position or a quoted URL", token)
    if token.kind is TokenKind.QUOTE or "://" in token.text:
        return token.text
    return _parse_position(token, keyword)


def _parse_position(token: Token | None, keyword: str) -> Position:
    if token is None or token.kind is not TokenKind.WORD:
        raise _error(f"`{keyword}` expects a position", token)
    position = parse_position_text(token.text)
    if position is None:
        raise _error(f"`{token.text}` is not a position", token)
    if position < 1:
        raise _error(f"positions are 1-based, got {position}", token)
    return position


def _peek_lenient(toks: Tokenizer) -> Token | None:
    """Peek before a keyword is recognized: malformed quoting there just means no command."""
    try:
        return toks.peek()
    except LexError:
        return None


def _is_word(token: Token | None, text: str) -> bool:
    return token is not None and token.kind is TokenKind.WORD and token.text.lower() == text


def _error(message: str, token: Token | None) -> CommandParseError:
    position = token.position if token is not None else None
    return CommandParseError(message, FAMILY, position)
