"""Relabel Command Grammar - `label +A-foo -T-bar`, `modify labels: ...`, with an optional issue reference.

Invariants:
    - Keywords: `label`, `relabel`, or the phrase `modify labels` (followed by optional `to` / `:`)
    - `modify` on its own is not a keyword: it returns None like any unknown word
    - At least one delta is required; `+` / `-` without a name is a CommandParseError
    - An issue reference (`owner/repo#123`) may follow the keyword; Zulip needs it, GitHub ignores it
"""

import re

from triagebot.core.commands import IssueRef, LabelDelta, RelabelCommand
from triagebot.core.errors import CommandParseError, LexError
from triagebot.core.tokenizer import Token, Tokenizer, TokenKind

FAMILY = "relabel"

KEYWORDS = frozenset({"label", "relabel"})

ISSUE_REF_RE = re.compile(r"^(?P<repo>[\w.-]+/[\w.-]+)#(?P<number>\d+)$")


def parse(cursor: Tokenizer) -> RelabelCommand | None:
    """Parse a relabel command from the cursor, advancing it only on success."""
    toks = cursor.clone()
    token = _next_lenient(toks)
    if token is None or token.kind is not TokenKind.WORD:
        return None

    keyword = token.text.lower()
    if keyword == "modify":
        target = _next_lenient(toks)
        if target is None or target.kind is not TokenKind.WORD:
            return None
        if target.text.lower() not in ("labels", "labels:"):
            return None
        connector = _next_lenient(toks.clone())
        if (
            connector is not None and connector.kind is TokenKind.WORD
            and connector.text.lower() in ("to", ":")
        ):
            toks.next()
    elif keyword not in KEYWORDS:
        return None

    try:
        command = _parse_arguments(toks)
    except LexError as e:
        raise CommandParseError(e.message, FAMILY) from e

    cursor.adopt(toks)
    return command


def _parse_arguments(toks: Tokenizer) -> RelabelCommand:
    issue = _parse_issue_ref(toks)
    deltas = []
    while True:
        token = toks.peek()
        if token is None or token.is_terminator:
            break
        toks.next()
        deltas.append(_parse_delta(token))
    if not deltas:
        raise CommandParseError(
            "no labels to add or remove", FAMILY, token.position if token else None,
        )
    return RelabelCommand(deltas=tuple(deltas), issue=issue)


def parse_issue_ref(text: str) -> IssueRef | None:
    match = ISSUE_REF_RE.match(text)
    if not match:
        return None
    return IssueRef(match.group("repo"), int(match.group("number")))


def _parse_issue_ref(toks: Tokenizer) -> IssueRef | None:
    token = toks.peek()
    if token is None or token.kind is not TokenKind.WORD:
        return None
    issue = parse_issue_ref(token.text)
    if issue is not None:
        toks.next()
    return issue


def _next_lenient(toks: Tokenizer) -> Token | None:
    try:
        return toks.next()
    except LexError:
        return None


def _parse_delta(token: Token) -> LabelDelta:
    if token.kind is not TokenKind.WORD:
        raise CommandParseError(
            f"expected a label name, found {token}", FAMILY, token.position,
        )
    text = token.text
    add = True
    if text[0] in "+-":
        add = text[0] == "+"
        text = text[1:]
    if not text:
        raise CommandParseError(
            f"missing label name after `{token.text}`", FAMILY, token.position,
        )
    return LabelDelta(text, add)
