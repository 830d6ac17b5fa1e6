"""Command Input - finds bot mentions in a comment or chat message and runs the grammar registry.

Invariants:
    - Text inside fenced code blocks and inline code spans never triggers a command
    - Families are tried in registry order at each mention; the first command (or hard error) wins
    - A mention followed by unrecognized text is skipped and the next mention is tried
    - Parsing never performs IO; CommandParseError carries the family that raised it

Design Decisions:
    - GitHub mentions are `@bot`; Zulip mentions are `@**bot**` (or silent `@_**bot**`)
    - Private Zulip messages are addressed to the bot already, so the message start is a candidate too
"""

import re
from collections.abc import Callable, Iterator

from triagebot.core import parse_notifications, parse_relabel
from triagebot.core.commands import Command
from triagebot.core.tokenizer import Tokenizer

Grammar = Callable[[Tokenizer], Command | None]

# Registry: commands accepted in GitHub comments vs. Zulip messages
GITHUB_GRAMMARS: tuple[Grammar, ...] = (
    parse_relabel.parse,
)
ZULIP_GRAMMARS: tuple[Grammar, ...] = (
    parse_relabel.parse,
    parse_notifications.parse,
)

_FENCED_CODE_RE = re.compile(r"^```.*?(?:^```|\Z)", re.MULTILINE | re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`[^`\n]*`")


def code_spans(text: str) -> list[tuple[int, int]]:
    """Return (start, end) ranges of fenced blocks and inline code spans."""
    spans = [m.span() for m in _FENCED_CODE_RE.finditer(text)]
    for match in _INLINE_CODE_RE.finditer(text):
        start, end = match.span()
        if not _inside(start, spans):
            spans.append((start, end))
    return sorted(spans)


def _inside(offset: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= offset < end for start, end in spans)


class CommandInput:
    """One inbound text plus the bot's name as users mention it."""

    def __init__(self, text: str, bot_name: str):
        self.text = text
        self.bot_name = bot_name
        self._code = code_spans(text)

    def parse_github_command(self) -> Command | None:
        pattern = re.compile(
            rf"(?<![\w/-])@{re.escape(self.bot_name)}(?![\w-])", re.IGNORECASE,
        )
        return self._parse_at(self._mention_ends(pattern), GITHUB_GRAMMARS)

    def parse_zulip_command(self, is_private: bool) -> Command | None:
        pattern = re.compile(rf"@_?\*\*{re.escape(self.bot_name)}\*\*", re.IGNORECASE)
        positions = list(self._mention_ends(pattern))
        if is_private:
            positions.insert(0, 0)
        return self._parse_at(positions, ZULIP_GRAMMARS)

    def _mention_ends(self, pattern: re.Pattern) -> Iterator[int]:
        for match in pattern.finditer(self.text):
            if not _inside(match.start(), self._code):
                yield match.end()

    def _parse_at(self, positions, grammars: tuple[Grammar, ...]) -> Command | None:
        for position in positions:
            for grammar in grammars:
                command = grammar(Tokenizer(self.text, position))
                if command is not None:
                    return command
        return None
