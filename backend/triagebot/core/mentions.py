"""Mention Extraction - finds @user and @org/team pings in GitHub text.

Invariants:
    - Mentions inside code blocks or inline code are ignored
    - Each user / team appears once, in order of first mention
    - Email addresses (foo@bar.com) are not mentions
"""

import re
from dataclasses import dataclass

from triagebot.core.command_input import code_spans

_MENTION_RE = re.compile(
    r"(?<![\w@`/.-])@(?P<login>[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)"
    r"(?:/(?P<team>[A-Za-z0-9][\w.-]*[A-Za-z0-9]|[A-Za-z0-9]))?",
)


@dataclass(frozen=True)
class Mention:
    login: str
    team: str | None = None

    @property
    def is_team(self) -> bool:
        return self.team is not None

    def __str__(self) -> str:
        return f"@{self.login}/{self.team}" if self.team else f"@{self.login}"


def extract_mentions(text: str) -> list[Mention]:
    spans = code_spans(text)
    seen: set[Mention] = set()
    mentions = []
    for match in _MENTION_RE.finditer(text):
        if any(start <= match.start() < end for start, end in spans):
            continue
        mention = Mention(match.group("login"), match.group("team"))
        if mention not in seen:
            seen.add(mention)
            mentions.append(mention)
    return mentions
