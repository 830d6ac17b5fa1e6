"""Command Values - the closed union of everything the grammar can produce.

Invariants:
    - Command values are built only by the grammar modules (parse_*.py)
    - All command values are frozen; handlers never mutate a parsed command
    - Meta is its own variant: it updates an existing entry, it never adds one

Design Decisions:
    - Plain frozen dataclasses + isinstance dispatch: the set of families is
      closed and known at import time, so no visitor or registry is needed
"""

from dataclasses import dataclass

from triagebot.core.domain_types import Identifier, Position


# ─── Notification management ─────────────────────────────────────

@dataclass(frozen=True)
class Acknowledge:
    identifier: Identifier


@dataclass(frozen=True)
class Add:
    url: str
    description: str


@dataclass(frozen=True)
class Move:
    from_: Identifier
    to: Identifier


@dataclass(frozen=True)
class Meta:
    position: Position
    description: str


NotifCommandKind = Acknowledge | Add | Move | Meta


@dataclass(frozen=True)
class NotifCommand:
    command: NotifCommandKind
    user_override: str | None = None


# ─── Relabel ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class LabelDelta:
    label: str
    add: bool = True

    def __str__(self) -> str:
        return f"+{self.label}" if self.add else f"-{self.label}"


@dataclass(frozen=True)
class IssueRef:
    repository: str
    number: int

    def __str__(self) -> str:
        return f"{self.repository}#{self.number}"


@dataclass(frozen=True)
class RelabelCommand:
    deltas: tuple[LabelDelta, ...]
    issue: IssueRef | None = None


Command = RelabelCommand | NotifCommand


def _format_identifier(identifier: Identifier) -> str:
    if isinstance(identifier, int):
        return str(identifier)
    return f'"{identifier}"'


def describe_notif_command(command: NotifCommandKind) -> str:
    """Render a notification command back to the text a user would type."""
    if isinstance(command, Acknowledge):
        return f"acknowledge {_format_identifier(command.identifier)}"
    if isinstance(command, Add):
        return f'add "{command.url}" {command.description}'.rstrip()
    if isinstance(command, Move):
        return f"move {_format_identifier(command.from_)} {_format_identifier(command.to)}"
    return f"meta {command.position} {command.description}".rstrip()
