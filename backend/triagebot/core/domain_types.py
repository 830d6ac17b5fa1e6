"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - GithubUserId / ZulipUserId are never interchangeable; the identity resolver maps between them
    - Position is 1-based as written by the user; 0 is never a valid Position
    - All valid states encoded as Enums - no raw string matching outside schemas/

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to the raw webhook strings
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

GithubUserId = NewType("GithubUserId", int)
ZulipUserId = NewType("ZulipUserId", int)


# ─── Value Types ─────────────────────────────────────────────────

Position = NewType("Position", int)     # 1-based index into an owner's list

# A notification is identified either by its Position or by its literal origin URL
Identifier = Position | str


# ─── Enums ───────────────────────────────────────────────────────

class TeamMembership(str, Enum):
    """Result of a team membership lookup."""
    MEMBER = "member"
    OUTSIDER = "outsider"
    UNKNOWN = "unknown"


class CommentAction(str, Enum):
    """GitHub issue_comment actions."""
    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"


class IssuesAction(str, Enum):
    """GitHub issues actions the bot distinguishes."""
    OPENED = "opened"
    EDITED = "edited"
    CLOSED = "closed"
    REOPENED = "reopened"
    LABELED = "labeled"
    UNLABELED = "unlabeled"


class ZulipMessageType(str, Enum):
    """Zulip message kinds - private messages need no bot mention."""
    PRIVATE = "private"
    STREAM = "stream"
