"""Label Enforcement - decides who may set which label and computes the new label set.

Invariants:
    - Team members may set any label
    - Everyone else may set a label only if some allow_unauthenticated pattern matches it
    - A matching `!pattern` denies and stops evaluation, overriding earlier allows
    - UNKNOWN membership is denied like an outsider but reported differently
    - apply_label_deltas is PURE: it reports whether anything changed so the shell can skip the API call
"""

from enum import Enum
from fnmatch import fnmatchcase

from triagebot.core.commands import LabelDelta
from triagebot.core.domain_types import TeamMembership


class MatchPatternResult(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    NO_MATCH = "no_match"


class CheckFilterResult(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    DENY_UNKNOWN = "deny_unknown"


def match_pattern(pattern: str, label: str) -> MatchPatternResult:
    inverse = pattern.startswith("!")
    if inverse:
        pattern = pattern[1:]
    if not fnmatchcase(label, pattern):
        return MatchPatternResult.NO_MATCH
    return MatchPatternResult.DENY if inverse else MatchPatternResult.ALLOW


def check_filter(
    label: str, allow_unauthenticated: list[str], membership: TeamMembership,
) -> CheckFilterResult:
    if membership is TeamMembership.MEMBER:
        return CheckFilterResult.ALLOW
    matched = False
    for pattern in allow_unauthenticated:
        result = match_pattern(pattern, label)
        if result is MatchPatternResult.ALLOW:
            matched = True
        elif result is MatchPatternResult.DENY:
            matched = False
            break
    if matched:
        return CheckFilterResult.ALLOW
    if membership is TeamMembership.OUTSIDER:
        return CheckFilterResult.DENY
    return CheckFilterResult.DENY_UNKNOWN


def apply_label_deltas(
    labels: list[str], deltas: tuple[LabelDelta, ...],
) -> tuple[list[str], bool]:
    """Apply add/remove deltas in order. Returns (new_labels, changed)."""
    result = list(labels)
    changed = False
    for delta in deltas:
        if delta.add and delta.label not in result:
            result.append(delta.label)
            changed = True
        elif not delta.add and delta.label in result:
            result.remove(delta.label)
            changed = True
    return result, changed


def denial_message(label: str, result: CheckFilterResult) -> str | None:
    """User-facing explanation for a denied label, None when allowed."""
    if result is CheckFilterResult.DENY:
        return f"Label {label} can only be set by team members"
    if result is CheckFilterResult.DENY_UNKNOWN:
        return (
            f"Label {label} can only be set by team members; "
            "we were unable to check if you are a team member."
        )
    return None
