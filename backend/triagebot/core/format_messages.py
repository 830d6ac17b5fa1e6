"""Reply Formatting - every user-visible string the handlers send back.

Invariants:
    - Pure string builders: no IO, no logging
    - Internal failures are never described beyond INTERNAL_FAILURE_REPLY
"""

from triagebot.core.notification_list import NotificationEntry

INTERNAL_FAILURE_REPLY = "handling failed, error logged"

CONFIG_MISSING_MESSAGE = (
    "This repository is not enabled to use triagebot.\n"
    "Add a `{file_name}` in the root of the default branch to enable it."
)
CONFIG_MALFORMED_MESSAGE = "Malformed `{file_name}` in the default branch.\n{detail}"


def feature_not_enabled(feature: str, file_name: str = "triagebot.toml") -> str:
    return (
        f"The feature `{feature}` is not enabled in this repository.\n"
        f"To enable it add its section in the `{file_name}` "
        "in the root of the repository."
    )


def feature_not_enabled_in(feature: str, repository: str) -> str:
    return f"The feature `{feature}` is not enabled in the `{repository}` repository."


def error_comment(author: str, message: str, bot_name: str) -> str:
    """Body of the comment posted on GitHub when a command fails."""
    return (
        f"@{author}\n\n"
        f":warning: **Error**: {message}\n\n"
        f"Please let **`@{bot_name}`** know if you're having trouble with this bot."
    )


def parse_failed(family: str, detail: str, source_url: str | None = None) -> str:
    where = f" in [comment]({source_url})" if source_url else ""
    return f"Parsing {family} command{where} failed: {detail}"


def acknowledged(entries: list[NotificationEntry]) -> str:
    lines = ["Acknowledged:"]
    for entry in entries:
        title = entry.short_description or entry.origin_url
        meta = f" ({entry.metadata})" if entry.metadata else ""
        lines.append(f" * [{title}]({entry.origin_url}){meta}")
    return "\n".join(lines) + "\n"


def moved(from_: int, to: int) -> str:
    return f"Moved {from_} to {to}."


def unknown_zulip_user(zulip_id: int) -> str:
    return (
        "Unknown Zulip user. Please add "
        f"`zulip-id = {zulip_id}` to your file in the team repository."
    )


def delegated_notice(full_name: str, short_name: str, command: str, output: str) -> str:
    return f"{full_name} ({short_name}) ran `{command}` with output `{output}` as you."


def notification_listing(entries: list[NotificationEntry]) -> list[dict]:
    return [
        {
            "position": entry.position,
            "origin_url": entry.origin_url,
            "short_description": entry.short_description,
            "metadata": entry.metadata,
            "team_name": entry.team_name,
            "created_at": entry.created_at.isoformat(),
        }
        for entry in entries
    ]
