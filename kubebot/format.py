"""Text formatting helpers for chat messages."""

from __future__ import annotations

from collections.abc import Iterable

from kubebot.events import Event, EventType

_BULLET_POINT_FMT = "- {}\n"


def code_block(msg: str) -> str:
    """Trim whitespace and wrap the message in a code block."""
    return f"```\n{msg.strip()}\n```"


def adaptive_code_block(msg: str) -> str:
    """Wrap in a code block, or an inline code span for single-line text."""
    trimmed = msg.strip()
    if "\n" in msg:
        return f"```\n{trimmed}\n```"
    return f"`{trimmed}`"


def _join_messages(msgs: Iterable[str], prefix: str) -> str:
    return "".join(f"{prefix}{m}\n" for m in msgs)


def join_messages(msgs: Iterable[str]) -> str:
    """Join messages, each followed by a newline."""
    return _join_messages(msgs, "")


def bullet_point_list_from_messages(msgs: Iterable[str]) -> str:
    """Create a Markdown bullet-point list from messages."""
    return _join_messages(msgs, "• ")


def bullet_point_event_attachments(event: Event) -> str:
    """Return titled bullet lists of messages, recommendations and warnings."""
    parts = []
    for title, items in (
        ("Messages", event.messages),
        ("Recommendations", event.recommendations),
        ("Warnings", event.warnings),
    ):
        listing = bullet_point_list_from_messages(items)
        if listing:
            parts.append(f"*{title}:*\n{listing}")
    return "".join(parts)


def short_notification_header(event: Event) -> str:
    """Return a short one-line header for an event notification."""
    resource_name = event.resource_name()
    etype = event.type
    if etype in (EventType.CREATE, EventType.DELETE, EventType.UPDATE):
        return (
            f"{event.kind} *{resource_name}* has been {etype.value}d "
            f"in *{event.cluster}* cluster"
        )
    if etype is EventType.ERROR:
        return f"Error occurred for {event.kind} *{resource_name}* in *{event.cluster}* cluster"
    if etype is EventType.WARNING:
        return f"Warning for {event.kind} *{resource_name}* in *{event.cluster}* cluster"
    if etype in (EventType.INFO, EventType.NORMAL):
        return f"Info for {event.kind} *{resource_name}* in *{event.cluster}* cluster"
    return ""


def _message_attachments(event: Event) -> str:
    text = join_messages(event.messages)
    if event.recommendations:
        text += "Recommendations:\n"
        text += "".join(_BULLET_POINT_FMT.format(m) for m in event.recommendations)
    if event.warnings:
        text += "Warnings:\n"
        text += "".join(_BULLET_POINT_FMT.format(m) for m in event.warnings)
    if not text:
        return ""
    return f"```\n{text}```"


def short_message(event: Event) -> str:
    """Render an event in the short notification format."""
    return f"{short_notification_header(event)}\n{_message_attachments(event)}"