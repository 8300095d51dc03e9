"""Display helpers for conversation lists."""

from datetime import UTC, datetime


def participant_label(participant_id: str | None) -> str:
    """Placeholder display name for a participant.

    Examples:
        >>> participant_label("user-8f3a91c2")
        'User 91c2'
        >>> participant_label(None)
        'User Unknown'
    """
    if not participant_id:
        return "User Unknown"
    return f"User {participant_id[-4:]}"


def format_last_message_time(timestamp: datetime, now: datetime | None = None) -> str:
    """Relative age of a message for list display.

    Args:
        timestamp: When the message was sent.
        now: Reference time (defaults to the current UTC time).

    Returns:
        "Just now" under an hour, "Nh ago" under a day, "Nd ago" under a
        week, otherwise the calendar date.
    """
    now = now or datetime.now(UTC)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    hours = (now - timestamp).total_seconds() / 3600
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{int(hours)}h ago"
    if hours < 168:
        return f"{int(hours // 24)}d ago"
    return timestamp.date().isoformat()
