"""Message text helpers."""

# Discord has a 2000 character limit on message content
MESSAGE_LIMIT = 2000


def truncate(text: str, limit: int = MESSAGE_LIMIT, suffix: str = "...") -> str:
    """Shorten text to fit in one message."""
    if len(text) <= limit:
        return text
    return text[: limit - len(suffix)] + suffix
