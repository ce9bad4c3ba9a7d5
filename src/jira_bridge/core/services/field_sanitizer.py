from typing import Any

# Presentation-only keys the tracker decorates every object with.
PRESENTATION_KEYS = frozenset(
    {
        "avatarUrls",
        "iconUrl",
        "self",
        "accountType",
        "active",
        "content",
        "thumbnail",
        "isLast",
        "startAt",
        "maxResults",
        "total",
        "attachment",
    }
)


def sanitize_value(value: Any) -> Any:
    """Return a copy of ``value`` without presentation keys at any depth."""
    if isinstance(value, dict):
        return {k: sanitize_value(v) for k, v in value.items() if k not in PRESENTATION_KEYS}
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    return value
