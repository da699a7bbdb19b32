"""Shared item name and timestamp normalization utilities."""

import re
from collections.abc import Iterable
from datetime import datetime, timezone

_WHITESPACE = re.compile(r"\s+")


def normalize_item_name(item_name: object) -> str:
    """Normalize item names into a canonical identity key.

    Case and surrounding/inner whitespace never distinguish two items.
    """
    if item_name is None:
        return ""
    return _WHITESPACE.sub(" ", str(item_name).strip().lower())


def normalize_items(names: Iterable[object] | None) -> list[str]:
    """Normalize, deduplicate and drop empty names, keeping first-seen order."""
    seen: dict[str, None] = {}
    for name in names or []:
        key = normalize_item_name(name)
        if key:
            seen.setdefault(key, None)
    return list(seen)


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Returns None for anything that can't be parsed; naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None
