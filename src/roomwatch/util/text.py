"""Text helpers shared by the protocol decoder, commands and moderation."""

import re
import time
from datetime import datetime
from typing import Tuple

_NON_ID_CHARACTERS = re.compile(r"[^a-z0-9]+")


def to_id(text: object) -> str:
    """Return the normalized identifier form of ``text``.

    Identifiers are lowercase and contain only ASCII letters and digits, so
    ``"+Some User"`` and ``"someuser"`` name the same registry entry.
    """
    if text is None:
        return ""
    return _NON_ID_CHARACTERS.sub("", str(text).lower())


def split_rank(field: str) -> Tuple[str, str]:
    """Split a rank-prefixed user field into ``(rank, name)``.

    The server always prefixes user fields with one rank character, a space
    for regular users.
    """
    if not field:
        return " ", ""
    return field[0], field[1:]


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def format_time(time_ms: int) -> str:
    """Human-readable local timestamp for an epoch-milliseconds value."""
    return datetime.fromtimestamp(time_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")
