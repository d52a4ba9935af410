"""
Data structures for the automatic moderation pipeline.

- `ChatLine`: one normalized chat message and the time it was observed.
- `ModerationRecord`: rolling history and escalation state of one user in
  one room.
- `PunishmentRule`: a candidate punishment produced by one abuse detector.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Mapping, Optional

# Only the newest messages are ever inspected by the flood detector.
HISTORY_SIZE = 5


@dataclass(slots=True)
class ChatLine:
    """A normalized chat message.

    Attributes:
        text: Message with whitespace and zero-width characters removed.
        time: Epoch milliseconds the message was sent at.
    """

    text: str
    time: int


@dataclass(slots=True)
class ModerationRecord:
    """Moderation state of one user in one room.

    Created lazily on the first observed message and kept for as long as the
    user object lives.

    Attributes:
        messages: Recent messages, newest first, bounded to ``HISTORY_SIZE``.
        points: Accumulated escalation counter, never decreases.
        last_action: Time of the last applied punishment (0 when none).
    """

    messages: Deque[ChatLine] = field(default_factory=lambda: deque(maxlen=HISTORY_SIZE))
    points: int = 0
    last_action: int = 0

    def record(self, text: str, time: int) -> None:
        """Prepend a message to the history."""
        self.messages.appendleft(ChatLine(text, time))


@dataclass(slots=True)
class PunishmentRule:
    """A candidate punishment.

    Attributes:
        action: Room command name (``mute``, ``hourmute``, ``roomban``) or
            ``verbalwarn`` for a plain text warning.
        rule: Name of the rule that fired (``flooding``, ``stretching``...).
        reason: Human-readable reason shown to the user.
    """

    action: str
    rule: str
    reason: str

    @classmethod
    def coerce(cls, value: Any) -> Optional["PunishmentRule"]:
        """Accept a PunishmentRule or a mapping with the same keys."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping) and value.get("action"):
            return cls(
                action=str(value["action"]),
                rule=str(value.get("rule", "")),
                reason=str(value.get("reason", "")),
            )
        return None
