"""
Automatic chat moderation.

Every chat message from a regular user is run through the abuse detectors.
When one or more fire, the candidate with the highest configured severity is
escalated against the user's record and applied to the room: either a
plain-text warning (``verbalwarn``) or a room command such as
``/mute user, reason``.

Configuration consumed (see `AppConfig`):

- ``allow_moderation``: global switch or per-room mapping.
- ``punishment_points``: severity of each action, e.g. ``{verbalwarn: 1, mute: 2}``.
- ``punishment_actions``: escalation ladder keyed by accumulated points.
- ``punishment_reasons``: optional per-rule replacement reasons.
- ``hooks.moderate``: optional callable contributing extra candidates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from roomwatch.chat.users import User, UserRegistry
from roomwatch.datatypes.moderation_datatypes import ModerationRecord, PunishmentRule
from roomwatch.moderation import rules
from roomwatch.util.logger import get_logger

if TYPE_CHECKING:
    from roomwatch.chat.rooms import Room
    from roomwatch.configuration.app_configuration import AppConfig

logger = get_logger("moderation_engine")

PUNISHMENT_COOLDOWN = 5 * 1000

# Rank the client needs before it moderates a room at all
MINIMUM_MODERATION_RANK = "%"
# Rank the client needs to issue room bans
BAN_RANK = "@"
# Users at or above this rank are never moderated
ELEVATED_RANK = "+"

VERBAL_WARNING = "verbalwarn"


class ModerationEngine:
    """Tracks per-user history and applies escalating punishments."""

    def __init__(self, config: "AppConfig", users: UserRegistry) -> None:
        self._config = config
        self._users = users

    def is_enabled(self, room: "Room") -> bool:
        """Return whether moderation can run in ``room`` at all."""
        if not self._users.self_user.has_rank(room, MINIMUM_MODERATION_RANK):
            return False
        if not self._config.is_moderation_allowed(room.id):
            return False
        return bool(self._config.punishment_points and self._config.punishment_actions)

    def evaluate(self, message: str, room: "Room", user: User, time: int) -> Optional[PunishmentRule]:
        """Record ``message`` and punish ``user`` if a rule fires.

        Returns:
            The punishment applied (with its final action and reason), or
            None when nothing was applied.
        """
        if not self.is_enabled(room):
            return None

        message = rules.normalize_message(message)

        record = user.room_data.get(room)
        if record is None:
            record = ModerationRecord()
            user.room_data[room] = record
        record.record(message, time)

        # Lagged or queued copies of the burst that was just punished
        if record.last_action and time - record.last_action < PUNISHMENT_COOLDOWN:
            return None

        candidates = self.collect_candidates(message, room, user, time, record)
        if not candidates:
            return None

        # Stable: equal severities keep detector order
        candidates.sort(key=lambda candidate: self._config.severity(candidate.action), reverse=True)
        return self.apply(candidates[0], room, user, time, record)

    def collect_candidates(
        self,
        message: str,
        room: "Room",
        user: User,
        time: int,
        record: ModerationRecord,
    ) -> List[PunishmentRule]:
        candidates: List[PunishmentRule] = []

        hook = self._config.moderation_hook
        if hook is not None:
            try:
                result = hook(message, room, user, time)
            except Exception:
                logger.exception("[MODERATION] moderate hook failed for %s in %s", user.name, room.id)
                result = None
            if isinstance(result, (list, tuple)):
                for value in result:
                    candidate = PunishmentRule.coerce(value)
                    if candidate is not None:
                        candidates.append(candidate)

        for candidate in (
            rules.detect_flooding(record, time),
            rules.detect_stretching(message),
            rules.detect_caps(message),
        ):
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def apply(
        self,
        punishment: PunishmentRule,
        room: "Room",
        user: User,
        time: int,
        record: ModerationRecord,
    ) -> PunishmentRule:
        points = self._config.severity(punishment.action)
        reason = self._config.punishment_reasons.get(punishment.rule) or punishment.reason
        action = punishment.action

        if record.points >= points:
            record.points += 1
            action = self._config.escalation_action(record.points) or action
        else:
            record.points = points

        if action == VERBAL_WARNING:
            room.say(f"{user.name}, {reason}")
            logger.debug("[MODERATION] Warned %s in %s (%s)", user.name, room.id, punishment.rule)
            return PunishmentRule(action=action, rule=punishment.rule, reason=reason)

        if action == "roomban" and not self._users.self_user.has_rank(room, BAN_RANK):
            action = "hourmute"
        room.say(f"/{action} {user.name}, {reason}")
        record.last_action = time
        logger.info("[MODERATION] %s %s in %s (%s, %d points)", action, user.name, room.id, punishment.rule, record.points)
        return PunishmentRule(action=action, rule=punishment.rule, reason=reason)
