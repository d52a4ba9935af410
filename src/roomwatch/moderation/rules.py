"""Built-in abuse detectors.

Each detector inspects one normalized message (and the sender's history)
and returns a `PunishmentRule` when it fires.
"""

from __future__ import annotations

import re
from typing import Optional

from roomwatch.datatypes.moderation_datatypes import HISTORY_SIZE, ModerationRecord, PunishmentRule

WHITESPACE_PATTERN = re.compile(r"\s+")
NULL_CHARACTERS_PATTERN = re.compile(r"[\x00\u200b-\u200f]+")
CAPS_PATTERN = re.compile(r"[A-Z]")
STRETCH_PATTERN = re.compile(r"(.+)\1+")

FLOOD_MINIMUM_MESSAGES = HISTORY_SIZE
FLOOD_MAXIMUM_TIME = 5 * 1000
STRETCHING_MINIMUM = 20
CAPS_MINIMUM = 30


def normalize_message(message: str) -> str:
    """Drop whitespace runs and zero-width characters."""
    message = WHITESPACE_PATTERN.sub("", message.strip())
    return NULL_CHARACTERS_PATTERN.sub("", message)


def detect_flooding(record: ModerationRecord, time: int) -> Optional[PunishmentRule]:
    messages = record.messages
    if len(messages) < FLOOD_MINIMUM_MESSAGES:
        return None
    if time - messages[FLOOD_MINIMUM_MESSAGES - 1].time > FLOOD_MAXIMUM_TIME:
        return None
    return PunishmentRule(action="mute", rule="flooding", reason="please do not flood the chat")


def longest_stretch(message: str) -> int:
    """Length of the longest immediately repeated run in ``message``."""
    return max((len(match.group(0)) for match in STRETCH_PATTERN.finditer(message)), default=0)


def detect_stretching(message: str) -> Optional[PunishmentRule]:
    if longest_stretch(message) < STRETCHING_MINIMUM:
        return None
    return PunishmentRule(action="verbalwarn", rule="stretching", reason="please do not stretch")


def detect_caps(message: str) -> Optional[PunishmentRule]:
    if len(CAPS_PATTERN.findall(message)) < CAPS_MINIMUM:
        return None
    return PunishmentRule(action="verbalwarn", rule="caps", reason="please do not abuse caps")
