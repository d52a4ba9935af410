"""Tests for the automatic moderation engine."""

import pytest

from roomwatch.configuration.app_configuration import AppConfig
from roomwatch.datatypes.moderation_datatypes import PunishmentRule
from roomwatch.moderation import rules
from roomwatch.moderation.moderation_engine import ModerationEngine

CAPS_MESSAGE = "ABCDEFGHIJKLMNOPQRSTUVWXYZABCD"


@pytest.fixture
def engine(parser) -> ModerationEngine:
    return parser.moderation


@pytest.fixture
def spammer(parser, room):
    user = parser.users.add("Spammer")
    room.set_rank(user, " ")
    return user


def flood(engine, room, user, start=0, count=5, step=1000):
    results = []
    for index in range(count):
        results.append(engine.evaluate(f"message {index}", room, user, start + index * step))
    return results


class TestRules:
    def test_normalize_strips_whitespace_and_zero_width(self):
        assert rules.normalize_message("  a b\tc\u200b\u200fd\x00 ") == "abcd"

    def test_stretching_threshold(self):
        assert rules.detect_stretching("a" * 20) is not None
        assert rules.detect_stretching("hi" + "a" * 19) is None
        assert rules.detect_stretching("ab" * 10).rule == "stretching"

    def test_caps_threshold(self):
        assert rules.detect_caps(CAPS_MESSAGE).rule == "caps"
        assert rules.detect_caps(CAPS_MESSAGE[:29]) is None


class TestGate:
    def test_requires_staff_rank(self, engine, parser, room, spammer, transport):
        room.set_rank(parser.users.self_user, "+")

        assert flood(engine, room, spammer)[-1] is None
        assert transport.sent == []
        assert room not in spammer.room_data

    def test_requires_moderation_enabled(self, config_data, parser, room, spammer, transport):
        config_data["allow_moderation"] = {"help": True}
        engine = ModerationEngine(AppConfig.from_mapping(config_data), parser.users)

        assert flood(engine, room, spammer)[-1] is None
        assert transport.sent == []

    def test_per_room_switch(self, config_data, parser, room, spammer, transport):
        config_data["allow_moderation"] = {"lobby": True}
        engine = ModerationEngine(AppConfig.from_mapping(config_data), parser.users)

        assert flood(engine, room, spammer)[-1].rule == "flooding"

    def test_requires_punishment_tables(self, config_data, parser, room, spammer, transport):
        del config_data["punishment_actions"]
        engine = ModerationEngine(AppConfig.from_mapping(config_data), parser.users)

        assert flood(engine, room, spammer)[-1] is None
        assert transport.sent == []


class TestFlooding:
    def test_fifth_message_within_window_is_punished_once(self, engine, room, spammer, transport):
        results = flood(engine, room, spammer)

        assert results[:4] == [None, None, None, None]
        assert results[4] == PunishmentRule("mute", "flooding", "please do not flood the chat")
        assert transport.sent == ["lobby|/mute Spammer, please do not flood the chat"]

    def test_later_message_does_not_retrigger(self, engine, room, spammer, transport):
        flood(engine, room, spammer)

        assert engine.evaluate("calm now", room, spammer, 14000) is None
        assert len(transport.sent) == 1

    def test_slow_messages_are_not_flooding(self, engine, room, spammer, transport):
        assert flood(engine, room, spammer, step=1500)[-1] is None
        assert transport.sent == []

    def test_history_is_bounded(self, engine, room, spammer):
        flood(engine, room, spammer, count=12, step=2000)

        record = spammer.room_data[room]
        assert len(record.messages) == rules.FLOOD_MINIMUM_MESSAGES
        assert record.messages[0].text == "message11"


class TestEscalation:
    def test_cooldown_suppresses_second_punishment(self, config, engine, room, spammer, transport):
        config.moderation_hook = lambda message, room, user, time: (
            [PunishmentRule("mute", "badword", "no")] if "badword" in message else []
        )

        assert engine.evaluate("badword", room, spammer, 1000).action == "mute"
        assert engine.evaluate("badword again", room, spammer, 3000) is None
        assert transport.sent == ["lobby|/mute Spammer, no"]

    def test_repeat_offense_climbs_the_ladder(self, engine, room, spammer, transport):
        first = engine.evaluate(CAPS_MESSAGE, room, spammer, 1000)
        second = engine.evaluate(CAPS_MESSAGE, room, spammer, 2000)

        assert first.action == "verbalwarn"
        assert second.action == "warn"
        assert transport.sent == [
            "lobby|Spammer, please do not abuse caps",
            "lobby|/warn Spammer, please do not abuse caps",
        ]
        record = spammer.room_data[room]
        assert record.points == 2
        assert record.last_action == 2000

    def test_verbal_warning_has_no_cooldown(self, config_data, parser, room, spammer, transport):
        config_data["punishment_actions"] = {"5": "roomban"}
        engine = ModerationEngine(AppConfig.from_mapping(config_data), parser.users)

        engine.evaluate(CAPS_MESSAGE, room, spammer, 1000)
        engine.evaluate(CAPS_MESSAGE, room, spammer, 1500)

        assert transport.sent == ["lobby|Spammer, please do not abuse caps"] * 2
        assert spammer.room_data[room].last_action == 0

    def test_highest_severity_wins(self, config, engine, room, spammer, transport):
        config.moderation_hook = lambda message, room, user, time: [
            {"action": "hourmute", "rule": "links", "reason": "no links"},
            "ignored",
        ]

        applied = engine.evaluate(CAPS_MESSAGE, room, spammer, 1000)

        assert applied == PunishmentRule("hourmute", "links", "no links")
        assert spammer.room_data[room].points == 4

    def test_ties_keep_detector_order(self, config, engine, room, spammer, transport):
        config.moderation_hook = lambda message, room, user, time: [
            PunishmentRule("verbalwarn", "custom", "custom reason"),
        ]

        applied = engine.evaluate(CAPS_MESSAGE, room, spammer, 1000)

        assert applied.rule == "custom"

    def test_reason_override(self, config_data, parser, room, spammer, transport):
        config_data["punishment_reasons"] = {"caps": "calm down"}
        engine = ModerationEngine(AppConfig.from_mapping(config_data), parser.users)

        engine.evaluate(CAPS_MESSAGE, room, spammer, 1000)

        assert transport.sent == ["lobby|Spammer, calm down"]

    def test_roomban_downgraded_without_ban_rank(self, config, engine, parser, room, spammer, transport):
        config.moderation_hook = lambda message, room, user, time: [PunishmentRule("roomban", "spam", "spam")]

        assert engine.evaluate("x", room, spammer, 1000).action == "hourmute"

        room.set_rank(parser.users.self_user, "@")
        assert engine.evaluate("x", room, spammer, 10000).action == "roomban"
        assert transport.sent[-1] == "lobby|/roomban Spammer, spam"

    def test_failing_hook_falls_back_to_builtin_rules(self, config, engine, room, spammer):
        def broken(message, room, user, time):
            raise RuntimeError("hook failed")

        config.moderation_hook = broken

        assert engine.evaluate(CAPS_MESSAGE, room, spammer, 1000).rule == "caps"
