"""Tests for the transcript replay runner."""

from roomwatch import main as main_module
from roomwatch.configuration.app_configuration import AppConfig
from roomwatch.pipeline import build_pipeline


def load_commands_for_tests():
    return {"ping": lambda context, *args: context.say("pong")}


def test_replay_tracks_room_headers(config, transport):
    parser = build_pipeline(config, transport, {"ping": lambda context, *args: context.say("pong")})
    transcript = [
        ">lobby\n",
        "|init|chat\n",
        "|J| Bob\n",
        "plain log text\n",
        "|c| Bob|.ping\n",
    ]

    parsed = main_module.replay(parser, transcript)

    assert parsed == 3
    assert parser.rooms.get("lobby") is not None
    assert transport.sent == ["lobby|pong"]


def test_load_commands_from_hook():
    config = AppConfig.from_mapping({"hooks": {"commands": f"{__name__}:load_commands_for_tests"}})

    assert set(main_module.load_commands(config)) == {"ping"}
    assert main_module.load_commands(AppConfig.from_mapping({})) == {}


def test_main_replays_file(tmp_path, monkeypatch):
    config_path = tmp_path / "app_config.yml"
    config_path.write_text("username: RoomWatch\nrooms: [lobby]\n", encoding="utf-8")
    transcript = tmp_path / "session.log"
    transcript.write_text("|updateuser|RoomWatch|1|1\n", encoding="utf-8")

    monkeypatch.setenv("ROOMWATCH_CONFIG", str(config_path))
    monkeypatch.setattr(main_module.sys, "argv", ["roomwatch", str(transcript)])

    assert main_module.main() == 0


def test_main_rejects_invalid_rooms(tmp_path, monkeypatch):
    config_path = tmp_path / "app_config.yml"
    config_path.write_text("rooms: lobby\n", encoding="utf-8")

    monkeypatch.setenv("ROOMWATCH_CONFIG", str(config_path))
    monkeypatch.setattr(main_module.sys, "argv", ["roomwatch", "-"])

    assert main_module.main() == 1
