"""
Pytest configuration and fixtures for roomwatch tests.
"""

import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from roomwatch.configuration.app_configuration import AppConfig  # noqa: E402
from roomwatch.pipeline import build_pipeline  # noqa: E402


class RecordingTransport:
    """Transport double that keeps every outbound line."""

    def __init__(self) -> None:
        self.sent: List[str] = []
        self.logins: List[Tuple[str, str]] = []

    def send(self, text: str) -> None:
        self.sent.append(text)

    def login(self, challenge_key_id: str, challenge: str) -> None:
        self.logins.append((challenge_key_id, challenge))


BASE_CONFIG = {
    "username": "RoomWatch",
    "command_character": ".",
    "rooms": ["lobby", "help"],
    "allow_moderation": True,
    "punishment_points": {"verbalwarn": 1, "warn": 2, "mute": 3, "hourmute": 4, "roomban": 5},
    "punishment_actions": {"2": "warn", "3": "mute", "4": "hourmute", "5": "roomban"},
}


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def config_data() -> dict:
    return {key: (value.copy() if isinstance(value, (dict, list)) else value) for key, value in BASE_CONFIG.items()}


@pytest.fixture
def config(config_data) -> AppConfig:
    return AppConfig.from_mapping(config_data)


@pytest.fixture
def commands() -> dict:
    return {}


@pytest.fixture
def parser(config, transport, commands):
    return build_pipeline(config, transport, commands)


@pytest.fixture
def room(parser):
    """The ``lobby`` room with the client joined as a driver (``%``)."""
    lobby = parser.rooms.add("lobby")
    lobby.set_rank(parser.users.self_user, "%")
    return lobby
