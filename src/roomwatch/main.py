"""
roomwatch replay runner
=======================

Feeds a recorded server transcript through the inbound pipeline. Outbound
lines (joins, warnings, room commands) are logged instead of sent, which
makes it easy to check moderation settings against real traffic.

Transcripts use the server's framing: a ``>roomid`` line sets the room for
the ``|TYPE|...`` lines that follow it.
"""

import os
import sys
from contextlib import nullcontext
from pathlib import Path
from typing import ContextManager, Iterable, List, TextIO

from dotenv import load_dotenv

from roomwatch.configuration.app_configuration import AppConfig, resolve_hook
from roomwatch.errors import ConfigurationError
from roomwatch.pipeline import build_pipeline
from roomwatch.protocol.message_parser import MessageParser
from roomwatch.util.logger import get_logger


logger = get_logger("main")


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. ROOMWATCH_HOME environment variable, if set.
    2. Otherwise the project root (three levels above this file).
    """
    if env_home := os.getenv("ROOMWATCH_HOME"):
        return Path(env_home).resolve()
    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()


class LoggingTransport:
    """Transport that records outbound lines instead of sending them."""

    def __init__(self) -> None:
        self.sent: List[str] = []

    def send(self, text: str) -> None:
        self.sent.append(text)
        logger.info("[REPLAY] >> %s", text)

    def login(self, challenge_key_id: str, challenge: str) -> None:
        logger.info("[REPLAY] login requested (key id %s)", challenge_key_id)


def load_config() -> AppConfig:
    """Load ``.env`` and the YAML configuration it points at.

    ``ROOMWATCH_CONFIG`` overrides the default ``config/app_config.yml``.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    config_path = os.getenv("ROOMWATCH_CONFIG") or str(BASE_DIR / "config" / "app_config.yml")
    return AppConfig(Path(config_path).resolve())


def load_commands(config: AppConfig) -> dict:
    """Return the command mapping named by ``hooks.commands``, if any."""
    hooks = config.get("hooks", {})
    path = hooks.get("commands") if isinstance(hooks, dict) else None
    if not path:
        return {}
    factory = resolve_hook(path)
    if factory is None:
        return {}
    commands = factory()
    if not isinstance(commands, dict):
        logger.error("[REPLAY] %s did not return a mapping of commands", path)
        return {}
    return commands


def replay(parser: MessageParser, lines: Iterable[str]) -> int:
    """Feed transcript ``lines`` to ``parser``; return how many were parsed."""
    room = parser.rooms.global_room
    parsed = 0
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if line.startswith(">"):
            room = parser.rooms.add(line[1:].strip())
            continue
        if not line.startswith("|"):
            continue
        parser.parse(line, room)
        parsed += 1
    return parsed


def open_transcript(argv: List[str]) -> ContextManager[TextIO]:
    if len(argv) > 1 and argv[1] != "-":
        return open(argv[1], "r", encoding="utf-8")
    return nullcontext(sys.stdin)


def main() -> int:
    """Entry point for the ``roomwatch`` console script."""
    config = load_config()
    try:
        config.validate()
    except ConfigurationError as exc:
        logger.critical("[REPLAY] Invalid configuration: %s", exc)
        return 1

    transport = LoggingTransport()
    parser = build_pipeline(config, transport, load_commands(config))

    with open_transcript(sys.argv) as transcript:
        parsed = replay(parser, transcript)

    logger.info(
        "[REPLAY] Parsed %d lines, %d outbound lines, lockdown=%s",
        parsed,
        len(transport.sent),
        parser.client.lockdown,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
