"""
Decoder for inbound server lines.

Every line has the shape ``|TYPE|field1|field2|...``. The decoder splits off
the type tag, lets the optional ``parse_message`` hook veto the line, then
hands the fields to the handler for that type. Unknown types are ignored.

Chat lines (``c`` and ``c:``) feed the command executor and, for users
below the elevated rank, the moderation engine. Private messages only feed
the command executor. Lines are processed one at a time to completion.
"""

from __future__ import annotations

import sys
from typing import Callable, Dict, List

from roomwatch.chat.client import ClientState, Transport
from roomwatch.chat.rooms import Room, RoomRegistry
from roomwatch.chat.users import UserRegistry
from roomwatch.command.context import CommandExecutor
from roomwatch.configuration.app_configuration import AppConfig
from roomwatch.errors import LoginFailedError
from roomwatch.moderation.moderation_engine import ELEVATED_RANK, ModerationEngine
from roomwatch.protocol.format_catalog import FormatCatalog
from roomwatch.util.logger import get_logger
from roomwatch.util.text import now_ms, split_rank, to_id

logger = get_logger("message_parser")

DELIMITER = "|"
LOGIN_SUCCESS_FLAG = "1"
EMPTY_SNAPSHOT = "0"

RESTART_BANNER = ('<div class="broadcast-red">', "The server is restarting soon.")
RESTART_CANCELED_BANNER = ('<div class="broadcast-green">', "The server restart was canceled.")

FieldHandler = Callable[[List[str], Room], None]


def field(fields: List[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


class MessageParser:
    """Routes each protocol line to the handler for its message type."""

    def __init__(
        self,
        config: AppConfig,
        users: UserRegistry,
        rooms: RoomRegistry,
        client: ClientState,
        transport: Transport,
        executor: CommandExecutor,
        moderation: ModerationEngine,
        formats: FormatCatalog,
    ) -> None:
        self.config = config
        self.users = users
        self.rooms = rooms
        self.client = client
        self.transport = transport
        self.executor = executor
        self.moderation = moderation
        self.formats = formats

        self._handlers: Dict[str, FieldHandler] = {
            "challstr": self.on_challstr,
            "updateuser": self.on_update_user,
            "init": self.on_init,
            "noinit": self.on_noinit,
            "deinit": self.on_deinit,
            "users": self.on_users,
            "formats": self.on_formats,
            "J": self.on_join,
            "j": self.on_join,
            "L": self.on_leave,
            "l": self.on_leave,
            "N": self.on_rename,
            "n": self.on_rename,
            "c": self.on_chat,
            "c:": self.on_timestamped_chat,
            "pm": self.on_private_message,
            "raw": self.on_raw,
        }

    def parse(self, message: str, room: Room) -> None:
        """Decode and dispatch one line received in ``room``."""
        parts = message.split(DELIMITER)[1:]
        if not parts:
            return
        message_type, fields = parts[0], parts[1:]

        hook = self.config.parse_message_hook
        if hook is not None and hook(room, message_type, fields) is False:
            return

        handler = self._handlers.get(message_type)
        if handler is not None:
            handler(fields, room)

    # --------------------------
    # Session
    # --------------------------
    def on_challstr(self, fields: List[str], room: Room) -> None:
        self.client.challenge_key_id = field(fields, 0)
        self.client.challenge = field(fields, 1)
        self.transport.login(self.client.challenge_key_id, self.client.challenge)

    def on_update_user(self, fields: List[str], room: Room) -> None:
        if field(fields, 0) != self.config.username:
            return
        try:
            self.check_login(field(fields, 1))
        except LoginFailedError as exc:
            logger.critical("[PARSER] %s", exc)
            sys.exit(1)

        logger.info("[PARSER] Successfully logged in as %s", self.config.username)
        for room_id in self.config.rooms:
            self.transport.send(f"|/join {room_id}")

    def check_login(self, flag: str) -> None:
        if flag != LOGIN_SUCCESS_FLAG:
            raise LoginFailedError(f"Failed to log in as {self.config.username}")

    # --------------------------
    # Rooms and membership
    # --------------------------
    def on_init(self, fields: List[str], room: Room) -> None:
        room.on_join(self.users.self_user, " ")
        logger.info("[PARSER] Joined room: %s", room.id)

    def on_noinit(self, fields: List[str], room: Room) -> None:
        logger.warning("[PARSER] Could not join room: %s", room.id)
        self.rooms.destroy(room)

    def on_deinit(self, fields: List[str], room: Room) -> None:
        self.rooms.destroy(room)

    def on_users(self, fields: List[str], room: Room) -> None:
        snapshot = field(fields, 0)
        if not snapshot or snapshot == EMPTY_SNAPSHOT:
            return
        # The first entry is the user count
        for entry in snapshot.split(",")[1:]:
            rank, name = split_rank(entry)
            user = self.users.add(name)
            if user is None:
                continue
            room.set_rank(user, rank)

    def on_join(self, fields: List[str], room: Room) -> None:
        rank, name = split_rank(field(fields, 0))
        user = self.users.add(name)
        if user is None:
            return
        room.on_join(user, rank)

    def on_leave(self, fields: List[str], room: Room) -> None:
        _, name = split_rank(field(fields, 0))
        user = self.users.add(name)
        if user is None:
            return
        room.on_leave(user)

    def on_rename(self, fields: List[str], room: Room) -> None:
        user = self.users.add(field(fields, 1))
        if user is None:
            return
        room.on_rename(user, field(fields, 0))

    def on_formats(self, fields: List[str], room: Room) -> None:
        self.formats.parse(fields)

    # --------------------------
    # Chat
    # --------------------------
    def on_chat(self, fields: List[str], room: Room) -> None:
        self.handle_chat(field(fields, 0), fields[1:], room, now_ms())

    def on_timestamped_chat(self, fields: List[str], room: Room) -> None:
        try:
            time = int(field(fields, 0)) * 1000
        except ValueError:
            return
        self.handle_chat(field(fields, 1), fields[2:], room, time)

    def handle_chat(self, user_field: str, body: List[str], room: Room, time: int) -> None:
        rank, name = split_rank(user_field)
        user = self.users.get(name)
        if user is None:
            return
        if user.rooms.get(room) != rank:
            room.set_rank(user, rank)

        message = DELIMITER.join(body)
        if user is self.users.self_user:
            self.acknowledge(message, room)
            return

        self.executor.parse_command(message, room, user, time)
        if not user.has_rank(room, ELEVATED_RANK):
            self.moderation.evaluate(message, room, user, time)

    def acknowledge(self, message: str, room: Room) -> bool:
        """Fire the listener waiting for the client's own ``message``, once."""
        listener = room.listeners.pop(to_id(message), None)
        if listener is None:
            return False
        listener()
        return True

    def on_private_message(self, fields: List[str], room: Room) -> None:
        _, name = split_rank(field(fields, 0))
        user = self.users.add(name)
        if user is None or user is self.users.self_user:
            return
        self.executor.parse_command(DELIMITER.join(fields[2:]), user, user)

    def on_raw(self, fields: List[str], room: Room) -> None:
        message = DELIMITER.join(fields)
        if all(marker in message for marker in RESTART_BANNER):
            self.client.lockdown = True
            logger.warning("[PARSER] Server restart announced, entering lockdown")
        elif all(marker in message for marker in RESTART_CANCELED_BANNER):
            self.client.lockdown = False
            logger.info("[PARSER] Server restart canceled, leaving lockdown")
