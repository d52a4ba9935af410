"""
Command invocation context and executor.

Commands are typed into chat (or sent by PM) with the configured prefix,
e.g. ``.roll 2d6``. The executor resolves the command against the registry
and runs it inside a `Context`. A handler that raises never escapes the
context: the failure comes back as a `CommandResult` so one broken command
cannot stop the decoder from processing the next line.
"""

from __future__ import annotations

import traceback
from typing import TYPE_CHECKING, Optional, Union

from roomwatch.chat.users import User
from roomwatch.command.registry import CommandRegistry
from roomwatch.datatypes.command_datatypes import CommandResult
from roomwatch.util.logger import get_logger
from roomwatch.util.text import format_time, now_ms

if TYPE_CHECKING:
    from roomwatch.chat.rooms import Room
    from roomwatch.configuration.app_configuration import AppConfig

logger = get_logger("commands")

Destination = Union["Room", User]


class Context:
    """One command invocation.

    Attributes:
        target: Argument text after the command name, stripped.
        room: Room the command was used in, or the sending user for PMs.
        user: User who issued the command.
        command: Resolved command identifier.
        time: Epoch milliseconds of the message (defaults to now).
    """

    def __init__(
        self,
        target: str,
        room: Destination,
        user: User,
        command: str,
        registry: CommandRegistry,
        time: Optional[int] = None,
    ) -> None:
        self.target = target.strip() if target else ""
        self.room = room
        self.user = user
        self.command = command
        self.time = time or now_ms()
        self._registry = registry

    def say(self, text: str) -> None:
        """Reply where the command was used."""
        self.room.say(text)

    def run(self, command: Optional[str] = None, target: Optional[str] = None) -> CommandResult:
        """Run this context's command, or dispatch ``command`` with ``target``.

        Handlers may call ``context.run("other", "args")`` to reuse another
        command with the same room, user and time.
        """
        if command is None:
            command = self.command
            target = self.target
        else:
            target = (target or "").strip()

        resolved = self._registry.resolve(command)
        if resolved is None:
            return CommandResult(success=False, command=command, target=target)
        command_id, handler = resolved

        try:
            handler.fn(self, target, self.room, self.user, command_id, self.time)
        except Exception as exc:
            return CommandResult(
                success=False,
                command=command_id,
                target=target,
                error=exc,
                diagnostic=self.describe_failure(exc, command_id, target),
            )
        return CommandResult(success=True, command=command_id, target=target)

    def describe_failure(self, exc: BaseException, command: str, target: str) -> str:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        location = "in PM" if isinstance(self.room, User) else self.room.id
        return (
            f"{stack}"
            "Additional information:\n"
            f"Command = {command}\n"
            f"Target = {target}\n"
            f"Time = {format_time(self.time)}\n"
            f"User = {self.user.name}\n"
            f"Room = {location}"
        )


class CommandExecutor:
    """Turns chat and PM messages into command invocations."""

    def __init__(self, config: "AppConfig", registry: CommandRegistry) -> None:
        self._config = config
        self.registry = registry

    def parse_command(
        self,
        message: str,
        room: Destination,
        user: User,
        time: Optional[int] = None,
    ) -> Optional[CommandResult]:
        """Run ``message`` as a command if it is one.

        Returns None when the message is plain chat or names an unknown
        command; both cases are indistinguishable to the sender.
        """
        message = message.strip()
        prefix = self._config.command_character
        if not message.startswith(prefix):
            return None

        command, _, target = message[len(prefix):].partition(" ")
        resolved = self.registry.resolve(command)
        if resolved is None:
            return None
        command_id, _ = resolved

        result = Context(target, room, user, command_id, self.registry, time).run()
        if not result.success:
            logger.error("[COMMANDS] Command %s failed:\n%s", command_id, result.diagnostic)
        return result
