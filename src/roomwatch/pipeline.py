"""Wiring of the inbound pipeline from its collaborators."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from roomwatch.chat.client import ClientState, Transport
from roomwatch.chat.rooms import RoomRegistry
from roomwatch.chat.users import UserRegistry
from roomwatch.command.context import CommandExecutor
from roomwatch.command.registry import CommandRegistry
from roomwatch.configuration.app_configuration import AppConfig
from roomwatch.moderation.moderation_engine import ModerationEngine
from roomwatch.protocol.format_catalog import FormatCatalog
from roomwatch.protocol.message_parser import MessageParser


def build_pipeline(
    config: AppConfig,
    transport: Transport,
    commands: Optional[Mapping[str, Any] | CommandRegistry] = None,
) -> MessageParser:
    """Create every component and return the decoder that drives them.

    Parameters
    ----------
    config:
        Loaded application configuration.
    transport:
        Outbound side of the server connection.
    commands:
        Either a ready `CommandRegistry` or a ``{name: handler-or-alias}``
        mapping. Defaults to an empty registry.
    """
    if isinstance(commands, CommandRegistry):
        registry = commands
    else:
        registry = CommandRegistry.from_mapping(commands or {})

    users = UserRegistry(config.username, transport, config.ranks)
    rooms = RoomRegistry(transport, users)
    return MessageParser(
        config=config,
        users=users,
        rooms=rooms,
        client=ClientState(),
        transport=transport,
        executor=CommandExecutor(config, registry),
        moderation=ModerationEngine(config, users),
        formats=FormatCatalog(),
    )
