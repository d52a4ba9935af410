"""Command registry with one level of alias indirection."""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Union

from roomwatch.datatypes.command_datatypes import Alias, CommandFunction, Handler, RegistryEntry
from roomwatch.util.text import to_id


class CommandRegistry:
    """Maps command identifiers to handlers or aliases.

    Keys are stored in normalized identifier form, so ``"Roll"`` and
    ``"roll"`` name the same command.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, RegistryEntry] = {}

    @classmethod
    def from_mapping(cls, commands: Mapping[str, Union[CommandFunction, str, RegistryEntry]]) -> "CommandRegistry":
        """Build a registry from ``{name: callable}`` and ``{name: "other"}`` pairs."""
        registry = cls()
        for name, entry in commands.items():
            if isinstance(entry, (Handler, Alias)):
                registry._entries[to_id(name)] = entry
            elif isinstance(entry, str):
                registry.alias(name, entry)
            else:
                registry.register(name, entry)
        return registry

    def __contains__(self, name: object) -> bool:
        return to_id(name) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def register(self, name: str, fn: CommandFunction) -> None:
        if not callable(fn):
            raise TypeError(f"command {name!r} handler must be callable")
        self._entries[to_id(name)] = Handler(fn)

    def alias(self, name: str, target: str) -> None:
        self._entries[to_id(name)] = Alias(to_id(target))

    def entry(self, name: str) -> Optional[RegistryEntry]:
        return self._entries.get(to_id(name))

    def resolve(self, command: str) -> Optional[tuple[str, Handler]]:
        """Return ``(command id, handler)`` for ``command`` or None.

        Exactly one alias is followed; an alias that points at another alias
        (or at nothing) does not resolve.
        """
        command_id = to_id(command)
        entry = self._entries.get(command_id)
        if isinstance(entry, Alias):
            command_id = entry.target
            entry = self._entries.get(command_id)
        if isinstance(entry, Handler):
            return command_id, entry
        return None
