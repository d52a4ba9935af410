"""
Command registry entries and execution results.

A registry entry is either a `Handler` wrapping a callable or an `Alias`
naming another registry key. `CommandResult` reports the outcome of running
a handler so callers decide how to log a failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

# fn(context, target, room, user, command, time)
CommandFunction = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Handler:
    """Registry entry that executes ``fn``."""

    fn: CommandFunction


@dataclass(frozen=True, slots=True)
class Alias:
    """Registry entry that points at another registry key."""

    target: str


RegistryEntry = Union[Handler, Alias]


@dataclass(slots=True)
class CommandResult:
    """Outcome of one command invocation.

    Attributes:
        success: True when the handler returned without raising.
        command: Resolved command identifier.
        target: Argument string the handler received.
        error: Exception raised by the handler, if any.
        diagnostic: Traceback plus invocation context for failed runs.
    """

    success: bool
    command: str
    target: str = ""
    error: Optional[BaseException] = None
    diagnostic: str = ""

    def __bool__(self) -> bool:
        return self.success
