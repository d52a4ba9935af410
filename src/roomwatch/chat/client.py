"""Connection-facing state shared by the protocol decoder and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class Transport(Protocol):
    """Outbound side of the server connection.

    Connection management and the login request itself live outside
    roomwatch; the decoder only needs these two calls.
    """

    def send(self, text: str) -> None:
        """Send one raw protocol line (``"<room>|<text>"``)."""
        ...

    def login(self, challenge_key_id: str, challenge: str) -> None:
        """Start the login sequence for the challenge issued by the server."""
        ...


@dataclass(slots=True)
class ClientState:
    """Process-wide connection state.

    Attributes:
        challenge_key_id: Key id of the last ``challstr`` received.
        challenge: Challenge token of the last ``challstr`` received.
        lockdown: True while the server has announced an imminent restart.
    """

    challenge_key_id: str = ""
    challenge: str = ""
    lockdown: bool = False
