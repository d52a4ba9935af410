"""Game format descriptors announced by the server."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class FormatEntry:
    """One entry of the format catalog.

    Attributes:
        name: Display name with visibility suffixes removed.
        id: Normalized identifier of ``name``.
        section: Section header the entry was listed under.
        search_show: Visible in ladder search.
        challenge_show: Available for direct challenges.
        tournament_show: Available for tournaments.
    """

    name: str
    id: str
    section: str
    search_show: bool = True
    challenge_show: bool = True
    tournament_show: bool = True
