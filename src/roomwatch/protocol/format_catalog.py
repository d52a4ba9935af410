"""
Parser for the ``formats`` list the server sends after connecting.

The list is a flat sequence of strings. A header marker (an empty string or
a comma followed by a number) announces that the next element is a section
name; every other element is a format descriptor belonging to the most
recently named section. Descriptors carry their visibility either as a
trailing hexadecimal bitmask (``"Name,e"``) or, for older servers, as
trailing ``,#`` / ``,,`` / ``,`` suffixes.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from roomwatch.datatypes.format_datatypes import FormatEntry
from roomwatch.util.logger import get_logger
from roomwatch.util.text import to_id

logger = get_logger("format_catalog")

SEARCH_SHOW_BIT = 0x2
CHALLENGE_SHOW_BIT = 0x4
TOURNAMENT_SHOW_BIT = 0x8

# Column marker that never opens a section
COLUMN_MARKER = ",LL"
# A comma followed by anything that starts with an integer
SECTION_MARKER_PATTERN = re.compile(r",\s*[+-]?[0-9]")


class ClearableCache(Protocol):
    def clear(self) -> None:
        ...


class CatalogState(Enum):
    AWAITING_ENTRY = "awaiting_entry"
    AWAITING_SECTION_NAME = "awaiting_section_name"


def is_section_marker(element: str) -> bool:
    if element == "":
        return True
    return SECTION_MARKER_PATTERN.match(element) is not None


def parse_hex(code: str) -> Optional[int]:
    try:
        return int(code, 16)
    except ValueError:
        return None


def parse_descriptor(descriptor: str) -> Tuple[str, bool, bool, bool]:
    """Strip visibility suffixes from ``descriptor``.

    Returns:
        ``(name, search_show, challenge_show, tournament_show)``
    """
    name = descriptor
    search_show = challenge_show = tournament_show = True

    comma_index = name.rfind(",")
    code = parse_hex(name[comma_index + 1:]) if comma_index >= 0 else None
    if code is not None:
        name = name[:comma_index]
        search_show = bool(code & SEARCH_SHOW_BIT)
        challenge_show = bool(code & CHALLENGE_SHOW_BIT)
        tournament_show = bool(code & TOURNAMENT_SHOW_BIT)
        return name, search_show, challenge_show, tournament_show

    # Legacy suffixes
    if name.endswith(",#"):
        name = name[:-2]
    if name.endswith(",,"):
        challenge_show = False
        name = name[:-2]
    elif name.endswith(","):
        search_show = False
        name = name[:-1]
    return name, search_show, challenge_show, tournament_show


def parse_catalog(raw_entries: Sequence[str]) -> Dict[str, FormatEntry]:
    """Build a ``{format id: FormatEntry}`` table from the raw list."""
    formats: Dict[str, FormatEntry] = {}
    state = CatalogState.AWAITING_ENTRY
    section = ""

    for element in raw_entries:
        if state is CatalogState.AWAITING_SECTION_NAME:
            section = element
            state = CatalogState.AWAITING_ENTRY
            continue
        if element == COLUMN_MARKER:
            continue
        if is_section_marker(element):
            state = CatalogState.AWAITING_SECTION_NAME
            continue

        name, search_show, challenge_show, tournament_show = parse_descriptor(element)
        format_id = to_id(name)
        if not format_id:
            continue
        formats[format_id] = FormatEntry(
            name=name,
            id=format_id,
            section=section,
            search_show=search_show,
            challenge_show=challenge_show,
            tournament_show=tournament_show,
        )

    return formats


class FormatCatalog:
    """Current format table plus the caches derived from it."""

    def __init__(self) -> None:
        self.raw_entries: List[str] = []
        self.formats: Dict[str, FormatEntry] = {}
        self._lookup_cache: Dict[str, Optional[FormatEntry]] = {}
        self._external_caches: List[ClearableCache] = []

    def register_cache(self, cache: ClearableCache) -> None:
        """Clear ``cache`` whenever a new catalog is parsed."""
        self._external_caches.append(cache)

    def parse(self, raw_entries: Sequence[str]) -> None:
        """Replace the catalog with the one described by ``raw_entries``.

        An empty list keeps the current catalog.
        """
        self.raw_entries = list(raw_entries)
        if not self.raw_entries:
            return
        self.formats = parse_catalog(self.raw_entries)
        self.invalidate()
        logger.debug("[FORMATS] Loaded %d formats", len(self.formats))

    def invalidate(self) -> None:
        self._lookup_cache.clear()
        for cache in self._external_caches:
            cache.clear()

    def get_format(self, name: str) -> Optional[FormatEntry]:
        format_id = to_id(name)
        if format_id not in self._lookup_cache:
            self._lookup_cache[format_id] = self.formats.get(format_id)
        return self._lookup_cache[format_id]
