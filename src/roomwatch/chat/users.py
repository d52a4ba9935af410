"""User objects and the process-wide user registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, Optional

from roomwatch.configuration.app_configuration import DEFAULT_RANKS
from roomwatch.datatypes.moderation_datatypes import ModerationRecord
from roomwatch.util.text import to_id

if TYPE_CHECKING:
    from roomwatch.chat.client import Transport
    from roomwatch.chat.rooms import Room


def rank_value(rank: str, ranks: str = DEFAULT_RANKS) -> int:
    """Position of ``rank`` in the rank order; unknown characters rank lowest."""
    index = ranks.find(rank) if rank else -1
    return max(index, 0)


class User:
    """A chat user as seen by this client.

    Attributes:
        name: Display name without the rank prefix.
        id: Normalized identifier used as registry key.
        rooms: Rank of the user in every room they are known to be in.
        room_data: Moderation state per room, created on first message.
    """

    def __init__(self, name: str, transport: Optional["Transport"] = None, ranks: str = DEFAULT_RANKS) -> None:
        self.name = name
        self.id = to_id(name)
        self.rooms: Dict["Room", str] = {}
        self.room_data: Dict["Room", ModerationRecord] = {}
        self._transport = transport
        self._ranks = ranks

    def __repr__(self) -> str:
        return f"User({self.name!r})"

    def has_rank(self, room: "Room", rank: str) -> bool:
        """Return True if the user holds at least ``rank`` in ``room``."""
        current = self.rooms.get(room)
        if current is None:
            return False
        return rank_value(current, self._ranks) >= rank_value(rank, self._ranks)

    def say(self, text: str) -> None:
        """Send a private message to this user."""
        if self._transport is None:
            return
        self._transport.send(f"|/pm {self.name}, {text}")


class UserRegistry:
    """Registry of every user the client has seen, keyed by identifier."""

    def __init__(self, self_name: str, transport: Optional["Transport"] = None, ranks: str = DEFAULT_RANKS) -> None:
        self._transport = transport
        self._ranks = ranks
        self._users: Dict[str, User] = {}
        self_user = self.add(self_name)
        if self_user is None:
            self_user = User(self_name, transport, ranks)
        self.self_user: User = self_user

    def __iter__(self) -> Iterator[User]:
        return iter(self._users.values())

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, name: object) -> bool:
        return to_id(name) in self._users

    def add(self, name: str) -> Optional[User]:
        """Return the user named ``name``, creating it when unknown.

        Returns None when the name has no identifier characters at all.
        """
        user_id = to_id(name)
        if not user_id:
            return None
        user = self._users.get(user_id)
        if user is None:
            user = User(name, self._transport, self._ranks)
            self._users[user_id] = user
        return user

    def get(self, name: str) -> Optional[User]:
        return self._users.get(to_id(name))

    def rename(self, user: User, new_name: str) -> User:
        """Re-key ``user`` under ``new_name`` and update its display name.

        When ``new_name`` already belongs to a user seen earlier, that user
        is kept and absorbs the renamed user's room memberships. Existing
        moderation records win over the renamed user's.
        """
        new_id = to_id(new_name)
        if not new_id:
            return user
        existing = self._users.get(new_id)
        if existing is not None and existing is not user:
            self._merge(user, existing)
            user = existing
        elif new_id != user.id:
            if self._users.get(user.id) is user:
                del self._users[user.id]
            user.id = new_id
            self._users[new_id] = user
        user.name = new_name
        return user

    def _merge(self, source: User, target: User) -> None:
        for room, rank in source.rooms.items():
            room.users.pop(source, None)
            room.users[target] = rank
            target.rooms[room] = rank
        source.rooms.clear()
        for room, record in source.room_data.items():
            target.room_data.setdefault(room, record)
        source.room_data.clear()
        if source is not self.self_user and self._users.get(source.id) is source:
            del self._users[source.id]

    def destroy(self, user: User) -> None:
        """Forget ``user`` and detach it from every room it was in."""
        if user is self.self_user:
            return
        for room in list(user.rooms):
            room.users.pop(user, None)
        user.rooms.clear()
        if self._users.get(user.id) is user:
            del self._users[user.id]
