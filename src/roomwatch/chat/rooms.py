"""Room objects and the active room registry."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional

from roomwatch.chat.client import Transport
from roomwatch.chat.users import User, UserRegistry
from roomwatch.util.text import split_rank, to_id

Listener = Callable[[], None]


class Room:
    """A chat room the client has joined.

    Membership is stored on both sides: ``room.users[user]`` and
    ``user.rooms[room]`` always hold the same rank character.
    """

    def __init__(self, room_id: str, transport: Optional[Transport] = None, users: Optional[UserRegistry] = None) -> None:
        self.id = room_id
        self.users: Dict[User, str] = {}
        self.listeners: Dict[str, Listener] = {}
        self._transport = transport
        self._user_registry = users

    def __repr__(self) -> str:
        return f"Room({self.id!r})"

    def say(self, text: str) -> None:
        """Send chat text (or a slash command) to this room."""
        if self._transport is None:
            return
        self._transport.send(f"{self.id}|{text}")

    def add_listener(self, message: str, callback: Listener) -> None:
        """Call ``callback`` once when the client's own ``message`` echoes back."""
        self.listeners[to_id(message)] = callback

    def set_rank(self, user: User, rank: str) -> None:
        self.users[user] = rank
        user.rooms[self] = rank

    def on_join(self, user: User, rank: str) -> None:
        self.set_rank(user, rank)

    def on_leave(self, user: User) -> None:
        self.users.pop(user, None)
        user.rooms.pop(self, None)

    def on_rename(self, user: User, new_field: str) -> None:
        """Apply a rename announcement; ``new_field`` carries the rank prefix."""
        rank, new_name = split_rank(new_field)
        if self._user_registry is not None:
            user = self._user_registry.rename(user, new_name)
        else:
            user.name = new_name
            user.id = to_id(new_name)
        self.set_rank(user, rank)


class RoomRegistry:
    """Registry of the rooms the client is currently in."""

    def __init__(self, transport: Optional[Transport] = None, users: Optional[UserRegistry] = None) -> None:
        self._transport = transport
        self._user_registry = users
        self._rooms: Dict[str, Room] = {}
        # Lines without a ">room" header belong to the global room
        self.global_room = Room("", transport, users)

    def __iter__(self) -> Iterator[Room]:
        return iter(self._rooms.values())

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def add(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id, self._transport, self._user_registry)
            self._rooms[room_id] = room
        return room

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def destroy(self, room: Room) -> None:
        """Remove ``room`` and detach every member from it."""
        for user in list(room.users):
            user.rooms.pop(room, None)
        room.users.clear()
        room.listeners.clear()
        if self._rooms.get(room.id) is room:
            del self._rooms[room.id]
