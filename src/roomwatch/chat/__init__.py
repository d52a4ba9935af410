"""
Chat state consumed by the protocol decoder.

- **client.py**: The `Transport` protocol for outbound lines and the
  `ClientState` holding the login challenge and the lockdown flag.
- **users.py**: `User` objects with per-room ranks and moderation state,
  and the identifier-keyed `UserRegistry`.
- **rooms.py**: `Room` objects with two-sided membership bookkeeping and
  pending self-message listeners, and the `RoomRegistry`.
"""
