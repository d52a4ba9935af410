"""
Inbound protocol handling.

- **message_parser.py**: `MessageParser`, the single entry point for every
  line received from the server. Tracks the session, room membership,
  chat, private messages and server broadcasts.
- **format_catalog.py**: Stateful parser for the server's format list and
  the lookup cache derived from it.
"""
