"""
Plain data types shared across roomwatch.

- **command_datatypes.py**: Registry entries (`Handler`, `Alias`) and `CommandResult`.
- **format_datatypes.py**: `FormatEntry` for the server's format catalog.
- **moderation_datatypes.py**: `ChatLine`, `ModerationRecord` and `PunishmentRule`.
"""
