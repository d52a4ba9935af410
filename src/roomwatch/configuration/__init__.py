"""
Configuration management for roomwatch.

- **app_configuration.py**: YAML configuration loader for the account name,
  rooms to join, command prefix, rank order and the moderation point,
  escalation and reason tables. Resolves the optional ``parse_message`` and
  ``moderate`` hooks and falls back gracefully on missing or malformed files.
"""
