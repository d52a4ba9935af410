"""
Utility functions and helpers for roomwatch.

- **logger.py**: Centralized logging configuration with colored console output
  through prompt_toolkit and a rotating per-session log file.

- **text.py**: Identifier normalization, rank prefix splitting and timestamp
  helpers used across the protocol decoder, commands and moderation.
"""
