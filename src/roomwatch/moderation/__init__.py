"""
Automatic moderation for roomwatch.

- **rules.py**: Message normalization and the built-in flooding,
  stretching and caps detectors.
- **moderation_engine.py**: Per-user, per-room history, cooldown handling,
  severity selection and the escalation ladder.
"""
