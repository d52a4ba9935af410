"""
roomwatch - inbound pipeline for a pipe-delimited chat server feed

roomwatch turns raw server lines into room, user and chat state, runs
prefixed chat messages as commands, and moderates room chat with escalating
punishments.

Core Components:

- **Protocol decoder**: `MessageParser` routes each ``|TYPE|...`` line to
  its handler (session, membership, chat, PMs, broadcasts, formats).
- **Commands**: `CommandRegistry` with single-level aliases and the
  failure-containing `Context`.
- **Moderation**: `ModerationEngine` with flooding, stretching and caps
  detectors, a cooldown and a configurable escalation ladder.
- **Format catalog**: parser for the server's game format list.

Usage:
    from roomwatch.pipeline import build_pipeline
    parser = build_pipeline(config, transport, commands)
    parser.parse("|c|+someone|hello", room)
"""
