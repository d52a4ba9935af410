"""
Command resolution and execution.

- **registry.py**: `CommandRegistry` mapping identifiers to handlers or
  single-level aliases.
- **context.py**: `Context`, the per-invocation object handlers receive,
  and `CommandExecutor`, which recognizes prefixed messages and contains
  handler failures.
"""
