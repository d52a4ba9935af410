from __future__ import annotations
from pathlib import Path
import fcntl
import importlib
from typing import Any, Callable, Dict, List, Mapping, Optional
import yaml

from roomwatch.errors import ConfigurationError
from roomwatch.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_COMMAND_CHARACTER = "."
DEFAULT_RANKS = " +%@*&#~"


def resolve_hook(path: str) -> Optional[Callable[..., Any]]:
    """Import a ``"package.module:function"`` path and return the callable.

    Returns None (and logs) when the module or attribute cannot be found.
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        logger.error("[APP CONFIGURATION] Hook path %r must look like 'module:function'.", path)
        return None
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        logger.error("[APP CONFIGURATION] Could not import hook module %s: %s", module_name, exc)
        return None
    hook = getattr(module, attribute, None)
    if not callable(hook):
        logger.error("[APP CONFIGURATION] Hook %s is not callable.", path)
        return None
    return hook


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed accessors for the account, the rooms to join, the command prefix and
    the moderation tables. The two extension hooks (``parse_message`` and
    ``moderate``) are either assigned in code or named in YAML as dotted
    ``module:function`` paths.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self._parse_message_hook: Optional[Callable[..., Any]] = None
        self._moderation_hook: Optional[Callable[..., Any]] = None
        self.reload()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        """Build a configuration from an in-memory mapping instead of a file."""
        config = cls(None)
        config._data = dict(data)
        config._resolve_hooks()
        return config

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        if self.config_path is None:
            return {}
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    def _resolve_hooks(self) -> None:
        hooks = self._data.get("hooks", {})
        if not isinstance(hooks, dict):
            hooks = {}
        parse_message = hooks.get("parse_message")
        moderate = hooks.get("moderate")
        self._parse_message_hook = resolve_hook(parse_message) if parse_message else None
        self._moderation_hook = resolve_hook(moderate) if moderate else None

    def _mapping(self, key: str) -> Dict[str, Any]:
        value = self._data.get(key)
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Hooks named in the file are resolved again; hooks assigned in code
        are replaced.
        """
        self._data = self.load_from_disk()
        self._resolve_hooks()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping (do not mutate)."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    def validate(self) -> None:
        """Check the shape of values that are read lazily.

        Raises
        ------
        ConfigurationError
            If ``rooms`` is present but is not a list.
        """
        rooms = self.rooms
        logger.debug("[APP CONFIGURATION] %d rooms configured", len(rooms))

    # --------------------------
    # Account and rooms
    # --------------------------
    @property
    def username(self) -> str:
        return str(self._data.get("username") or "")

    @property
    def command_character(self) -> str:
        value = self._data.get("command_character")
        return str(value) if value else DEFAULT_COMMAND_CHARACTER

    @property
    def rooms(self) -> List[str]:
        """Rooms joined after a successful login, in configured order.

        Raises
        ------
        ConfigurationError
            If ``rooms`` is present but is not a list.
        """
        value = self._data.get("rooms")
        if value is None:
            return []
        if not isinstance(value, list):
            raise ConfigurationError("rooms must be a list")
        return [str(room) for room in value]

    @property
    def ranks(self) -> str:
        """Rank characters ordered from lowest to highest."""
        value = self._data.get("ranks")
        return str(value) if value else DEFAULT_RANKS

    # --------------------------
    # Moderation
    # --------------------------
    @property
    def allow_moderation(self) -> bool | Dict[str, bool]:
        value = self._data.get("allow_moderation", False)
        return value if isinstance(value, dict) else bool(value)

    def is_moderation_allowed(self, room_id: str) -> bool:
        """Return whether automatic moderation runs in ``room_id``.

        ``allow_moderation`` is either a global switch or a mapping of room
        id to switch; rooms missing from the mapping are not moderated.
        """
        allowed = self.allow_moderation
        if isinstance(allowed, dict):
            return bool(allowed.get(room_id))
        return allowed

    @property
    def punishment_points(self) -> Dict[str, int]:
        return self._mapping("punishment_points")

    @property
    def punishment_actions(self) -> Dict[str, str]:
        return self._mapping("punishment_actions")

    @property
    def punishment_reasons(self) -> Dict[str, str]:
        return self._mapping("punishment_reasons")

    def severity(self, action: str) -> int:
        """Configured point value of ``action``; unknown actions weigh 0."""
        try:
            return int(self.punishment_points.get(action, 0))
        except (TypeError, ValueError):
            return 0

    def escalation_action(self, points: int) -> Optional[str]:
        """Action configured for an accumulated point count, if any.

        YAML keys may be written as integers or strings, both are accepted.
        """
        actions = self.punishment_actions
        action = actions.get(str(points)) or actions.get(points)
        return str(action) if action else None

    # --------------------------
    # Hooks
    # --------------------------
    @property
    def parse_message_hook(self) -> Optional[Callable[..., Any]]:
        return self._parse_message_hook

    @parse_message_hook.setter
    def parse_message_hook(self, hook: Optional[Callable[..., Any]]) -> None:
        self._parse_message_hook = hook

    @property
    def moderation_hook(self) -> Optional[Callable[..., Any]]:
        return self._moderation_hook

    @moderation_hook.setter
    def moderation_hook(self, hook: Optional[Callable[..., Any]]) -> None:
        self._moderation_hook = hook
