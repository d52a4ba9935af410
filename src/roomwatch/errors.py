"""Exception types raised by roomwatch."""


class RoomwatchError(Exception):
    """Base class for roomwatch errors."""


class ConfigurationError(RoomwatchError):
    """Raised when a configuration value has the wrong shape."""


class LoginFailedError(RoomwatchError):
    """Raised when the server rejects the configured account."""
