"""Error types for gitremote."""

from typing import Optional


class GitRemoteError(Exception):
    """Base class for errors raised by gitremote."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class UserError(GitRemoteError):
    """An error caused by how the user set things up, reported without a traceback."""


class ConfigurationError(GitRemoteError):
    """Configuration could not be loaded or is invalid."""


def user_error(message: str, hint: Optional[str] = None) -> UserError:
    """Build a UserError, optionally carrying a hint for the operator."""
    return UserError(message, hint=hint)
