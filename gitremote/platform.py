"""Cross-platform filesystem and process helpers for gitremote."""

import os
import platform
from pathlib import Path
from typing import Optional, Union


def get_home_dir() -> Optional[Path]:
    """
    Resolve the user's home directory.

    ``HOME`` wins when it is set, which keeps behaviour predictable under
    test harnesses and sudo. Falls back to the password database.

    Returns:
        The home directory, or None if it cannot be determined
    """
    home = os.environ.get("HOME")
    if home:
        return Path(home)
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        return None


def is_regular_file(path: Union[str, Path]) -> bool:
    """Check whether ``path`` exists and is a regular file (symlinks followed)."""
    try:
        return Path(path).is_file()
    except OSError:
        return False


def expand_git_path(path_str: str) -> Path:
    """
    Expand a leading ``~/`` to ``$HOME/``, as Git does for e.g. core.excludesFile.

    Only the literal ``~/`` prefix is expanded. ``~user/`` forms and paths
    without the prefix are returned unchanged, as is everything when ``HOME``
    is not set.

    Args:
        path_str: Path string read from configuration

    Returns:
        The expanded path
    """
    if path_str.startswith("~/"):
        home_dir_str = os.environ.get("HOME")
        if home_dir_str is not None:
            return Path(home_dir_str) / path_str[2:]
    return Path(path_str)


def get_pinentry_executable() -> str:
    """
    Get the pinentry executable name for the current platform.

    Returns:
        Pinentry executable name
    """
    if platform.system() == "Windows":
        # Gpg4win installs pinentry.exe on PATH
        return "pinentry.exe"
    return "pinentry"
