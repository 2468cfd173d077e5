"""Configuration management for gitremote."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigurationError
from .platform import expand_git_path, get_pinentry_executable

DEFAULT_SSH_KEY_NAMES: Tuple[str, ...] = ("id_ed25519_sk", "id_ed25519", "id_rsa")
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_COLOR_MODES = ["auto", "always", "never"]


@dataclass
class Config:
    """Configuration for credential resolution and sync reporting."""

    # SSH key discovery
    ssh_dir: Optional[Path] = None  # None means ~/.ssh
    ssh_key_names: Tuple[str, ...] = DEFAULT_SSH_KEY_NAMES

    # Secure-entry helper
    use_pinentry: bool = True
    pinentry_program: str = "pinentry"
    pinentry_timeout: Optional[float] = None  # None blocks until the helper exits
    pinentry_title: str = "git passphrase"

    # Output
    color: str = "auto"

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.ssh_dir, str):
            self.ssh_dir = expand_git_path(self.ssh_dir)

        self.ssh_key_names = tuple(self.ssh_key_names)
        if not self.ssh_key_names:
            raise ConfigurationError("ssh_key_names must not be empty")

        if not self.pinentry_program:
            raise ConfigurationError("pinentry_program must not be empty")

        if self.pinentry_timeout is not None and self.pinentry_timeout <= 0:
            raise ConfigurationError("pinentry_timeout must be positive")

        self.color = self.color.lower()
        if self.color not in VALID_COLOR_MODES:
            raise ConfigurationError(
                f"Invalid color mode: {self.color}. Must be one of {VALID_COLOR_MODES}"
            )

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}"
            )


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_configuration() -> Config:
    """Load configuration from environment variables (and a .env file if present)."""
    load_dotenv()

    try:
        timeout = os.getenv("GITREMOTE_PINENTRY_TIMEOUT")
        key_names = os.getenv("GITREMOTE_SSH_KEY_NAMES")

        config = Config(
            ssh_dir=os.getenv("GITREMOTE_SSH_DIR") or None,
            ssh_key_names=(
                tuple(name.strip() for name in key_names.split(",") if name.strip())
                if key_names else DEFAULT_SSH_KEY_NAMES
            ),
            use_pinentry=_parse_bool(os.getenv("GITREMOTE_USE_PINENTRY", "true")),
            pinentry_program=os.getenv("GITREMOTE_PINENTRY_PROGRAM", get_pinentry_executable()),
            pinentry_timeout=float(timeout) if timeout else None,
            pinentry_title=os.getenv("GITREMOTE_PINENTRY_TITLE", "git passphrase"),
            color=os.getenv("GITREMOTE_COLOR", "auto"),
            log_level=os.getenv("GITREMOTE_LOG_LEVEL", "INFO"),
        )
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Configuration error: {e}") from e

    logging.getLogger('gitremote.config').debug(
        f"Loaded configuration: use_pinentry={config.use_pinentry}, "
        f"pinentry_program={config.pinentry_program}, color={config.color}"
    )
    return config
