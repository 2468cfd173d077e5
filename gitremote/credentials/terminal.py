"""Interactive credential prompts on the terminal."""

import logging
from typing import Optional

from ..ui import Ui

logger = logging.getLogger('gitremote.credentials.terminal')


def terminal_get_username(ui: Ui, url: str) -> Optional[str]:
    """Prompt for the username to use with ``url``. None if the read fails."""
    try:
        return ui.prompt(f"Username for {url}")
    except (OSError, EOFError) as e:
        logger.debug(f"Username prompt failed: {e}")
        return None


def terminal_get_pw(ui: Ui, url: str) -> Optional[str]:
    """Prompt for the passphrase of ``url`` without echo. None if the read fails."""
    try:
        return ui.prompt_password(f"Passphrase for {url}: ")
    except (OSError, EOFError) as e:
        logger.debug(f"Passphrase prompt failed: {e}")
        return None
