"""Credential callbacks offered to the transport during fetch and push."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar

from ..config import Config
from ..progress import TransferProgress, make_progress_callback
from ..ui import Ui
from .pinentry import pinentry_get_pw
from .ssh_keys import get_ssh_keys
from .terminal import terminal_get_pw, terminal_get_username

T = TypeVar("T")


@dataclass
class RemoteCallbacks:
    """
    Optional callback slots the transport calls while talking to a remote.

    A slot left as None means the transport has no way to obtain that kind
    of credential and must fail authentication itself.
    """
    progress: Optional[Callable[[TransferProgress], None]] = None
    get_ssh_keys: Optional[Callable[[str], List[Path]]] = None
    get_password: Optional[Callable[[str, str], Optional[str]]] = None
    get_username_password: Optional[Callable[[str], Optional[Tuple[str, str]]]] = None


class CredentialResolver:
    """
    Resolves credentials from pinentry, SSH key files and terminal prompts.

    All terminal prompts go through one lock so that prompts from different
    callbacks are never interleaved on the shared terminal.
    """

    def __init__(self, ui: Ui, config: Optional[Config] = None):
        self.ui = ui
        self.config = config or ui.config
        self.logger = logging.getLogger('gitremote.credentials.resolver')
        self._prompt_lock = threading.Lock()

    def get_ssh_keys(self, username: str) -> List[Path]:
        """Key-based auth. Offered every time; the transport decides which key to try."""
        return get_ssh_keys(
            username,
            ssh_dir=self.config.ssh_dir,
            key_names=self.config.ssh_key_names,
        )

    def get_password(self, url: str, username: str) -> Optional[str]:
        """Password-only auth: pinentry first, then the terminal."""
        if self.config.use_pinentry:
            password = pinentry_get_pw(
                url,
                program=self.config.pinentry_program,
                timeout=self.config.pinentry_timeout,
                title=self.config.pinentry_title,
            )
            if password is not None:
                return password
            self.logger.debug(f"pinentry gave no passphrase for {url}, prompting on terminal")

        with self._prompt_lock:
            return terminal_get_pw(self.ui, url)

    def get_username_password(self, url: str) -> Optional[Tuple[str, str]]:
        """Username+password auth. Both prompts must succeed."""
        with self._prompt_lock:
            username = terminal_get_username(self.ui, url)
            if username is None:
                return None
            password = terminal_get_pw(self.ui, url)
            if password is None:
                return None
            return username, password

    def callbacks(self) -> RemoteCallbacks:
        """Bundle the resolver's methods into transport callback slots."""
        return RemoteCallbacks(
            get_ssh_keys=self.get_ssh_keys,
            get_password=self.get_password,
            get_username_password=self.get_username_password,
        )


def with_remote_git_callbacks(
    ui: Ui,
    f: Callable[[RemoteCallbacks], T],
    config: Optional[Config] = None,
) -> T:
    """
    Run ``f`` with credential and progress callbacks set up for ``ui``.

    Progress is only rendered when the UI can display it.
    """
    resolver = CredentialResolver(ui, config)
    callbacks = resolver.callbacks()

    progress_output = ui.progress_output()
    if progress_output is not None:
        callbacks.progress = make_progress_callback(progress_output)

    return f(callbacks)
