"""SSH private key discovery."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import DEFAULT_SSH_KEY_NAMES
from ..platform import get_home_dir, is_regular_file


def get_ssh_keys(
    username: str,
    ssh_dir: Optional[Path] = None,
    key_names: Iterable[str] = DEFAULT_SSH_KEY_NAMES,
) -> List[Path]:
    """
    Find the conventional SSH private keys of the current user.

    Keys are returned in priority order (security-key backed, ed25519, then
    RSA). Only paths are returned; the transport loads the key material.

    Args:
        username: Remote username. Not used for the lookup.
        ssh_dir: Directory to search instead of ``~/.ssh``
        key_names: Key file names in priority order

    Returns:
        Paths of the keys that exist as regular files
    """
    logger = logging.getLogger('gitremote.credentials.ssh_keys')

    paths: List[Path] = []
    if ssh_dir is None:
        home_dir = get_home_dir()
        if home_dir is not None:
            ssh_dir = home_dir / ".ssh"

    if ssh_dir is not None:
        for filename in key_names:
            key_path = ssh_dir / filename
            if is_regular_file(key_path):
                logger.info(f"found ssh key: {key_path}")
                paths.append(key_path)

    if not paths:
        logger.info("no ssh key found")
    return paths
