"""Fetch from a Git remote with credential callbacks and report the changes."""

import logging
import shlex
from typing import List, Optional

from git import GitCommandError, Repo

from .backend import Backend, GitRepoView, diff_remote_refs, get_git_repo, snapshot_remote_refs
from .config import Config
from .credentials import RemoteCallbacks, with_remote_git_callbacks
from .credentials.askpass import askpass_environment
from .errors import user_error
from .progress import GitProgressAdapter
from .refs import GitImportStats
from .reporting import print_git_import_stats
from .ui import Ui

logger = logging.getLogger('gitremote.sync')


def build_ssh_command(key_paths: List) -> Optional[str]:
    """``GIT_SSH_COMMAND`` offering ``key_paths`` in order, or None to keep git's default."""
    if not key_paths:
        return None
    args = ["ssh"]
    for key_path in key_paths:
        args += ["-i", str(key_path)]
    return " ".join(shlex.quote(arg) for arg in args)


def _fetch_with_callbacks(repo: Repo, remote_name: str, callbacks: RemoteCallbacks) -> None:
    remote = repo.remote(remote_name)
    env = {}
    if callbacks.get_ssh_keys is not None:
        ssh_command = build_ssh_command(callbacks.get_ssh_keys(""))
        if ssh_command:
            env["GIT_SSH_COMMAND"] = ssh_command
    progress = GitProgressAdapter(callbacks.progress) if callbacks.progress else None

    # HTTP(S) username and password prompts are answered from the callbacks
    with askpass_environment(callbacks) as askpass_env:
        env.update(askpass_env)
        with repo.git.custom_environment(**env):
            remote.fetch(progress=progress, prune=True)


def fetch_remote(
    ui: Ui,
    backend: Backend,
    remote_name: str,
    show_ref_stats: bool = True,
    config: Optional[Config] = None,
) -> GitImportStats:
    """
    Fetch ``remote_name`` and print which branches and tags changed.

    Raises:
        UserError: If the repo is not Git-backed, the remote does not exist or
            the fetch fails
    """
    repo = get_git_repo(backend)
    view = GitRepoView(repo)

    try:
        repo.remote(remote_name)
    except ValueError as e:
        raise user_error(f"No git remote named '{remote_name}'") from e

    before = snapshot_remote_refs(repo, remote_name)
    logger.info(f"Fetching from remote '{remote_name}'", extra={'operation': 'fetch'})
    try:
        with_remote_git_callbacks(
            ui, lambda callbacks: _fetch_with_callbacks(repo, remote_name, callbacks), config
        )
    except GitCommandError as e:
        raise user_error(
            f"Failed to fetch from remote '{remote_name}': {e.stderr.strip() or e}",
            hint="Check that the remote URL is reachable and your credentials are valid",
        ) from e

    stats = diff_remote_refs(before, snapshot_remote_refs(repo, remote_name), view)
    print_git_import_stats(ui, view, stats, show_ref_stats)
    return stats
