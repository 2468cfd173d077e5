"""Repository backends and the Git-backed view used by sync reports."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from .errors import user_error
from .refs import (
    GitImportStats, LocalBranch, RefName, RefTarget, RemoteBranch, RemoteRef,
    RemoteRefState, Tag,
)

logger = logging.getLogger('gitremote.backend')


@dataclass(frozen=True)
class GitBackend:
    """Storage backed by a Git repository."""
    git_repo_dir: Path
    git_workdir: Optional[Path] = None  # None for a bare repository

    def open_git_repo(self) -> Repo:
        return Repo(self.git_repo_dir)


@dataclass(frozen=True)
class OtherBackend:
    """Storage that is not backed by Git."""
    name: str


Backend = Union[GitBackend, OtherBackend]


def open_backend(path: Path) -> Backend:
    """Detect the backend of the repository at ``path``."""
    try:
        repo = Repo(path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        logger.debug(f"No Git repository at {path}")
        return OtherBackend(name="local")
    workdir = Path(repo.working_tree_dir) if repo.working_tree_dir else None
    return GitBackend(git_repo_dir=Path(repo.git_dir), git_workdir=workdir)


def get_git_repo(backend: Backend) -> Repo:
    """
    Open the Git repository behind ``backend``.

    Raises:
        UserError: If the backend is not Git
    """
    if not isinstance(backend, GitBackend):
        raise user_error("The repo is not backed by a git repo")
    try:
        return backend.open_git_repo()
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise user_error(f"Failed to open git repository: {e}") from e


def is_colocated_git_workspace(workspace_root: Path, backend: Backend) -> bool:
    """Check whether the Git working tree and the workspace are the same directory."""
    if not isinstance(backend, GitBackend):
        return False
    git_workdir = backend.git_workdir
    if git_workdir is None:
        return False  # Bare repository
    if git_workdir == workspace_root:
        return True
    # A colocated workspace has a ".git" directory, file, or symlink. Compare
    # its parent since git_workdir may be resolved from the real ".git" path.
    dot_git = workspace_root / ".git"
    if not os.path.lexists(dot_git):
        return False
    try:
        dot_git_path = dot_git.resolve(strict=True)
        return git_workdir.resolve(strict=True) == dot_git_path.parent
    except (OSError, RuntimeError):
        return False


class RepoView(Protocol):
    """What the sync report needs to know about the repository."""

    def is_tracking(self, branch: str, remote: str) -> bool:
        ...


class GitRepoView:
    """RepoView answered from a GitPython repository."""

    def __init__(self, repo: Repo):
        self.repo = repo

    def is_tracking(self, branch: str, remote: str) -> bool:
        """True if local ``branch`` tracks ``<remote>/<branch>``."""
        try:
            for head in self.repo.heads:
                if head.name == branch:
                    tracking = head.tracking_branch()
                    return tracking is not None and tracking.name == f"{remote}/{branch}"
            return False
        except (GitCommandError, ValueError) as e:
            logger.debug(f"Error checking tracking for {branch}@{remote}: {e}")
            return False


def snapshot_remote_refs(repo: Repo, remote_name: str) -> Dict[RefName, str]:
    """
    Record the commit of every remote branch of ``remote_name`` and every tag
    that resolves to a commit.

    Take one snapshot before and one after a fetch, then pass both to
    ``diff_remote_refs``.
    """
    snapshot: Dict[RefName, str] = {}
    remote = repo.remote(remote_name)
    for ref in remote.refs:
        branch = ref.remote_head
        if branch == "HEAD":
            continue
        snapshot[RemoteBranch(branch=branch, remote=remote_name)] = ref.commit.hexsha
    for tag in repo.tags:
        try:
            commit = tag.commit
        except ValueError as e:
            # Tags may point at trees or blobs
            logger.debug(f"Skipping tag {tag.name}: {e}")
            continue
        snapshot[Tag(tag.name)] = commit.hexsha
    return snapshot


def diff_remote_refs(
    before: Dict[RefName, str],
    after: Dict[RefName, str],
    view: RepoView,
) -> GitImportStats:
    """Build import stats listing refs whose commit changed between snapshots."""
    stats = GitImportStats()
    for name in list(before) + [name for name in after if name not in before]:
        old = before.get(name)
        new = after.get(name)
        if old == new:
            continue
        state = RemoteRefState.NEW
        if isinstance(name, RemoteBranch) and view.is_tracking(name.branch, name.remote):
            state = RemoteRefState.TRACKING
        elif isinstance(name, (Tag, LocalBranch)):
            state = RemoteRefState.TRACKING
        stats.changed_remote_refs[name] = (
            RemoteRef(target=RefTarget(old), state=state),
            RefTarget(new),
        )
    return stats
