"""Reference data structures exchanged with the transport layer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Set, Tuple, Union


@dataclass(frozen=True)
class RemoteBranch:
    """A branch as last seen on a specific remote."""
    branch: str
    remote: str

    def __str__(self) -> str:
        return f"{self.branch}@{self.remote}"


@dataclass(frozen=True)
class Tag:
    """A tag."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class LocalBranch:
    """A branch that only exists locally."""
    name: str

    def __str__(self) -> str:
        return self.name


RefName = Union[RemoteBranch, Tag, LocalBranch]


@dataclass(frozen=True)
class RefTarget:
    """Commit a reference points to. ``commit_id`` is None for an absent ref."""
    commit_id: Optional[str] = None

    @classmethod
    def absent(cls) -> "RefTarget":
        return cls(None)

    @classmethod
    def normal(cls, commit_id: str) -> "RefTarget":
        return cls(commit_id)

    def is_absent(self) -> bool:
        return self.commit_id is None

    def is_present(self) -> bool:
        return self.commit_id is not None


class RemoteRefState(Enum):
    """Whether a remote ref is merged into the local branch of the same name."""
    NEW = "new"
    TRACKING = "tracking"


@dataclass(frozen=True)
class RemoteRef:
    """Remote-tracked position of a reference."""
    target: RefTarget = field(default_factory=RefTarget.absent)
    state: RemoteRefState = RemoteRefState.NEW

    def is_tracking(self) -> bool:
        return self.state == RemoteRefState.TRACKING


@dataclass
class GitImportStats:
    """
    Result of importing refs after a fetch.

    ``changed_remote_refs`` keeps the order the transport reported the changes
    in; each value is (previous remote ref, newly observed target).
    """
    changed_remote_refs: Dict[RefName, Tuple[RemoteRef, RefTarget]] = field(default_factory=dict)
    abandoned_commits: Set[str] = field(default_factory=set)


class FailedRefExportReason(Exception):
    """Why a ref could not be exported. The ``__cause__`` chain carries details."""


class InvalidRefName(FailedRefExportReason):
    def __init__(self, message: str = "Name is not allowed in Git"):
        super().__init__(message)


class OnRootCommit(FailedRefExportReason):
    def __init__(self, message: str = "Ref cannot point to the root commit in Git"):
        super().__init__(message)


class ConflictedOldState(FailedRefExportReason):
    def __init__(self, message: str = "Ref was in a conflicted state from the last import"):
        super().__init__(message)


class ModifiedInGit(FailedRefExportReason):
    def __init__(self, message: str = "Modified in both Git and locally"):
        super().__init__(message)


class FailedToDelete(FailedRefExportReason):
    def __init__(self, message: str = "Failed to delete"):
        super().__init__(message)


class FailedToSet(FailedRefExportReason):
    """The backend refused to set the ref."""

    def __init__(self, message: str = "Failed to set"):
        super().__init__(message)


@dataclass
class FailedRefExport:
    """A ref that could not be exported and the reason why."""
    name: RefName
    reason: FailedRefExportReason
