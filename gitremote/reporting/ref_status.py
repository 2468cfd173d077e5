"""Classification of changed remote refs for the import report."""

import unicodedata
from dataclasses import dataclass
from enum import Enum

from ..backend import RepoView
from ..refs import LocalBranch, RefName, RefTarget, RemoteBranch, RemoteRef, Tag
from ..ui import Formatter


class RefKind(Enum):
    BRANCH = "branch"
    TAG = "tag"


class TrackingStatus(Enum):
    TRACKED = "tracked"
    UNTRACKED = "untracked"
    NOT_APPLICABLE = ""  # for tags


class ImportStatus(Enum):
    NEW = "new"
    DELETED = "deleted"
    UPDATED = "updated"


def display_width(text: str) -> int:
    """Number of terminal columns ``text`` occupies."""
    width = 0
    for char in text:
        if unicodedata.combining(char) or unicodedata.category(char) in ("Mn", "Me", "Cf"):
            continue
        width += 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1
    return width


def classify_import(previous_absent: bool, new_absent: bool) -> ImportStatus:
    """Import status from whether the old and new targets are absent."""
    if previous_absent and not new_absent:
        return ImportStatus.NEW
    if not previous_absent and new_absent:
        return ImportStatus.DELETED
    return ImportStatus.UPDATED


@dataclass(frozen=True)
class RefStatus:
    ref_kind: RefKind
    ref_name: str
    tracking_status: TrackingStatus
    import_status: ImportStatus

    @classmethod
    def new(
        cls,
        ref_name: RefName,
        remote_ref: RemoteRef,
        ref_target: RefTarget,
        view: RepoView,
    ) -> "RefStatus":
        if isinstance(ref_name, RemoteBranch):
            name = f"{ref_name.branch}@{ref_name.remote}"
            kind = RefKind.BRANCH
            if view.is_tracking(ref_name.branch, ref_name.remote):
                tracking = TrackingStatus.TRACKED
            else:
                tracking = TrackingStatus.UNTRACKED
        elif isinstance(ref_name, Tag):
            name, kind, tracking = ref_name.name, RefKind.TAG, TrackingStatus.NOT_APPLICABLE
        elif isinstance(ref_name, LocalBranch):
            name, kind, tracking = ref_name.name, RefKind.BRANCH, TrackingStatus.TRACKED
        else:
            raise TypeError(f"Unknown ref name type: {type(ref_name).__name__}")

        import_status = classify_import(remote_ref.target.is_absent(), ref_target.is_absent())
        return cls(
            ref_kind=kind,
            ref_name=name,
            tracking_status=tracking,
            import_status=import_status,
        )

    def kind_label(self, has_both_ref_kinds: bool) -> str:
        if self.ref_kind == RefKind.BRANCH:
            return "branch: "
        if not has_both_ref_kinds:
            return "tag: "
        return "tag:    "

    def output(self, max_ref_name_width: int, has_both_ref_kinds: bool, out: Formatter) -> None:
        """Write one aligned report line. Write errors propagate."""
        pad_width = max(max_ref_name_width - display_width(self.ref_name), 0)
        padded_ref_name = self.ref_name + " " * pad_width

        out.write(self.kind_label(has_both_ref_kinds))
        out.labeled("branch").write(padded_ref_name)
        out.write(f" [{self.import_status.value}] {self.tracking_status.value}\n")
