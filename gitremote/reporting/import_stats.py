"""Report of refs changed by a fetch."""

import logging

from ..backend import RepoView
from ..refs import GitImportStats
from ..ui import Ui
from .ref_status import RefKind, RefStatus, display_width

logger = logging.getLogger('gitremote.reporting.import_stats')


def print_git_import_stats(
    ui: Ui,
    view: RepoView,
    stats: GitImportStats,
    show_ref_stats: bool,
) -> None:
    """
    Print what a fetch changed.

    With ``show_ref_stats``, one aligned line per changed ref is written to
    stderr in the order the transport reported them, e.g.::

        branch: main@origin   [updated] tracked
        tag:    v1.0          [new]

    A summary of abandoned commits follows when there are any.

    Args:
        ui: Output handle
        view: Repository view used to tell tracked from untracked branches
        stats: Import statistics produced by the fetch
        show_ref_stats: Whether to list the changed refs

    Raises:
        OSError: If writing the report fails
    """
    if show_ref_stats:
        refs_stats = [
            RefStatus.new(ref_name, remote_ref, ref_target, view)
            for ref_name, (remote_ref, ref_target) in stats.changed_remote_refs.items()
        ]

        has_both_ref_kinds = (
            any(status.ref_kind == RefKind.BRANCH for status in refs_stats)
            and any(status.ref_kind == RefKind.TAG for status in refs_stats)
        )

        if refs_stats:
            max_width = max(display_width(status.ref_name) for status in refs_stats)
            formatter = ui.stderr_formatter()
            for status in refs_stats:
                status.output(max_width, has_both_ref_kinds, formatter)
            formatter.flush()
        logger.debug(f"Reported {len(refs_stats)} changed refs")

    if stats.abandoned_commits:
        ui.stderr().writeln(
            f"Abandoned {len(stats.abandoned_commits)} commits that are no longer reachable."
        )
