"""Diagnostics for refs that could not be exported to Git."""

from typing import Iterator, List

from ..refs import FailedRefExport, FailedToSet
from ..ui import Ui

FAILED_TO_SET_HINT = (
    "Hint: Git doesn't allow a branch name that looks like a parent directory of\n"
    "another (e.g. `foo` and `foo/bar`). Try to rename the branches that failed to\n"
    "export or their \"parent\" branches.\n"
)


def error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield ``error`` and then each ``__cause__`` in turn."""
    current = error
    while current is not None:
        yield current
        current = current.__cause__


def format_failed_export(failed: FailedRefExport) -> str:
    """``<name>: <reason>: <cause>...`` without styling."""
    return str(failed.name) + "".join(f": {err}" for err in error_chain(failed.reason))


def print_failed_git_export(ui: Ui, failed_branches: List[FailedRefExport]) -> None:
    """
    Print refs that failed to export, with the full cause chain of each.

    Raises:
        OSError: If writing the report fails
    """
    if not failed_branches:
        return

    ui.warning().write("Failed to export some branches:\n")
    formatter = ui.stderr_formatter()
    for failed in failed_branches:
        formatter.write("  ")
        formatter.labeled("branch").write(str(failed.name))
        for err in error_chain(failed.reason):
            formatter.write(f": {err}")
        formatter.writeln()
    formatter.flush()

    if any(isinstance(failed.reason, FailedToSet) for failed in failed_branches):
        ui.hint().write(FAILED_TO_SET_HINT)
