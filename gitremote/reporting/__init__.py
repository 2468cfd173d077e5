"""Reports printed after synchronizing refs with a remote."""

from .export_failures import format_failed_export, print_failed_git_export
from .import_stats import print_git_import_stats
from .ref_status import ImportStatus, RefKind, RefStatus, TrackingStatus, display_width

__all__ = [
    'print_git_import_stats',
    'print_failed_git_export',
    'format_failed_export',
    'RefStatus',
    'RefKind',
    'TrackingStatus',
    'ImportStatus',
    'display_width',
]
