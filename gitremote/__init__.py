"""
gitremote - credential resolution and sync reporting for Git remotes.

Obtains passphrases and keys for fetch/push from SSH key files, a pinentry
helper or the terminal, and prints what changed after a fetch.
"""

__version__ = "1.0.0"
__description__ = "Credential resolution and sync reporting for Git remotes"

from .config import Config, load_configuration
from .credentials import CredentialResolver, RemoteCallbacks, with_remote_git_callbacks
from .platform import expand_git_path
from .reporting import print_failed_git_export, print_git_import_stats

__all__ = [
    'Config',
    'load_configuration',
    'CredentialResolver',
    'RemoteCallbacks',
    'with_remote_git_callbacks',
    'expand_git_path',
    'print_git_import_stats',
    'print_failed_git_export',
]
