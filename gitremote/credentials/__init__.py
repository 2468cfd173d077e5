"""Credential sources and the resolver that chains them."""

from .pinentry import decode_assuan_data, encode_assuan_data, pinentry_get_pw
from .resolver import CredentialResolver, RemoteCallbacks, with_remote_git_callbacks
from .ssh_keys import get_ssh_keys
from .terminal import terminal_get_pw, terminal_get_username

__all__ = [
    'CredentialResolver',
    'RemoteCallbacks',
    'with_remote_git_callbacks',
    'get_ssh_keys',
    'pinentry_get_pw',
    'decode_assuan_data',
    'encode_assuan_data',
    'terminal_get_username',
    'terminal_get_pw',
]
