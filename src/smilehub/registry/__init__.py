"""Hub registry and credential store."""

from .credentials import CredentialStore, HubCredential
from .store import HubRegistry

__all__ = [
    "CredentialStore",
    "HubCredential",
    "HubRegistry",
]
