"""Public interface re-exports for neckar_core."""

from neckar_core.interfaces.cache import ExpiringCacheClient
from neckar_core.interfaces.credentials import CredentialProvider

__all__ = [
    "CredentialProvider",
    "ExpiringCacheClient",
]
