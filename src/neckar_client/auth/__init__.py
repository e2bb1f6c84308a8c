"""Credential chain: direct OIDC, vault-mediated OIDC, or none."""

from neckar_client.auth.factory import NoCredentials, build_credentials
from neckar_client.auth.oidc import OIDCCredentials, early_refresh_ttl
from neckar_client.auth.vault import VaultCredentials

__all__ = [
    "NoCredentials",
    "OIDCCredentials",
    "VaultCredentials",
    "build_credentials",
    "early_refresh_ttl",
]
