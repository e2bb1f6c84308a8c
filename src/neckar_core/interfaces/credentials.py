"""Abstract credential provider interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from neckar_core.models.oidc import OIDCConfiguration


@runtime_checkable
class CredentialProvider(Protocol):
    """Source of bearer tokens for Neckar API calls."""

    strategy: str

    async def token(self) -> str | None:
        """Return a valid access token, or None when no strategy is configured."""
        ...

    async def oidc_config(self) -> OIDCConfiguration:
        """Return the OIDC discovery document of the token issuer."""
        ...
