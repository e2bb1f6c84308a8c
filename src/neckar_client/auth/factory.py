"""Credential strategy selection from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from neckar_client.auth.oidc import OIDCCredentials
from neckar_client.auth.vault import VaultCredentials
from neckar_core.exceptions import ConfigurationError
from neckar_core.models.oidc import OIDCConfiguration

if TYPE_CHECKING:
    from neckar_core.config.settings import Settings
    from neckar_core.interfaces.credentials import CredentialProvider
    from neckar_infra.cache.coordinator import CacheCoordinator
    from neckar_infra.http.transport import HttpTransport

logger = structlog.get_logger()


class NoCredentials:
    """Used when no auth block is configured; requests go out unauthenticated."""

    strategy = "none"

    async def token(self) -> None:
        """No token is available."""
        return None

    async def oidc_config(self) -> OIDCConfiguration:
        """There is no issuer to describe."""
        msg = "no auth or vault credentials configured"
        raise ConfigurationError(msg)


def build_credentials(
    settings: Settings,
    coordinator: CacheCoordinator,
    transport: HttpTransport,
) -> CredentialProvider:
    """Return the credential provider for the configured strategy."""
    provider: CredentialProvider
    if settings.vault is not None:
        provider = VaultCredentials(
            settings.vault,
            coordinator,
            transport,
            timeout=settings.http_timeout_seconds,
        )
    elif settings.auth is not None:
        provider = OIDCCredentials(settings.auth, coordinator, transport)
    else:
        provider = NoCredentials()
    logger.debug("credential_strategy_selected", strategy=provider.strategy)
    return provider
