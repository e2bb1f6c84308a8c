"""Direct OIDC credentials using the resource-owner password grant."""

from __future__ import annotations

import structlog
from pydantic import ValidationError

from neckar_core.config.settings import OIDCAuthSettings
from neckar_core.exceptions import AuthenticationError, BadStatusError
from neckar_core.models.oidc import OIDCConfiguration, TokenResponse
from neckar_infra.cache.coordinator import CacheCoordinator
from neckar_infra.http.transport import HttpTransport, url_join

logger = structlog.get_logger()

OIDC_CONFIG_KEY = "oidc-config"
OIDC_TOKEN_KEY = "oidc"
OIDC_CONFIG_TTL_SECONDS = 3600
DISCOVERY_PATH = ".well-known/openid-configuration"


def early_refresh_ttl(expires_in: int) -> int:
    """Cache a token for four fifths of its lifetime."""
    return expires_in * 4 // 5


async def fetch_oidc_config(
    coordinator: CacheCoordinator, transport: HttpTransport, realm: str
) -> OIDCConfiguration:
    """Return the realm's discovery document, cached for an hour."""

    async def _acquire() -> tuple[OIDCConfiguration, int]:
        url = url_join(realm, DISCOVERY_PATH)
        body = await transport.request("GET", url)
        try:
            config = OIDCConfiguration.model_validate(body)
        except ValidationError as exc:
            logger.warning("oidc_discovery_malformed", url=url, errors=exc.error_count())
            raise AuthenticationError(f"malformed OIDC discovery document at {url}") from exc
        return config, OIDC_CONFIG_TTL_SECONDS

    return await coordinator.with_cache(OIDC_CONFIG_KEY, _acquire)


class OIDCCredentials:
    """Password-grant tokens obtained straight from the OIDC provider."""

    strategy = "oidc"

    def __init__(
        self,
        auth: OIDCAuthSettings,
        coordinator: CacheCoordinator,
        transport: HttpTransport,
    ) -> None:
        """Initialize with the auth block and shared infrastructure."""
        self._auth = auth
        self._coordinator = coordinator
        self._transport = transport

    async def oidc_config(self) -> OIDCConfiguration:
        """Return the cached discovery document."""
        return await fetch_oidc_config(self._coordinator, self._transport, self._auth.realm)

    async def token(self) -> str:
        """Return a cached or freshly granted access token."""
        return await self._coordinator.with_cache(OIDC_TOKEN_KEY, self._grant)

    async def _grant(self) -> tuple[str, int]:
        config = await self.oidc_config()
        try:
            body = await self._transport.request(
                "POST",
                config.token_endpoint,
                data={
                    "client_id": self._auth.client_id,
                    "grant_type": "password",
                    "scope": self._auth.scope,
                    "username": self._auth.username,
                    "password": self._auth.password.get_secret_value(),
                },
            )
        except BadStatusError as exc:
            logger.warning("oidc_grant_rejected", status=exc.status, client_id=self._auth.client_id)
            raise AuthenticationError(f"token request rejected with status {exc.status}") from exc
        try:
            token = TokenResponse.model_validate(body)
        except ValidationError as exc:
            logger.warning("oidc_token_malformed", client_id=self._auth.client_id)
            msg = "token endpoint returned a malformed token response"
            raise AuthenticationError(msg) from exc
        return token.access_token, early_refresh_ttl(token.expires_in)
