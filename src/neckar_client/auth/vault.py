"""Vault-mediated credentials: AppRole login, then a vault-issued OIDC token."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import hvac
import requests
import structlog
from hvac import exceptions as hvac_exceptions

from neckar_client.auth.oidc import fetch_oidc_config
from neckar_core.config.settings import VaultAuthSettings
from neckar_core.exceptions import ConfigurationError, VaultError
from neckar_core.models.oidc import OIDCConfiguration
from neckar_infra.cache.coordinator import CacheCoordinator
from neckar_infra.http.transport import HttpTransport

logger = structlog.get_logger()

VAULT_TOKEN_KEY = "vault-token"
VAULT_OIDC_KEY = "vault-oidc"

ClientFactory = Callable[..., hvac.Client]


@contextmanager
def _response_shape(operation: str) -> Iterator[None]:
    """Turn a missing or mistyped field in a vault response into VaultError."""
    try:
        yield
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("vault_response_malformed", operation=operation, error=type(exc).__name__)
        raise VaultError(f"vault {operation} returned an unexpected response: {exc!r}") from exc


class VaultCredentials:
    """Tokens minted by the vault identity engine for a named OIDC role.

    The vault session token is itself cached; the identity token request
    reuses it until half its lease has passed.
    """

    strategy = "vault"

    def __init__(
        self,
        vault: VaultAuthSettings,
        coordinator: CacheCoordinator,
        transport: HttpTransport,
        timeout: float = 15.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """Initialize with the vault block and shared infrastructure."""
        self._vault = vault
        self._coordinator = coordinator
        self._transport = transport
        self._timeout = timeout
        self._client_factory = client_factory or hvac.Client

    async def vault_token(self) -> str:
        """Return a cached or fresh vault session token."""
        return await self._coordinator.with_cache(VAULT_TOKEN_KEY, self._login)

    async def token(self) -> str:
        """Return a cached or fresh vault-issued OIDC token."""
        return await self._coordinator.with_cache(VAULT_OIDC_KEY, self._issue_oidc_token)

    async def oidc_config(self) -> OIDCConfiguration:
        """Return the discovery document of the realm the vault tokens belong to."""
        if not self._vault.realm:
            msg = "vault.realm is required to look up the OIDC configuration"
            raise ConfigurationError(msg)
        return await fetch_oidc_config(self._coordinator, self._transport, self._vault.realm)

    async def _login(self) -> tuple[str, int]:
        def _do_login() -> dict[str, Any]:
            client = self._client_factory(url=self._vault.url, timeout=self._timeout)
            return client.auth.approle.login(  # type: ignore[no-any-return]
                role_id=self._vault.role_id,
                secret_id=self._vault.secret_id.get_secret_value(),
                use_token=False,
                mount_point=self._vault.approle_mount,
            )

        response = await self._call("approle_login", _do_login)
        with _response_shape("approle_login"):
            auth = response["auth"]
            return auth["client_token"], int(auth["lease_duration"]) // 2

    async def _issue_oidc_token(self) -> tuple[str, int]:
        vault_token = await self.vault_token()

        def _do_issue() -> dict[str, Any]:
            client = self._client_factory(
                url=self._vault.url, token=vault_token, timeout=self._timeout
            )
            return client.secrets.identity.generate_signed_id_token(  # type: ignore[no-any-return]
                name=self._vault.role_name,
                mount_point=self._vault.identity_mount,
            )

        response = await self._call("oidc_token", _do_issue)
        with _response_shape("oidc_token"):
            data = response["data"]
            return data["token"], int(data["ttl"]) // 2

    async def _call(self, operation: str, fn: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        """Run a blocking hvac call off the event loop, normalizing its errors."""
        try:
            return await asyncio.to_thread(fn)
        except (hvac_exceptions.VaultError, requests.RequestException) as exc:
            logger.warning("vault_call_failed", operation=operation, error=type(exc).__name__)
            raise VaultError(f"vault {operation} failed: {exc}") from exc
