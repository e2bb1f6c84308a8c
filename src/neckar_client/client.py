"""Neckar API client: GraphQL, userinfo and file upload over cached credentials."""

from __future__ import annotations

import copy
import mimetypes
from pathlib import Path
from types import TracebackType
from typing import Any

import structlog

from neckar_client.auth.factory import build_credentials
from neckar_client.upload import FileUploader
from neckar_core.config.settings import Settings
from neckar_core.exceptions import ConfigurationError, GraphQLResponseError
from neckar_core.interfaces.cache import ExpiringCacheClient
from neckar_core.interfaces.credentials import CredentialProvider
from neckar_core.models.identity import Identity
from neckar_core.models.oidc import OIDCConfiguration
from neckar_core.models.upload import UploadedFile
from neckar_infra.cache.coordinator import CacheCoordinator
from neckar_infra.cache.memory_cache import Clock, ExpiringCache, utc_now
from neckar_infra.http.transport import HttpTransport, url_join

logger = structlog.get_logger()

GRAPHQL_PATH = "/api/graphql"


class NeckarClient:
    """Entry point for talking to a Neckar deployment.

    Each client owns one credential cache. :meth:`login_into` returns a
    copy acting for a cluster (and optionally a subject); the copy shares
    the cache, transport and credentials of the client it came from and
    leaves that client untouched. Closing a copy is a no-op; the
    connection pool belongs to the client that created it.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: HttpTransport | None = None,
        cache: ExpiringCacheClient | None = None,
        clock: Clock = utc_now,
        credentials: CredentialProvider | None = None,
    ) -> None:
        """Wire the cache, transport and credential strategy from settings."""
        self._settings = settings
        self._transport = transport or HttpTransport.from_settings(settings)
        self._coordinator = CacheCoordinator(
            cache or ExpiringCache(clock=clock),
            single_flight=settings.single_flight,
        )
        self._credentials = credentials or build_credentials(
            settings, self._coordinator, self._transport
        )
        self._identity = Identity()
        self._owns_transport = True

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def strategy(self) -> str:
        """Name of the active credential strategy."""
        return self._credentials.strategy

    @property
    def coordinator(self) -> CacheCoordinator:
        return self._coordinator

    def login_into(self, cluster: str, subject: str | None = None) -> NeckarClient:
        """Return a client acting for ``cluster``; this client is not modified."""
        logged_in = copy.copy(self)
        logged_in._identity = Identity(cluster=cluster, subject=subject)
        logged_in._owns_transport = False
        return logged_in

    async def token(self) -> str | None:
        """Current access token, or None when no credentials are configured."""
        return await self._credentials.token()

    async def oidc_config(self) -> OIDCConfiguration:
        return await self._credentials.oidc_config()

    def flush_cache(self) -> None:
        """Forget every cached credential and discovery document."""
        self._coordinator.flush()

    async def fetch_userinfo(self) -> dict[str, Any]:
        """Fetch the OIDC userinfo of the authenticated principal."""
        config = await self.oidc_config()
        if not config.userinfo_endpoint:
            msg = "OIDC provider does not advertise a userinfo endpoint"
            raise ConfigurationError(msg)
        token = await self.token()
        body = await self._transport.request("GET", config.userinfo_endpoint, bearer=token)
        return body or {}

    async def graphql(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute a query or mutation and return its ``data``.

        Raises:
            GraphQLResponseError: if the response carries ``errors``.
        """
        body = await self._transport.request(
            "POST",
            url_join(self._settings.neckar_url, GRAPHQL_PATH),
            headers=self._identity.headers(),
            bearer=await self.token(),
            json={"query": query, "variables": variables},
        )
        body = body or {}
        errors = body.get("errors")
        if errors:
            logger.warning(
                "graphql_errors",
                count=len(errors),
                cluster=self._identity.cluster,
            )
            raise GraphQLResponseError(errors, body.get("data"))
        return body.get("data") or {}

    async def upload_file(
        self,
        source: Path | bytes,
        name: str | None = None,
        content_type: str | None = None,
    ) -> UploadedFile:
        """Upload a file (or raw bytes) and return the confirmed record."""
        if isinstance(source, Path):
            content = source.read_bytes()
            name = name or source.name
        else:
            content = source
        if not name:
            msg = "a file name is required when uploading raw bytes"
            raise ValueError(msg)
        if content_type is None:
            content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
        uploader = FileUploader(self.graphql, self._transport)
        return await uploader.upload(content, name, content_type)

    async def aclose(self) -> None:
        """Release the HTTP connection pool unless this is a login_into copy."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> NeckarClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def make_client(settings: Settings | None = None, **kwargs: Any) -> NeckarClient:
    """Build a client from explicit settings or from the environment."""
    return NeckarClient(settings or Settings.load(), **kwargs)
