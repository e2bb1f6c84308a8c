"""Thin async HTTP wrapper shared by the credential chain and the API surface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from neckar_core.exceptions import BadStatusError, ResponseDecodeError, TransportError

if TYPE_CHECKING:
    from neckar_core.config.settings import Settings

logger = structlog.get_logger()


def url_join(base: str, path: str) -> str:
    """Resolve ``path`` against ``base`` the way a browser resolves links."""
    return urljoin(base, path)


class HttpTransport:
    """Performs HTTP calls and decodes JSON responses.

    Non-2xx answers raise :class:`BadStatusError`; failures before a response
    arrives are retried and finally raised as :class:`TransportError`.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        retry_max: int = 3,
        retry_wait_min: float = 0.5,
        retry_wait_max: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with request policy and an optional pre-built client."""
        self._retry_max = retry_max
        self._retry_wait_min = retry_wait_min
        self._retry_wait_max = retry_wait_max
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> HttpTransport:
        """Build a transport from application settings."""
        return cls(
            timeout=settings.http_timeout_seconds,
            retry_max=settings.http_retry_max,
            retry_wait_min=settings.http_retry_wait_min,
            retry_wait_max=settings.http_retry_wait_max,
            client=client,
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        bearer: str | None = None,
        json: Any = None,
        data: dict[str, str] | None = None,
        content: bytes | None = None,
        expect_json: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body, or None when empty.

        Non-empty bodies are decoded as JSON whatever their content-type says;
        pass ``expect_json=False`` to discard the body instead.
        """
        request_headers = dict(headers or {})
        if bearer:
            request_headers["Authorization"] = f"Bearer {bearer}"

        @retry(
            stop=stop_after_attempt(self._retry_max),
            wait=wait_exponential(
                multiplier=self._retry_wait_min,
                min=self._retry_wait_min,
                max=self._retry_wait_max,
            ),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        async def _send() -> httpx.Response:
            return await self._client.request(
                method,
                url,
                headers=request_headers,
                json=json,
                data=data,
                content=content,
            )

        try:
            response = await _send()
        except httpx.TransportError as exc:
            logger.warning("http_transport_error", method=method, url=url, error=str(exc))
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if not response.is_success:
            logger.warning("http_bad_status", method=method, url=url, status=response.status_code)
            raise BadStatusError(response.status_code, response.text, url=url)

        logger.debug("http_ok", method=method, url=url, status=response.status_code)
        if not expect_json or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("http_undecodable_body", method=method, url=url)
            raise ResponseDecodeError(url, response.text) from exc

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
