"""Custom exception hierarchy for neckar-client."""

from __future__ import annotations


class NeckarError(Exception):
    """Base exception for all neckar-client errors."""


class ConfigurationError(NeckarError):
    """Raised when settings are invalid or contradict each other."""


class TransportError(NeckarError):
    """Raised when an HTTP call fails before a response is received."""


class BadStatusError(NeckarError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, status: int, body: str, url: str = "") -> None:
        """Keep the status and raw body for callers to inspect."""
        super().__init__(f"bad http status {status} from {url or 'server'}")
        self.status = status
        self.body = body
        self.url = url


class ResponseDecodeError(NeckarError):
    """Raised when a 2xx response body is not valid JSON."""

    def __init__(self, url: str, body: str) -> None:
        """Keep the undecodable body for callers to inspect."""
        super().__init__(f"response from {url} is not valid JSON")
        self.url = url
        self.body = body


class AuthenticationError(NeckarError):
    """Raised when a credential cannot be acquired."""


class VaultError(AuthenticationError):
    """Raised when a vault login or token request fails."""


class GraphQLResponseError(NeckarError):
    """Raised when a GraphQL response carries an ``errors`` list."""

    def __init__(self, errors: list[dict], data: dict | None = None) -> None:  # type: ignore[type-arg]
        """Keep the raw errors and any partial data."""
        messages = "; ".join(str(e.get("message", e)) for e in errors)
        super().__init__(f"graphql errors: {messages}")
        self.errors = errors
        self.data = data


class UploadError(NeckarError):
    """Raised when a phase of the file upload protocol fails."""

    def __init__(self, phase: str, message: str) -> None:
        """Record which phase (create, upload, confirm) failed."""
        super().__init__(f"upload {phase} failed: {message}")
        self.phase = phase
