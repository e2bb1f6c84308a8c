"""Observability: structured logging."""

from neckar_client.observability.logging import (
    bind_identity_context,
    clear_identity_context,
    configure_logging,
)

__all__ = [
    "bind_identity_context",
    "clear_identity_context",
    "configure_logging",
]
