"""Domain models for neckar-client."""

from neckar_core.models.identity import Identity
from neckar_core.models.oidc import OIDCConfiguration, TokenResponse
from neckar_core.models.upload import UploadedFile, UploadTicket

__all__ = [
    "Identity",
    "OIDCConfiguration",
    "TokenResponse",
    "UploadTicket",
    "UploadedFile",
]
