"""Client library for the Neckar platform."""

from neckar_client.client import NeckarClient, make_client
from neckar_client.upload import FileUploader

__all__ = [
    "FileUploader",
    "NeckarClient",
    "make_client",
]
