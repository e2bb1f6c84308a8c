"""Two-phase file upload: create a ticket, PUT the bytes, confirm."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from pydantic import ValidationError

from neckar_core.exceptions import NeckarError, UploadError
from neckar_core.models.upload import UploadedFile, UploadTicket
from neckar_infra.http.transport import HttpTransport

logger = structlog.get_logger()

GraphQLExecutor = Callable[[str, dict[str, Any] | None], Awaitable[dict[str, Any]]]

M_FILE_UPLOAD_CREATE = """
mutation($name: String!, $content_type: String!, $size: Int!) {
  file_upload_create(name: $name, content_type: $content_type, size: $size) {
    id, upload_url
  }
}
"""

M_FILE_UPLOAD_CONFIRM = """
mutation($id: ID!) {
  file_upload_confirm(id: $id) {
    id, name, content_type, size
  }
}
"""


class FileUploader:
    """Runs the create / upload / confirm sequence for one file at a time.

    The create and confirm phases are GraphQL mutations sent with the
    caller's credentials; the upload phase PUTs to a pre-signed URL without
    them. Confirm is only sent once the bytes were accepted.
    """

    def __init__(self, graphql: GraphQLExecutor, transport: HttpTransport) -> None:
        """Initialize with a GraphQL executor and the raw transport."""
        self._graphql = graphql
        self._transport = transport

    async def upload(self, content: bytes, name: str, content_type: str) -> UploadedFile:
        """Upload ``content`` and return the confirmed file record."""
        ticket = await self._create(name, content_type, len(content))
        await self._put(ticket, content, content_type)
        uploaded = await self._confirm(ticket)
        logger.info("file_uploaded", file_id=uploaded.id, name=name, size=len(content))
        return uploaded

    async def _create(self, name: str, content_type: str, size: int) -> UploadTicket:
        try:
            data = await self._graphql(
                M_FILE_UPLOAD_CREATE,
                {"name": name, "content_type": content_type, "size": size},
            )
            return UploadTicket.model_validate(data["file_upload_create"])
        except (NeckarError, ValidationError, KeyError, TypeError) as exc:
            raise UploadError("create", str(exc)) from exc

    async def _put(self, ticket: UploadTicket, content: bytes, content_type: str) -> None:
        try:
            await self._transport.request(
                "PUT",
                ticket.upload_url,
                headers={"Content-Type": content_type},
                content=content,
                expect_json=False,
            )
        except NeckarError as exc:
            raise UploadError("upload", str(exc)) from exc

    async def _confirm(self, ticket: UploadTicket) -> UploadedFile:
        try:
            data = await self._graphql(M_FILE_UPLOAD_CONFIRM, {"id": ticket.id})
            return UploadedFile.model_validate(data["file_upload_confirm"])
        except (NeckarError, ValidationError, KeyError, TypeError) as exc:
            raise UploadError("confirm", str(exc)) from exc
