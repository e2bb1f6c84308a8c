"""File upload protocol models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadTicket(BaseModel):
    """Result of the create phase: where to send the bytes."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Server-side file identifier")
    upload_url: str = Field(description="Pre-signed URL accepting a PUT of the content")


class UploadedFile(BaseModel):
    """Confirmed file record."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Server-side file identifier")
    name: str | None = Field(default=None, description="File name")
    content_type: str | None = Field(default=None, description="MIME type")
    size: int | None = Field(default=None, ge=0, description="Size in bytes")
