"""OIDC discovery and token response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OIDCConfiguration(BaseModel):
    """Subset of the OpenID Connect discovery document the client relies on."""

    model_config = ConfigDict(extra="allow")

    issuer: str | None = Field(default=None, description="Issuer identifier")
    token_endpoint: str = Field(description="Token endpoint URL")
    userinfo_endpoint: str | None = Field(default=None, description="Userinfo endpoint URL")


class TokenResponse(BaseModel):
    """Password-grant token endpoint response."""

    model_config = ConfigDict(extra="allow")

    access_token: str = Field(description="Bearer access token")
    expires_in: int = Field(ge=0, description="Token lifetime in seconds")
    token_type: str = Field(default="Bearer", description="Token type")
