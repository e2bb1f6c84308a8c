"""Application settings using pydantic-settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from neckar_core.exceptions import ConfigurationError

DEFAULT_NECKAR_URL = "https://app.neckar.io/"
DEFAULT_OIDC_SCOPE = "openid email profile"


class OIDCAuthSettings(BaseModel):
    """Direct OIDC password-grant credentials."""

    realm: str = Field(description="Realm base URL, e.g. https://id.example.com/realms/neckar/")
    client_id: str = Field(description="OIDC client identifier")
    username: str = Field(description="Resource owner username")
    password: SecretStr = Field(description="Resource owner password")
    scope: str = Field(default=DEFAULT_OIDC_SCOPE, description="Requested OIDC scopes")


class VaultAuthSettings(BaseModel):
    """Vault AppRole credentials used to obtain a vault-issued OIDC token."""

    url: str = Field(description="Vault server URL")
    role_id: str = Field(description="AppRole role_id")
    secret_id: SecretStr = Field(description="AppRole secret_id")
    role_name: str = Field(description="Vault identity OIDC role to mint tokens for")
    approle_mount: str = Field(default="approle", description="Mount point of the AppRole auth method")
    identity_mount: str = Field(default="identity", description="Mount point of the identity engine")
    realm: str | None = Field(
        default=None,
        description="OIDC realm of the issued tokens, only needed for userinfo",
    )


class Settings(BaseSettings):
    """Central configuration for neckar-client."""

    model_config = SettingsConfigDict(
        env_prefix="NECKAR_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # --- Platform ---
    neckar_url: str = Field(
        default=DEFAULT_NECKAR_URL,
        description="Base URL of the Neckar platform",
    )

    # --- Auth (at most one block) ---
    auth: OIDCAuthSettings | None = Field(
        default=None,
        description="Direct OIDC credentials",
    )
    vault: VaultAuthSettings | None = Field(
        default=None,
        description="Vault-mediated credentials",
    )

    # --- HTTP ---
    http_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout per HTTP request in seconds",
    )
    http_retry_max: int = Field(
        default=3,
        ge=1,
        description="Attempts per request on connection errors",
    )
    http_retry_wait_min: float = Field(
        default=0.5,
        description="Minimum retry wait in seconds",
    )
    http_retry_wait_max: float = Field(
        default=5.0,
        description="Maximum retry wait in seconds",
    )

    # --- Cache ---
    single_flight: bool = Field(
        default=True,
        description="Share one in-flight acquisition between concurrent callers of a key",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Log level name",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )

    @model_validator(mode="after")
    def validate_auth_config(self) -> Settings:
        """Reject configurations naming two credential strategies."""
        if self.auth is not None and self.vault is not None:
            msg = "configure either auth or vault credentials, not both"
            raise ValueError(msg)
        return self

    @property
    def strategy(self) -> Literal["oidc", "vault", "none"]:
        """Credential strategy selected by which block is present."""
        if self.vault is not None:
            return "vault"
        if self.auth is not None:
            return "oidc"
        return "none"

    @classmethod
    def from_file(cls, path: Path, **overrides: object) -> Settings:
        """Load settings from a JSON file; environment fills the gaps."""
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            msg = f"settings file {path} must hold a JSON object"
            raise ConfigurationError(msg)
        data.update(overrides)
        return cls(**data)

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from ``path`` or the environment.

        Raises:
            ConfigurationError: if the file is unreadable or the settings
                are invalid.
        """
        try:
            return cls.from_file(path) if path else cls()
        except ValidationError as exc:
            raise ConfigurationError(_describe_validation_error(exc)) from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"cannot read settings file {path}: {exc}") from exc


def _describe_validation_error(exc: ValidationError) -> str:
    """One line per failing field, without echoing the rejected input."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "settings"
        lines.append(f"{location}: {error['msg']}")
    return "invalid settings: " + "; ".join(lines)
