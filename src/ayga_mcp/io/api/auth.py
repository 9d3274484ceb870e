"""Authentication strategies for the control-plane and queue backend.

The backend accepts a single header-based API key. Keys are stored as
``SecretStr`` so they never leak through ``repr`` or JSON dumps.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, SecretStr, Tag, field_serializer


class NoAuth(BaseModel):
    """No authentication."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")
    auth_type: Literal["none"] = "none"

    @property
    def configured(self) -> bool:
        return False

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        return headers

    def __hash__(self) -> int:
        return hash(self.auth_type)


class ApiKeyAuth(BaseModel):
    """API key sent in a request header (``X-API-Key`` by default)."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        revalidate_instances="never",
    )
    auth_type: Literal["api_key"] = "api_key"
    key: SecretStr = Field(..., description="API key value")
    header_name: Annotated[str, Field(
        default="X-API-Key",
        pattern=r"^[A-Za-z][A-Za-z0-9-]*$",
        description="HTTP header name for the key",
    )]

    @property
    def configured(self) -> bool:
        return True

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        headers[self.header_name] = self.key.get_secret_value()
        return headers

    @field_serializer("key", when_used="json")
    def _mask_key(self, v: SecretStr) -> str:
        """Mask API key in JSON serialization."""
        secret = v.get_secret_value()
        return f"{secret[:4]}..." if len(secret) > 4 else "***"

    def __hash__(self) -> int:
        return hash((self.auth_type, self.header_name))


def _auth_discriminator(v: dict[str, object] | BaseModel) -> str:
    """Discriminator function for auth strategy union."""
    if isinstance(v, dict):
        return str(v.get("auth_type", "none"))
    return getattr(v, "auth_type", "none")


AuthStrategy = Annotated[
    Annotated[NoAuth, Tag("none")]
    | Annotated[ApiKeyAuth, Tag("api_key")],
    Discriminator(_auth_discriminator),
]


def auth_from_key(key: SecretStr | str | None) -> NoAuth | ApiKeyAuth:
    """Build the auth strategy for an optional API key."""
    if key is None:
        return NoAuth()
    secret = key if isinstance(key, SecretStr) else SecretStr(key)
    if not secret.get_secret_value().strip():
        return NoAuth()
    return ApiKeyAuth(key=secret)
