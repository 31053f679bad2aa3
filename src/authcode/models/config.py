"""Provider configuration for the authorization code flow.

A :class:`ProviderConfig` is validated once and never mutated, so one
instance can back an engine shared by many request handlers.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError, field_validator

from authcode.models.errors import ConfigurationError

if TYPE_CHECKING:
    from authcode.providers import ProviderProfile

ENV_FIELDS = (
    "client_id",
    "client_secret",
    "redirect_uri",
    "authorize_endpoint",
    "token_endpoint",
)


class ProviderConfig(BaseModel):
    """Client credentials and endpoints for one identity provider."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    redirect_uri: str
    authorize_endpoint: str
    token_endpoint: str

    @field_validator("client_id")
    @classmethod
    def validate_client_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("client_id must not be empty")
        return v

    @field_validator("client_secret")
    @classmethod
    def validate_client_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("client_secret must not be empty")
        return v

    @field_validator("redirect_uri", "authorize_endpoint", "token_endpoint")
    @classmethod
    def validate_absolute_url(cls, v: str) -> str:
        """Require absolute http(s) URLs with a host."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Must be an absolute http(s) URL: {v!r}")
        return v

    @classmethod
    def build(cls, **values: Any) -> ProviderConfig:
        """Validate values into a config, raising ConfigurationError on failure."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid provider configuration: {e}") from e

    @classmethod
    def from_env(
        cls,
        prefix: str = "OAUTH2",
        profile: ProviderProfile | None = None,
        env_file: str | os.PathLike[str] | None = None,
    ) -> ProviderConfig:
        """Load configuration from environment variables.

        Reads ``<PREFIX>_CLIENT_ID``, ``<PREFIX>_CLIENT_SECRET``,
        ``<PREFIX>_REDIRECT_URI``, ``<PREFIX>_AUTHORIZE_ENDPOINT`` and
        ``<PREFIX>_TOKEN_ENDPOINT``. Values from ``env_file`` are used as a
        fallback; the process environment wins. Endpoints default to the
        profile's when a profile is given.

        Args:
            prefix: Variable name prefix
            profile: Optional provider preset supplying default endpoints
            env_file: Optional path to a .env file

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        source: dict[str, str | None] = {}
        if env_file is not None:
            source.update(dotenv_values(env_file))
        source.update(os.environ)

        defaults: Mapping[str, str] = {}
        if profile is not None:
            defaults = {
                "authorize_endpoint": profile.authorize_endpoint,
                "token_endpoint": profile.token_endpoint,
            }

        values: dict[str, str] = {}
        for name in ENV_FIELDS:
            variable = f"{prefix}_{name.upper()}"
            value = source.get(variable) or defaults.get(name)
            if not value:
                raise ConfigurationError(f"Missing required setting {variable}")
            values[name] = value

        return cls.build(**values)
