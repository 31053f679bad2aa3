"""Named provider presets.

A profile is only configuration: endpoints, default scopes, the response
schema, and which parts of the flow the provider insists on. Every profile
is driven by the same :class:`~authcode.engine.OAuth2Engine`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pydantic import BaseModel

from authcode.models.errors import ConfigurationError
from authcode.models.tokens import TokenResponse


class LinkedInTokenResponse(TokenResponse):
    """LinkedIn adds the lifetime of the refresh token to the response."""

    refresh_token_expires_in: int | None = None


@dataclass(frozen=True)
class ProviderProfile:
    """Configuration preset for a specific identity provider."""

    name: str
    authorize_endpoint: str
    token_endpoint: str
    default_scopes: tuple[str, ...] = ()
    response_model: type[BaseModel] = TokenResponse
    requires_scope: bool = True
    requires_pkce: bool = False
    default_extra_params: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )


DISCORD = ProviderProfile(
    name="discord",
    authorize_endpoint="https://discord.com/oauth2/authorize",
    token_endpoint="https://discord.com/api/oauth2/token",
    default_scopes=("identify", "email"),
)

GOOGLE = ProviderProfile(
    name="google",
    authorize_endpoint="https://accounts.google.com/o/oauth2/v2/auth",
    token_endpoint="https://oauth2.googleapis.com/token",
    default_scopes=("openid", "email", "profile"),
    requires_pkce=True,
    default_extra_params=MappingProxyType({"access_type": "offline"}),
)

LINKEDIN = ProviderProfile(
    name="linkedin",
    authorize_endpoint="https://www.linkedin.com/oauth/v2/authorization",
    token_endpoint="https://www.linkedin.com/oauth/v2/accessToken",
    default_scopes=("openid", "profile", "email"),
    response_model=LinkedInTokenResponse,
)

PROFILES: Mapping[str, ProviderProfile] = MappingProxyType(
    {profile.name: profile for profile in (DISCORD, GOOGLE, LINKEDIN)}
)


def get_profile(name: str) -> ProviderProfile:
    """Get a provider preset by name.

    Args:
        name: Provider name (e.g., "google", "discord"), case-insensitive

    Raises:
        ConfigurationError: If no preset exists under that name
    """
    profile = PROFILES.get(name.strip().lower())
    if profile is None:
        raise ConfigurationError(
            f"Unknown provider profile: {name!r} "
            f"(available: {', '.join(sorted(PROFILES))})"
        )
    return profile
