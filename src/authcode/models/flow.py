"""Authorization flow models for OAuth 2.0.

Contains the authorization request (and its URL construction) and the
parsed form of the callback the provider redirects back with.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import parse_qs, quote, urlencode, urlparse

from authcode.models.errors import ConfigurationError
from authcode.models.security import PKCEChallenge

PROTOCOL_PARAMS = frozenset(
    {
        "response_type",
        "client_id",
        "redirect_uri",
        "state",
        "scope",
        "code_challenge",
        "code_challenge_method",
    }
)


def join_scopes(scopes: tuple[str, ...]) -> str:
    """Join scope tokens with a single space (RFC 6749 Section 3.3)."""
    for scope in scopes:
        if not scope or any(ch.isspace() for ch in scope):
            raise ConfigurationError(f"Invalid scope token: {scope!r}")
    return " ".join(scopes)


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request parameters for the authorization code flow."""

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    state: str
    scopes: tuple[str, ...] = ()
    pkce: PKCEChallenge | None = None
    extra_params: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL.

        Parameter order is fixed so identical inputs give identical URLs.
        Values are percent-encoded with no safe characters, so spaces in
        the scope list become %20 rather than '+'.
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "state": self.state,
        }

        if self.scopes:
            params["scope"] = join_scopes(self.scopes)

        if self.pkce is not None:
            params["code_challenge"] = self.pkce.code_challenge
            params["code_challenge_method"] = self.pkce.code_challenge_method.value

        overridden = PROTOCOL_PARAMS.intersection(self.extra_params)
        if overridden:
            raise ConfigurationError(
                f"Extra parameters may not override {', '.join(sorted(overridden))}"
            )
        params.update(self.extra_params)

        separator = "&" if "?" in self.authorization_endpoint else "?"
        query = urlencode(params, quote_via=quote, safe="")
        return f"{self.authorization_endpoint}{separator}{query}"


@dataclass(frozen=True)
class AuthorizationResponse:
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None
    error_uri: str | None = None

    def is_success(self) -> bool:
        return self.error is None and self.code is not None

    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def parse_callback_url(cls, callback_url: str) -> AuthorizationResponse:
        """Parse the redirect the provider sends the user back with.

        Only extracts parameters. Comparing ``state`` with the stored value
        is up to the caller.
        """
        query_params = parse_qs(urlparse(callback_url).query)

        # Extract single values from query parameter lists
        def get_single_param(key: str) -> str | None:
            values = query_params.get(key, [])
            return values[0] if values else None

        return cls(
            code=get_single_param("code"),
            state=get_single_param("state"),
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
            error_uri=get_single_param("error_uri"),
        )
