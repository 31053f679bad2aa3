"""Token exchange request and response models.

The request side is a plain immutable value that knows how to render
itself as an ``application/x-www-form-urlencoded`` body and a Basic
``Authorization`` header. The response side is a pydantic model so the
target schema can be swapped for any provider-specific shape.
"""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class TokenRequest:
    """Access token request parameters (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636) when the authorization
    request carried a code challenge.
    """

    # Required fields first
    token_endpoint: str
    code: str = field(repr=False)
    redirect_uri: str
    client_id: str
    client_secret: str = field(repr=False)

    # Optional fields with defaults last
    code_verifier: str | None = field(default=None, repr=False)
    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request.

        Client credentials travel in the Authorization header, not the body.

        Returns:
            Dictionary suitable for httpx data parameter
        """
        data = {
            "grant_type": self.grant_type,
            "code": self.code,
            "redirect_uri": self.redirect_uri,
        }

        if self.code_verifier:
            data["code_verifier"] = self.code_verifier

        return data

    def basic_auth_header(self) -> str:
        """Build the HTTP Basic client authentication header value."""
        credentials = f"{self.client_id}:{self.client_secret}".encode("utf-8")
        return f"Basic {base64.b64encode(credentials).decode('ascii')}"


class TokenResponse(BaseModel):
    """Successful token response (RFC 6749 Section 5.1).

    Providers extend this schema freely, so unknown fields are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str
    expires_in: int | None = None  # Seconds until expiry
    refresh_token: str | None = None
    scope: str | None = None
    id_token: str | None = None  # OpenID Connect

    @property
    def scopes(self) -> list[str]:
        """Granted scopes as a list."""
        return self.scope.split() if self.scope else []

    def calculate_expires_at(self) -> float | None:
        """Calculate absolute expiry timestamp from expires_in.

        Returns:
            Unix timestamp when token expires, or None if no expiry
        """
        if self.expires_in is None:
            return None
        return time.time() + self.expires_in
