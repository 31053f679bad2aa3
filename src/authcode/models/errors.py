"""Exception hierarchy for the authorization code flow.

Each failure mode has its own type so callers can tell a misconfigured
client from a provider refusal, a broken network, or an unexpected
response schema.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 related errors."""

    pass


class ConfigurationError(OAuth2Error):
    """Raised when a required field is missing or invalid.

    Covers bad provider configuration, unsupported PKCE methods, empty
    scopes for providers that require them, and malformed verifiers.
    Never worth retrying.
    """

    pass


class RandomGenerationError(OAuth2Error):
    """Raised when the secure entropy source is unavailable."""

    pass


class TokenError(OAuth2Error):
    """Raised when the authorization code to token exchange fails."""

    pass


class NetworkError(TokenError):
    """Raised when the token endpoint round trip could not be completed.

    Connection refusals, DNS and TLS failures and timeouts all end up here.
    The caller may retry.
    """

    pass


class HttpStatusError(TokenError):
    """Raised when the token endpoint answers with a non-200 status.

    The body is kept as raw text for diagnostics and is never parsed.
    """

    def __init__(self, status: int, reason: str, body: str = ""):
        self.status = status
        self.reason = reason
        self.body = body
        super().__init__(f"Token endpoint returned HTTP {status} {reason}".rstrip())


class JsonParseError(TokenError):
    """Raised when a 200 response body does not match the response schema."""

    pass
