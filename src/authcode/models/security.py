"""Security-related models for the authorization code flow.

Contains the PKCE challenge value and the per-login random material the
caller is responsible for persisting between redirect and callback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from authcode.models.errors import ConfigurationError
from authcode.primitives.entropy import (
    DEFAULT_BYTE_LENGTH,
    generate_code_verifier,
    generate_state,
    is_unreserved,
    validate_code_verifier,
)


class CodeChallengeMethod(str, Enum):
    """PKCE code challenge methods (RFC 7636 Section 4.2)."""

    S256 = "S256"
    PLAIN = "plain"

    @classmethod
    def parse(cls, method: str | CodeChallengeMethod) -> CodeChallengeMethod:
        try:
            return cls(method)
        except ValueError as e:
            raise ConfigurationError(
                f"Unsupported code_challenge_method: {method!r}"
            ) from e


@dataclass(frozen=True)
class PKCEChallenge:
    """Derived PKCE challenge sent with the authorization request."""

    code_challenge: str = field()
    code_challenge_method: CodeChallengeMethod = field(default=CodeChallengeMethod.S256)


@dataclass(frozen=True)
class AuthorizationRequestMaterial:
    """Random values generated for a single login attempt.

    Owned by the caller: store ``state`` (and ``code_verifier`` when PKCE is
    used) until the callback arrives, then discard them.
    """

    state: str
    code_verifier: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.state:
            raise ConfigurationError("state must not be empty")
        if not is_unreserved(self.state):
            raise ConfigurationError("state contains non-unreserved characters")
        if self.code_verifier is not None:
            validate_code_verifier(self.code_verifier)

    @classmethod
    def generate(
        cls, pkce: bool = True, byte_length: int = DEFAULT_BYTE_LENGTH
    ) -> AuthorizationRequestMaterial:
        """Generate fresh state and, optionally, a PKCE code verifier."""
        return cls(
            state=generate_state(byte_length),
            code_verifier=generate_code_verifier(byte_length) if pkce else None,
        )
