"""Cryptographically secure random values for ``state`` and PKCE verifiers.

All values are drawn from the operating system CSPRNG via :mod:`secrets`
and encoded as unpadded base64url, which only uses RFC 3986 unreserved
characters.
"""

from __future__ import annotations

import base64
import re
import secrets

from authcode.models.errors import ConfigurationError, RandomGenerationError

DEFAULT_BYTE_LENGTH = 32

# RFC 7636 Section 4.1: 43..128 characters, i.e. 32..96 raw bytes once encoded.
MIN_VERIFIER_BYTES = 32
MAX_VERIFIER_BYTES = 96
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128

UNRESERVED_PATTERN = re.compile(r"^[A-Za-z0-9\-._~]+$")


def generate_token(byte_length: int = DEFAULT_BYTE_LENGTH) -> str:
    """Generate a URL-safe random token.

    Args:
        byte_length: Number of random bytes to draw before encoding

    Returns:
        Base64url-encoded token without padding

    Raises:
        ConfigurationError: If byte_length is not positive
        RandomGenerationError: If the secure entropy source is unavailable
    """
    if byte_length < 1:
        raise ConfigurationError(f"byte_length must be positive, got {byte_length}")

    try:
        raw = secrets.token_bytes(byte_length)
    except (NotImplementedError, OSError) as e:
        raise RandomGenerationError(f"Secure random source unavailable: {e}") from e

    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_state(byte_length: int = DEFAULT_BYTE_LENGTH) -> str:
    """Generate a ``state`` value for CSRF protection.

    The caller persists it and compares it against the callback.
    """
    return generate_token(byte_length)


def generate_code_verifier(byte_length: int = DEFAULT_BYTE_LENGTH) -> str:
    """Generate a PKCE code verifier.

    Args:
        byte_length: Entropy in bytes, between 32 and 96 inclusive

    Raises:
        ConfigurationError: If byte_length would produce a verifier outside
            the 43-128 character range
    """
    if not (MIN_VERIFIER_BYTES <= byte_length <= MAX_VERIFIER_BYTES):
        raise ConfigurationError(
            f"code_verifier byte_length must be {MIN_VERIFIER_BYTES}-"
            f"{MAX_VERIFIER_BYTES}, got {byte_length}"
        )
    return generate_token(byte_length)


def is_unreserved(value: str) -> bool:
    """Check that a value only uses RFC 3986 unreserved characters."""
    return bool(UNRESERVED_PATTERN.match(value))


def validate_code_verifier(code_verifier: str) -> None:
    """Validate a code verifier against RFC 7636 Section 4.1.

    Raises:
        ConfigurationError: If the verifier has the wrong length or uses
            characters outside the unreserved set
    """
    if not (MIN_VERIFIER_LENGTH <= len(code_verifier) <= MAX_VERIFIER_LENGTH):
        raise ConfigurationError(
            f"code_verifier must be {MIN_VERIFIER_LENGTH}-{MAX_VERIFIER_LENGTH} "
            f"characters, got {len(code_verifier)}"
        )
    if not is_unreserved(code_verifier):
        raise ConfigurationError("code_verifier contains non-unreserved characters")
