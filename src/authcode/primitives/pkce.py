"""PKCE (Proof Key for Code Exchange) challenge derivation.

Implements RFC 7636 Section 4.2. Pure functions: no I/O, no state.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from authcode.models.security import CodeChallengeMethod, PKCEChallenge


def derive_challenge(
    code_verifier: str, method: str | CodeChallengeMethod = CodeChallengeMethod.S256
) -> PKCEChallenge:
    """Derive the code challenge for a code verifier.

    For S256 the code challenge is:
        BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))

    For plain the challenge is the verifier itself.

    Args:
        code_verifier: The code verifier to transform
        method: "S256" or "plain"

    Returns:
        PKCEChallenge carrying the challenge and its method

    Raises:
        ConfigurationError: If method is not a supported challenge method
    """
    challenge_method = CodeChallengeMethod.parse(method)

    if challenge_method is CodeChallengeMethod.PLAIN:
        return PKCEChallenge(code_verifier, challenge_method)

    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")

    return PKCEChallenge(challenge, challenge_method)


def verify_challenge(
    code_verifier: str,
    code_challenge: str,
    method: str | CodeChallengeMethod = CodeChallengeMethod.S256,
) -> bool:
    """Check a verifier against an expected challenge in constant time.

    Public helper for callers; the engine itself only derives challenges.
    """
    derived = derive_challenge(code_verifier, method).code_challenge
    return secrets.compare_digest(derived, code_challenge)
