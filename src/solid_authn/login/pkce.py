"""PKCE (Proof Key for Code Exchange) parameter generation, RFC 7636.

The code verifier is the secret persisted across the redirect; only its
S256 challenge travels to the identity provider.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from dataclasses import dataclass, field

_VERIFIER_ALPHABET = string.ascii_letters + string.digits + "-._~"


@dataclass(frozen=True)
class PKCEParameters:
    """PKCE parameters for a single authorization request."""

    code_verifier: str = field(repr=False)
    code_challenge: str = field()
    code_challenge_method: str = field(default="S256")

    def __post_init__(self) -> None:
        """Validate PKCE parameters meet RFC 7636 requirements."""
        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")


def generate_code_verifier(length: int = 128) -> str:
    """Generate a cryptographically secure code verifier.

    RFC 7636 Section 4.1: 43-128 characters from
    [A-Z] / [a-z] / [0-9] / "-" / "." / "_" / "~"
    """
    if not (43 <= length <= 128):
        raise ValueError("code_verifier length must be between 43 and 128")
    return "".join(secrets.choice(_VERIFIER_ALPHABET) for _ in range(length))


def generate_code_challenge(code_verifier: str) -> str:
    """BASE64URL-ENCODE(SHA256(ASCII(code_verifier))), RFC 7636 Section 4.2."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def generate_state() -> str:
    """Generate an unguessable OAuth state value.

    Used as the storage key for the flow, so it must never be derived from
    the session id.
    """
    return secrets.token_urlsafe(24)


def generate_pkce_parameters() -> PKCEParameters:
    code_verifier = generate_code_verifier()
    return PKCEParameters(
        code_verifier=code_verifier,
        code_challenge=generate_code_challenge(code_verifier),
    )
