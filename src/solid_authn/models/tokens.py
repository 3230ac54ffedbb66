"""Token models shared between the login flow and session event listeners.

Tokens are produced by the resuming side of the flow, not by the
pre-redirect handler, but every listener on ``NEW_TOKENS`` receives them in
this shape.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KeyPair(BaseModel):
    """DPoP key pair the access token (and possibly refresh token) is bound to.

    The private key is an opaque object owned by whatever produced it; this
    package never inspects or signs with it.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    private_key: Any = Field(repr=False)
    public_key: dict[str, Any]


class SessionTokenSet(BaseModel):
    """A set of tokens passed to the application.

    Optional fields reflect that not every grant yields every token type.
    Serialises with camelCase keys (``accessToken``, ``webId``...) when
    dumped ``by_alias``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str | None = Field(default=None, repr=False)
    """JWT-serialized access token."""

    id_token: str | None = Field(default=None, repr=False)
    """JWT-serialized ID token."""

    web_id: str | None = None
    """URL identifying the subject of the ID token."""

    refresh_token: str | None = Field(default=None, repr=False)
    """Refresh token, not necessarily a JWT."""

    expires_at: float | None = None
    """Expiration of the access token as a Unix timestamp."""

    dpop_key: KeyPair | None = None

    issuer: str
    """The user's identity provider."""

    client_id: str
    """The ID of the application."""

    def is_expired(self, buffer_seconds: float = 0.0) -> bool:
        """Check whether the access token has expired.

        A set without ``expires_at`` never expires.
        """
        if self.expires_at is None:
            return False
        return time.time() >= (self.expires_at - buffer_seconds)

    def is_dpop_bound(self) -> bool:
        return self.dpop_key is not None
