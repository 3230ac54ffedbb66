"""Login options and issuer capabilities consumed by the login handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from solid_authn.events.listener import SessionEventEmitter

AUTHORIZATION_CODE_GRANT = "authorization_code"
DEFAULT_SCOPES = ["openid", "offline_access", "webid"]


class IssuerConfig(BaseModel):
    """Identity provider capabilities (RFC 8414 Authorization Server Metadata).

    ``grant_types_supported`` drives the applicability of a flow;
    ``code_challenge_methods_supported`` must include ``S256`` for PKCE.
    Discovery happens elsewhere; the metadata document it returns can be
    passed straight to ``IssuerConfig.model_validate``.
    """

    issuer: str
    authorization_endpoint: str
    token_endpoint: str

    # Absent means the issuer advertises nothing, not "all grants"
    grant_types_supported: list[str] | None = None

    code_challenge_methods_supported: list[str] = Field(default=["S256"])

    def supports_grant(self, grant_type: str) -> bool:
        return (
            self.grant_types_supported is not None
            and grant_type in self.grant_types_supported
        )


@dataclass(frozen=True)
class ClientInfo:
    """The application as known to the identity provider."""

    client_id: str


@dataclass
class LoginOptions:
    """Options for one login attempt.

    Owned by the caller and expected to stay unchanged for the duration of
    the attempt. Nothing enforces that, so handlers re-check applicability
    before acting on them.
    """

    session_id: str
    issuer: str
    issuer_configuration: IssuerConfig
    redirect_url: str | None = None
    dpop: bool = False
    # None means "not specified", which keeps the session alive
    keep_alive: bool | None = None
    handle_redirect: Callable[[str], None] | None = None
    client: ClientInfo | None = None
    scopes: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))
    event_emitter: SessionEventEmitter | None = None
