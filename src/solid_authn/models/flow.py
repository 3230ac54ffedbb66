"""Authorization flow models.

Contains the authorization request sent to the identity provider and the
records persisted across the redirect so the flow can be resumed in a new
process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from solid_authn.models.errors import StorageError


def _bool_to_str(value: bool) -> str:
    return "true" if value else "false"


def _str_to_bool(value: str) -> bool:
    return value == "true"


class AuthorizationRequestState(BaseModel):
    """State preserved during an authorization request.

    Emitted on the ``AUTHORIZATION_REQUEST`` channel so applications that
    manage their own storage can keep it. The code verifier is a secret:
    combined with the authorization code it yields tokens, so it is kept
    out of ``repr``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    code_verifier: str = Field(repr=False)
    state: str
    issuer: str
    redirect_url: str
    dpop_bound: bool
    client_id: str


@dataclass(frozen=True)
class StateRecord:
    """Record stored under the OAuth ``state`` value.

    Only points at the session id. The state is crypto-random while the
    session id may be chosen by the application, so the two are kept apart
    and the full record is reached in two hops.
    """

    session_id: str

    def to_storage(self) -> dict[str, str]:
        return {"sessionId": self.session_id}

    @classmethod
    def from_storage(cls, values: dict[str, str]) -> StateRecord:
        try:
            return cls(session_id=values["sessionId"])
        except KeyError as e:
            raise StorageError(f"State record is missing {e}") from e


@dataclass(frozen=True)
class SessionCorrelationRecord:
    """Login-process state stored under the session id.

    Everything the resuming side needs after the redirect: the PKCE code
    verifier, the issuer, the redirect URL and the two session flags.
    Booleans are stored as ``"true"``/``"false"`` strings.
    """

    code_verifier: str = field(repr=False)
    issuer: str
    redirect_url: str
    dpop_bound: bool = False
    keep_alive: bool = True

    def to_storage(self) -> dict[str, str]:
        return {
            "codeVerifier": self.code_verifier,
            "issuer": self.issuer,
            "redirectUrl": self.redirect_url,
            "dpop": _bool_to_str(self.dpop_bound),
            "keepAlive": _bool_to_str(self.keep_alive),
        }

    @classmethod
    def from_storage(cls, values: dict[str, str]) -> SessionCorrelationRecord:
        try:
            return cls(
                code_verifier=values["codeVerifier"],
                issuer=values["issuer"],
                redirect_url=values["redirectUrl"],
                dpop_bound=_str_to_bool(values.get("dpop", "false")),
                # Records written before keepAlive existed kept the session alive
                keep_alive=_str_to_bool(values.get("keepAlive", "true")),
            )
        except KeyError as e:
            raise StorageError(f"Session record is missing {e}") from e


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request parameters for the code flow with PKCE."""

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    code_challenge: str
    code_challenge_method: str
    state: str
    scope: str | None = None
    prompt: str | None = None

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
            "state": self.state,
        }

        if self.scope:
            params["scope"] = self.scope
        if self.prompt:
            params["prompt"] = self.prompt

        separator = "&" if "?" in self.authorization_endpoint else "?"
        return f"{self.authorization_endpoint}{separator}{urlencode(params)}"
