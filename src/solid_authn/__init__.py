"""Authorization code with PKCE login and session lifecycle events."""

from solid_authn.events.constants import SessionEvent
from solid_authn.events.listener import SessionEventEmitter
from solid_authn.login.handler import AuthorizationCodeWithPkceHandler
from solid_authn.login.options import ClientInfo, IssuerConfig, LoginOptions
from solid_authn.models.errors import (
    AuthenticationError,
    InvalidListenerError,
    StorageError,
    UnknownSessionEventError,
    UnsupportedFlowError,
)
from solid_authn.models.flow import (
    AuthorizationRequestState,
    SessionCorrelationRecord,
    StateRecord,
)
from solid_authn.models.tokens import KeyPair, SessionTokenSet
from solid_authn.redirector import BrowserRedirector, Redirector
from solid_authn.storage import InMemoryStorage, StorageUtility

__all__ = [
    "AuthenticationError",
    "AuthorizationCodeWithPkceHandler",
    "AuthorizationRequestState",
    "BrowserRedirector",
    "ClientInfo",
    "InMemoryStorage",
    "InvalidListenerError",
    "IssuerConfig",
    "KeyPair",
    "LoginOptions",
    "Redirector",
    "SessionCorrelationRecord",
    "SessionEvent",
    "SessionEventEmitter",
    "SessionTokenSet",
    "StateRecord",
    "StorageError",
    "StorageUtility",
    "UnknownSessionEventError",
    "UnsupportedFlowError",
]
