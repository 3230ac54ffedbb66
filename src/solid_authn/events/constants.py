"""Session event channel names.

The string values are the public notification surface: existing
subscribers match on them, so they must never change.
"""

from enum import Enum


class SessionEvent(str, Enum):
    """Closed set of session lifecycle channels."""

    LOGIN = "login"
    LOGOUT = "logout"
    SESSION_EXPIRED = "sessionExpired"
    SESSION_RESTORED = "sessionRestore"
    ERROR = "error"
    SESSION_EXTENDED = "sessionExtended"
    TIMEOUT_SET = "timeoutSet"
    NEW_REFRESH_TOKEN = "newRefreshToken"  # deprecated, use NEW_TOKENS
    NEW_TOKENS = "newTokens"
    AUTHORIZATION_REQUEST = "authorizationRequest"


# Positional argument count each channel's listeners are called with.
LISTENER_ARITY: dict[SessionEvent, int] = {
    SessionEvent.LOGIN: 0,
    SessionEvent.LOGOUT: 0,
    SessionEvent.SESSION_EXPIRED: 0,
    SessionEvent.SESSION_RESTORED: 1,
    SessionEvent.ERROR: 2,
    SessionEvent.SESSION_EXTENDED: 1,
    SessionEvent.TIMEOUT_SET: 1,
    SessionEvent.NEW_REFRESH_TOKEN: 1,
    SessionEvent.NEW_TOKENS: 1,
    SessionEvent.AUTHORIZATION_REQUEST: 1,
}

# Channels whose trailing arguments are optional for listeners.
MIN_LISTENER_ARITY: dict[SessionEvent, int] = {
    SessionEvent.ERROR: 1,
}

DEPRECATED_EVENTS: dict[SessionEvent, SessionEvent] = {
    SessionEvent.NEW_REFRESH_TOKEN: SessionEvent.NEW_TOKENS,
}
