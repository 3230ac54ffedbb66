"""Exception hierarchy for the authentication core.

Only the inapplicable-flow case is detected locally. Storage and redirector
failures are never wrapped; they reach the caller as raised.
"""

from __future__ import annotations


class AuthenticationError(Exception):
    """Base exception for all authentication core errors."""

    pass


class UnsupportedFlowError(AuthenticationError):
    """Raised when the authorization code flow cannot run for the given options.

    Either the issuer does not advertise the ``authorization_code`` grant or
    no redirect URL was supplied.
    """

    pass


class UnknownSessionEventError(AuthenticationError, ValueError):
    """Raised when a listener is registered or emitted on an unlisted channel."""

    pass


class InvalidListenerError(AuthenticationError, TypeError):
    """Raised when a listener cannot accept the arguments of its channel."""

    pass


class StorageError(AuthenticationError):
    """Raised when a stored user record cannot be decoded."""

    pass
