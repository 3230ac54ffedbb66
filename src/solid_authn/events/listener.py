"""Typed session event emitter.

Unlike a generic string-keyed event bus, the set of channels is closed and
every channel has its own listener signature. Registering on an unlisted
name, or with a listener that cannot take the channel's arguments, fails
at registration time instead of at emission time.
"""

from __future__ import annotations

import inspect
import logging
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Literal, NoReturn, overload

from solid_authn.events.constants import (
    DEPRECATED_EVENTS,
    LISTENER_ARITY,
    MIN_LISTENER_ARITY,
    SessionEvent,
)
from solid_authn.models.errors import InvalidListenerError, UnknownSessionEventError
from solid_authn.models.flow import AuthorizationRequestState
from solid_authn.models.tokens import SessionTokenSet

logger = logging.getLogger(__name__)

NoArgListener = Callable[[], object]
SessionRestoredListener = Callable[[str], object]
ErrorListener = (
    Callable[[str | None], object]
    | Callable[[str | None, str | Exception | None], object]
)
SessionExtendedListener = Callable[[int], object]
TimeoutSetListener = Callable[[Any], object]
NewRefreshTokenListener = Callable[[str], object]
NewTokensListener = Callable[[SessionTokenSet], object]
AuthorizationRequestListener = Callable[[AuthorizationRequestState], object]

_NoArgEvent = Literal[
    SessionEvent.LOGIN,
    SessionEvent.LOGOUT,
    SessionEvent.SESSION_EXPIRED,
    "login",
    "logout",
    "sessionExpired",
]
_SessionRestoredEvent = Literal[SessionEvent.SESSION_RESTORED, "sessionRestore"]
_ErrorEvent = Literal[SessionEvent.ERROR, "error"]
_SessionExtendedEvent = Literal[SessionEvent.SESSION_EXTENDED, "sessionExtended"]
_TimeoutSetEvent = Literal[SessionEvent.TIMEOUT_SET, "timeoutSet"]
_NewRefreshTokenEvent = Literal[SessionEvent.NEW_REFRESH_TOKEN, "newRefreshToken"]
_NewTokensEvent = Literal[SessionEvent.NEW_TOKENS, "newTokens"]
_AuthorizationRequestEvent = Literal[
    SessionEvent.AUTHORIZATION_REQUEST, "authorizationRequest"
]


@dataclass(eq=False)
class _Registration:
    listener: Callable[..., object]
    arg_count: int
    once: bool = False


def resolve_event(event: SessionEvent | str) -> SessionEvent:
    """Map a channel name to its ``SessionEvent``.

    Raises:
        UnknownSessionEventError: If the name is not one of the session channels.
    """
    if isinstance(event, SessionEvent):
        return event
    try:
        return SessionEvent(event)
    except ValueError as e:
        raise UnknownSessionEventError(
            f"{event!r} is not a session event. Expected one of: "
            f"{', '.join(member.value for member in SessionEvent)}"
        ) from e


def _validate_listener(event: SessionEvent, listener: Callable[..., object]) -> int:
    """Check ``listener`` against the channel and return how many arguments it takes."""
    if not callable(listener):
        raise InvalidListenerError(
            f"Listener for {event.value} must be callable, got {type(listener).__name__}"
        )
    if inspect.iscoroutinefunction(listener):
        # Delivery is synchronous, the coroutine would never be awaited.
        raise InvalidListenerError(
            f"Listener for {event.value} must be a plain function, not a coroutine function"
        )

    arity = LISTENER_ARITY[event]
    min_arity = MIN_LISTENER_ARITY.get(event, arity)
    try:
        signature = inspect.signature(listener)
    except (TypeError, ValueError):
        # Some builtins expose no signature; accept them as-is.
        return arity

    for arg_count in range(arity, min_arity - 1, -1):
        try:
            signature.bind(*([None] * arg_count))
        except TypeError:
            continue
        return arg_count

    expected = str(arity) if min_arity == arity else f"{min_arity} to {arity}"
    raise InvalidListenerError(
        f"Listener for {event.value} must accept {expected} positional argument(s)"
    )


class SessionEventEmitter:
    """Emits session lifecycle events to registered listeners.

    Delivery is synchronous and follows registration order. The listener
    list is snapshotted when an emission starts, so listeners added while
    it runs are only called from the next emission onwards.

    A listener that raises is logged and skipped; the remaining listeners
    still receive the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[SessionEvent, list[_Registration]] = {
            event: [] for event in SessionEvent
        }

    # ================================
    # Registration
    # ================================

    @overload
    def on(self, event: _NoArgEvent, listener: NoArgListener) -> SessionEventEmitter: ...
    @overload
    def on(
        self, event: _SessionRestoredEvent, listener: SessionRestoredListener
    ) -> SessionEventEmitter: ...
    @overload
    def on(self, event: _ErrorEvent, listener: ErrorListener) -> SessionEventEmitter: ...
    @overload
    def on(
        self, event: _SessionExtendedEvent, listener: SessionExtendedListener
    ) -> SessionEventEmitter: ...
    @overload
    def on(
        self, event: _TimeoutSetEvent, listener: TimeoutSetListener
    ) -> SessionEventEmitter: ...
    @overload
    def on(
        self, event: _NewRefreshTokenEvent, listener: NewRefreshTokenListener
    ) -> SessionEventEmitter: ...
    @overload
    def on(
        self, event: _NewTokensEvent, listener: NewTokensListener
    ) -> SessionEventEmitter: ...
    @overload
    def on(
        self, event: _AuthorizationRequestEvent, listener: AuthorizationRequestListener
    ) -> SessionEventEmitter: ...
    @overload
    def on(self, event: str, listener: NoReturn) -> SessionEventEmitter: ...

    def on(self, event, listener):
        """Register a listener called every time the event is emitted.

        Args:
            event: A ``SessionEvent`` member or its string value.
            listener: Callable accepting the channel's arguments.

        Returns:
            The emitter, for chaining.

        Raises:
            UnknownSessionEventError: If ``event`` is not a session channel.
            InvalidListenerError: If ``listener`` cannot take the channel's arguments.
        """
        return self._add(event, listener, once=False)

    add_listener = on

    @overload
    def once(
        self, event: _NoArgEvent, listener: NoArgListener
    ) -> SessionEventEmitter: ...
    @overload
    def once(
        self, event: _SessionRestoredEvent, listener: SessionRestoredListener
    ) -> SessionEventEmitter: ...
    @overload
    def once(self, event: _ErrorEvent, listener: ErrorListener) -> SessionEventEmitter: ...
    @overload
    def once(
        self, event: _SessionExtendedEvent, listener: SessionExtendedListener
    ) -> SessionEventEmitter: ...
    @overload
    def once(
        self, event: _TimeoutSetEvent, listener: TimeoutSetListener
    ) -> SessionEventEmitter: ...
    @overload
    def once(
        self, event: _NewRefreshTokenEvent, listener: NewRefreshTokenListener
    ) -> SessionEventEmitter: ...
    @overload
    def once(
        self, event: _NewTokensEvent, listener: NewTokensListener
    ) -> SessionEventEmitter: ...
    @overload
    def once(
        self, event: _AuthorizationRequestEvent, listener: AuthorizationRequestListener
    ) -> SessionEventEmitter: ...
    @overload
    def once(self, event: str, listener: NoReturn) -> SessionEventEmitter: ...

    def once(self, event, listener):
        """Register a listener called only on the next emission of the event.

        Same validation as ``on``.
        """
        return self._add(event, listener, once=True)

    @overload
    def off(self, event: _NoArgEvent, listener: NoArgListener) -> SessionEventEmitter: ...
    @overload
    def off(
        self, event: _SessionRestoredEvent, listener: SessionRestoredListener
    ) -> SessionEventEmitter: ...
    @overload
    def off(self, event: _ErrorEvent, listener: ErrorListener) -> SessionEventEmitter: ...
    @overload
    def off(
        self, event: _SessionExtendedEvent, listener: SessionExtendedListener
    ) -> SessionEventEmitter: ...
    @overload
    def off(
        self, event: _TimeoutSetEvent, listener: TimeoutSetListener
    ) -> SessionEventEmitter: ...
    @overload
    def off(
        self, event: _NewRefreshTokenEvent, listener: NewRefreshTokenListener
    ) -> SessionEventEmitter: ...
    @overload
    def off(
        self, event: _NewTokensEvent, listener: NewTokensListener
    ) -> SessionEventEmitter: ...
    @overload
    def off(
        self, event: _AuthorizationRequestEvent, listener: AuthorizationRequestListener
    ) -> SessionEventEmitter: ...
    @overload
    def off(self, event: str, listener: NoReturn) -> SessionEventEmitter: ...

    def off(self, event, listener):
        """Unregister a listener.

        Removes the most recently added registration of ``listener`` on the
        event, whether it was added with ``on`` or ``once``. Unknown
        listeners are ignored.

        Raises:
            UnknownSessionEventError: If ``event`` is not a session channel.
        """
        resolved = resolve_event(event)
        registrations = self._listeners[resolved]
        for index in range(len(registrations) - 1, -1, -1):
            if registrations[index].listener == listener:
                del registrations[index]
                break
        return self

    remove_listener = off

    def remove_all_listeners(
        self, event: SessionEvent | str | None = None
    ) -> SessionEventEmitter:
        """Drop every listener, or every listener of one event."""
        if event is None:
            for registrations in self._listeners.values():
                registrations.clear()
        else:
            self._listeners[resolve_event(event)].clear()
        return self

    def listeners(self, event: SessionEvent | str) -> list[Callable[..., object]]:
        """Get a copy of the listeners registered for an event."""
        return [
            registration.listener
            for registration in self._listeners[resolve_event(event)]
        ]

    def listener_count(self, event: SessionEvent | str) -> int:
        return len(self._listeners[resolve_event(event)])

    def _add(
        self, event: SessionEvent | str, listener: Callable[..., object], once: bool
    ) -> SessionEventEmitter:
        resolved = resolve_event(event)
        arg_count = _validate_listener(resolved, listener)

        if resolved in DEPRECATED_EVENTS:
            warnings.warn(
                f"The {resolved.value} event is deprecated, listen to "
                f"{DEPRECATED_EVENTS[resolved].value} instead",
                DeprecationWarning,
                stacklevel=3,
            )

        self._listeners[resolved].append(
            _Registration(listener=listener, arg_count=arg_count, once=once)
        )
        return self

    # ================================
    # Emission
    # ================================

    def emit(self, event: SessionEvent | str, *args: Any) -> bool:
        """Deliver an event to its listeners.

        Args:
            event: A ``SessionEvent`` member or its string value.
            *args: Exactly the channel's arguments, in order.

        Returns:
            True if the event had listeners, False otherwise.

        Raises:
            UnknownSessionEventError: If ``event`` is not a session channel.
            TypeError: If the argument count does not match the channel.
        """
        resolved = resolve_event(event)
        arity = LISTENER_ARITY[resolved]
        if len(args) != arity:
            raise TypeError(
                f"{resolved.value} is emitted with {arity} argument(s), got {len(args)}"
            )

        registrations = self._listeners[resolved]
        if not registrations:
            return False

        for registration in list(registrations):
            if registration.once:
                # Already removed by off() or a previous emission
                if registration not in registrations:
                    continue
                registrations.remove(registration)
            try:
                registration.listener(*args[: registration.arg_count])
            except Exception:
                logger.exception(f"Listener for {resolved.value} failed")
        return True

    def emit_login(self) -> bool:
        return self.emit(SessionEvent.LOGIN)

    def emit_logout(self) -> bool:
        return self.emit(SessionEvent.LOGOUT)

    def emit_session_expired(self) -> bool:
        return self.emit(SessionEvent.SESSION_EXPIRED)

    def emit_session_restored(self, current_url: str) -> bool:
        """Signal that a prior session was silently re-established.

        Args:
            current_url: The URL that was active when the session was restored.
        """
        return self.emit(SessionEvent.SESSION_RESTORED, current_url)

    def emit_error(
        self,
        error_id: str | None,
        description: str | Exception | None = None,
    ) -> bool:
        """Report an authentication error.

        This is the single reporting path for failures that happen after the
        redirect: token exchange failures, expired sessions and the like.

        Args:
            error_id: Error identifier, typically an OAuth error code.
            description: Optional human or machine readable description.
        """
        return self.emit(SessionEvent.ERROR, error_id, description)

    def emit_session_extended(self, expires_in: int) -> bool:
        """Signal that the session's validity window was extended.

        Args:
            expires_in: Seconds until the session now expires.
        """
        return self.emit(SessionEvent.SESSION_EXTENDED, expires_in)

    def emit_timeout_set(self, timeout_handle: Any) -> bool:
        """Signal that an internal expiry timer was (re)armed.

        Args:
            timeout_handle: Handle of the scheduled timer, e.g. an
                ``asyncio.TimerHandle``.
        """
        return self.emit(SessionEvent.TIMEOUT_SET, timeout_handle)

    def emit_new_tokens(self, token_set: SessionTokenSet) -> bool:
        """Signal that new tokens were issued.

        Drives two independent channels: the deprecated ``NEW_REFRESH_TOKEN``
        channel first, when the set carries a refresh token, then
        ``NEW_TOKENS`` with the whole set.

        Returns:
            True if either channel had listeners.
        """
        delivered = False
        if token_set.refresh_token is not None:
            delivered = self.emit(
                SessionEvent.NEW_REFRESH_TOKEN, token_set.refresh_token
            )
        return self.emit(SessionEvent.NEW_TOKENS, token_set) or delivered

    def emit_authorization_request(self, state: AuthorizationRequestState) -> bool:
        return self.emit(SessionEvent.AUTHORIZATION_REQUEST, state)
