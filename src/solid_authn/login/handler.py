"""Authorization code flow with PKCE: the half that runs before the redirect.

Authorization code flow: https://openid.net/specs/openid-connect-core-1_0.html#CodeFlowAuth
PKCE: https://tools.ietf.org/html/rfc7636

The redirect ends this process's involvement. Whatever handles the callback
runs without any of our in-memory state, so everything it needs is written
to storage here, reachable from the ``state`` value the identity provider
echoes back.
"""

from __future__ import annotations

import asyncio
import logging

from solid_authn.login.options import AUTHORIZATION_CODE_GRANT, LoginOptions
from solid_authn.login.pkce import generate_pkce_parameters, generate_state
from solid_authn.models.errors import UnsupportedFlowError
from solid_authn.models.flow import (
    AuthorizationRequest,
    AuthorizationRequestState,
    SessionCorrelationRecord,
    StateRecord,
)
from solid_authn.redirector import Redirector
from solid_authn.storage import StorageUtility

logger = logging.getLogger(__name__)


def _boolean_with_fallback(value: bool | None, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    return fallback


class AuthorizationCodeWithPkceHandler:
    """Starts an authorization code flow with PKCE.

    Applicable only when the issuer advertises the ``authorization_code``
    grant and the options carry a redirect URL. When it applies, the handler
    persists two records and hands the authorization URL to the redirector:

    - ``state -> {sessionId}``
    - ``sessionId -> {codeVerifier, issuer, redirectUrl, dpop, keepAlive}``

    The OAuth state is crypto-random while the session id may be chosen, or
    predicted, by anyone. Keeping them as two separate hops means neither
    can be used to forge the other.
    """

    def __init__(self, storage_utility: StorageUtility, redirector: Redirector):
        self.storage_utility = storage_utility
        self.redirector = redirector

    def parameters_guard(self, options: LoginOptions) -> bool:
        """Check whether the options allow this flow. Pure, no side effects."""
        return (
            options.issuer_configuration.supports_grant(AUTHORIZATION_CODE_GRANT)
            and options.redirect_url is not None
        )

    async def can_handle(self, options: LoginOptions) -> bool:
        return self.parameters_guard(options)

    async def handle(self, options: LoginOptions) -> None:
        """Run the whole pre-redirect half of the flow.

        Generates PKCE parameters and the OAuth state, builds the
        authorization URL, publishes the request state on
        ``AUTHORIZATION_REQUEST`` when the options carry an event emitter,
        then persists and redirects via ``setup_redirect_handler``.

        Raises:
            UnsupportedFlowError: If the flow does not apply to ``options``,
                or the issuer does not advertise S256 PKCE.
            ValueError: If ``options.client`` is missing.
        """
        self._ensure_applicable(options)
        if options.client is None:
            raise ValueError("The authorization code grant requires a client.")
        if "S256" not in options.issuer_configuration.code_challenge_methods_supported:
            raise UnsupportedFlowError(
                f"The issuer {options.issuer} does not support the S256 "
                "code challenge method."
            )

        pkce = generate_pkce_parameters()
        state = generate_state()
        scopes = options.scopes

        auth_request = AuthorizationRequest(
            authorization_endpoint=options.issuer_configuration.authorization_endpoint,
            client_id=options.client.client_id,
            redirect_uri=options.redirect_url,
            code_challenge=pkce.code_challenge,
            code_challenge_method=pkce.code_challenge_method,
            state=state,
            scope=" ".join(scopes) if scopes else None,
            # Refresh tokens are only issued on explicit consent
            prompt="consent" if "offline_access" in scopes else None,
        )
        target_url = auth_request.build_authorization_url()

        if options.event_emitter is not None:
            options.event_emitter.emit_authorization_request(
                AuthorizationRequestState(
                    code_verifier=pkce.code_verifier,
                    state=state,
                    issuer=str(options.issuer),
                    redirect_url=options.redirect_url,
                    dpop_bound=bool(options.dpop),
                    client_id=options.client.client_id,
                )
            )

        await self.setup_redirect_handler(
            options,
            state=state,
            code_verifier=pkce.code_verifier,
            target_url=target_url,
        )

    async def setup_redirect_handler(
        self,
        options: LoginOptions,
        state: str,
        code_verifier: str,
        target_url: str,
    ) -> None:
        """Persist the flow correlation records, then hand off the redirect.

        Both writes are issued together and awaited until both settle. If
        either fails its exception is re-raised unchanged and no redirect
        happens. Nothing is retried or cleaned up.

        Args:
            options: Login options; re-validated even if ``can_handle`` passed.
            state: OAuth state value sent to the identity provider.
            code_verifier: PKCE code verifier for this request.
            target_url: Authorization URL to redirect to.

        Raises:
            UnsupportedFlowError: If the flow does not apply to ``options``.
        """
        self._ensure_applicable(options)

        state_record = StateRecord(session_id=options.session_id)
        session_record = SessionCorrelationRecord(
            code_verifier=code_verifier,
            issuer=str(options.issuer),
            # Read back after the redirect, so it must be stored now
            redirect_url=options.redirect_url,
            dpop_bound=bool(options.dpop),
            keep_alive=_boolean_with_fallback(options.keep_alive, True),
        )

        logger.debug(f"Storing authorization state for session {options.session_id}")
        results = await asyncio.gather(
            self.storage_utility.set_for_user(state, state_record.to_storage()),
            self.storage_utility.set_for_user(
                options.session_id, session_record.to_storage()
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        self.redirector.redirect(target_url, handle_redirect=options.handle_redirect)
        logger.info(f"Redirect handed off for session {options.session_id}")

    def _ensure_applicable(self, options: LoginOptions) -> None:
        if self.parameters_guard(options):
            return
        if not options.issuer_configuration.supports_grant(AUTHORIZATION_CODE_GRANT):
            raise UnsupportedFlowError(
                f"The issuer {options.issuer} does not support the "
                f"{AUTHORIZATION_CODE_GRANT} grant."
            )
        if options.redirect_url is None:
            raise UnsupportedFlowError(
                "The authorization code grant requires a redirectUrl."
            )
        raise UnsupportedFlowError(
            f"{type(self).__name__} cannot handle the login options for "
            f"session {options.session_id}."
        )
