"""Redirect hand-off to the user agent.

The handler hands off and returns; it never observes where the user agent
ends up.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Redirector(Protocol):
    """Protocol for sending the user agent to the identity provider."""

    def redirect(
        self,
        target_url: str,
        *,
        handle_redirect: Callable[[str], None] | None = None,
    ) -> None:
        """Navigate to ``target_url``, or pass it to ``handle_redirect`` instead.

        Args:
            target_url: Authorization URL at the identity provider.
            handle_redirect: Optional application callback performing the
                navigation itself (e.g. returning an HTTP 302 from a web app).
        """
        ...


class BrowserRedirector:
    """Opens the authorization URL in the system browser.

    Suitable for CLI tools and desktop apps. Web applications should pass a
    ``handle_redirect`` callback instead, which takes precedence.
    """

    def __init__(self, open_new_tab: bool = True):
        self.open_new_tab = open_new_tab

    def redirect(
        self,
        target_url: str,
        *,
        handle_redirect: Callable[[str], None] | None = None,
    ) -> None:
        if handle_redirect is not None:
            handle_redirect(target_url)
            return

        if self.open_new_tab:
            opened = webbrowser.open_new_tab(target_url)
        else:
            opened = webbrowser.open(target_url)

        if not opened:
            logger.warning(
                f"Could not open a browser. Please visit {target_url} to continue."
            )
