import logging
from unittest.mock import MagicMock

from solid_authn.redirector import BrowserRedirector


class TestBrowserRedirector:
    def setup_method(self):
        self.target_url = "https://idp.example/authorize?state=xyz"

    def test_custom_handler_takes_precedence(self, monkeypatch):
        # Arrange
        open_tab = MagicMock()
        monkeypatch.setattr("webbrowser.open_new_tab", open_tab)
        handle_redirect = MagicMock()

        # Act
        BrowserRedirector().redirect(self.target_url, handle_redirect=handle_redirect)

        # Assert
        handle_redirect.assert_called_once_with(self.target_url)
        open_tab.assert_not_called()

    def test_opens_browser_without_handler(self, monkeypatch):
        # Arrange
        open_tab = MagicMock(return_value=True)
        monkeypatch.setattr("webbrowser.open_new_tab", open_tab)

        # Act
        BrowserRedirector().redirect(self.target_url)

        # Assert
        open_tab.assert_called_once_with(self.target_url)

    def test_can_reuse_current_window(self, monkeypatch):
        # Arrange
        open_window = MagicMock(return_value=True)
        monkeypatch.setattr("webbrowser.open", open_window)

        # Act
        BrowserRedirector(open_new_tab=False).redirect(self.target_url)

        # Assert
        open_window.assert_called_once_with(self.target_url)

    def test_warns_when_no_browser_is_available(self, monkeypatch, caplog):
        # Arrange
        monkeypatch.setattr("webbrowser.open_new_tab", MagicMock(return_value=False))

        # Act
        with caplog.at_level(logging.WARNING, logger="solid_authn.redirector"):
            BrowserRedirector().redirect(self.target_url)

        # Assert
        assert self.target_url in caplog.text
