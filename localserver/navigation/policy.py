"""Navigation verdicts for the embedded browser view.

Decision order:
    1. Same origin as the server URL: navigate, whoever initiated it.
    2. Not on the allow-list: prevent.
    3. Allowed and user-initiated: navigate.
    4. Allowed but automatic (redirect or script): prevent.

An automatic load may therefore never leave the server's own origin, even
for another allowed localhost port; only an explicit user gesture can.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

from .url_validator import UrlValidator

MAX_REDIRECTS = 5
NAVIGATION_TIMEOUT = timedelta(seconds=30)


class NavigationVerdict(str, Enum):
    """Outcome of a navigation attempt."""

    NAVIGATE = "navigate"
    PREVENT = "prevent"


class NavigationPolicy:
    """Stateless decision function over a ``UrlValidator``."""

    def __init__(self, validator: UrlValidator | None = None) -> None:
        self.validator = validator or UrlValidator()

    def should_allow_navigation(
        self, url: str, server_url: str, is_user_initiated: bool = False
    ) -> NavigationVerdict:
        """Decide whether the view may load ``url``.

        Args:
            url: Navigation target
            server_url: Base URL of the local control server
            is_user_initiated: True when caused directly by a user gesture

        Returns:
            NavigationVerdict.NAVIGATE or NavigationVerdict.PREVENT
        """
        if self.validator.is_same_origin(url, server_url):
            return NavigationVerdict.NAVIGATE

        if not self.validator.is_url_allowed(url):
            return NavigationVerdict.PREVENT

        if is_user_initiated:
            return NavigationVerdict.NAVIGATE

        return NavigationVerdict.PREVENT

    def navigation_message(self, verdict: NavigationVerdict, url: str) -> str:
        """Describe a verdict for display or logging."""
        if verdict is NavigationVerdict.NAVIGATE:
            return f"Navigating to {url}"
        return f"Navigation blocked: {self.validator.describe_block_reason(url)}"


_default_policy = NavigationPolicy()


def should_allow_navigation(
    url: str, server_url: str, is_user_initiated: bool = False
) -> NavigationVerdict:
    """Module-level shortcut using the default allow-list."""
    return _default_policy.should_allow_navigation(url, server_url, is_user_initiated)


def navigation_message(verdict: NavigationVerdict, url: str) -> str:
    return _default_policy.navigation_message(verdict, url)
