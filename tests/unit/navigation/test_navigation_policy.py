"""Unit tests for localserver.navigation.policy."""

from datetime import timedelta

import pytest

from localserver.navigation import (
    MAX_REDIRECTS,
    NAVIGATION_TIMEOUT,
    NavigationPolicy,
    NavigationVerdict,
    navigation_message,
    should_allow_navigation,
)

pytestmark = pytest.mark.unit

SERVER_URL = "http://localhost:3000"


class TestShouldAllowNavigation:
    def test_should_allow_navigation_when_same_origin_automatic_then_navigate(self) -> None:
        verdict = should_allow_navigation("http://localhost:3000/api/status", SERVER_URL)

        assert verdict is NavigationVerdict.NAVIGATE

    def test_should_allow_navigation_when_allowed_other_origin_automatic_then_prevent(self) -> None:
        verdict = should_allow_navigation("http://localhost:8080", SERVER_URL, is_user_initiated=False)

        assert verdict is NavigationVerdict.PREVENT

    def test_should_allow_navigation_when_allowed_other_origin_user_initiated_then_navigate(
        self,
    ) -> None:
        verdict = should_allow_navigation("http://localhost:8080", SERVER_URL, is_user_initiated=True)

        assert verdict is NavigationVerdict.NAVIGATE

    @pytest.mark.parametrize("user_initiated", [True, False])
    def test_should_allow_navigation_when_external_then_prevent(self, user_initiated: bool) -> None:
        verdict = should_allow_navigation("https://example.com", SERVER_URL, user_initiated)

        assert verdict is NavigationVerdict.PREVENT

    def test_should_allow_navigation_when_malformed_then_prevent(self) -> None:
        assert should_allow_navigation("::::", SERVER_URL, True) is NavigationVerdict.PREVENT

    def test_should_allow_navigation_when_server_on_unlisted_port_then_own_origin_allowed(
        self,
    ) -> None:
        policy = NavigationPolicy()

        verdict = policy.should_allow_navigation("http://localhost:45678/", "http://localhost:45678")

        assert verdict is NavigationVerdict.NAVIGATE


class TestNavigationMessage:
    def test_navigation_message_when_navigate_then_names_url(self) -> None:
        message = navigation_message(NavigationVerdict.NAVIGATE, "http://localhost:3000/")

        assert message == "Navigating to http://localhost:3000/"

    def test_navigation_message_when_prevent_then_gives_block_reason(self) -> None:
        message = navigation_message(NavigationVerdict.PREVENT, "https://example.com")

        assert message == "Navigation blocked: Navigation is restricted to localhost only"


def test_policy_constants_when_read_then_match_limits() -> None:
    assert MAX_REDIRECTS == 5
    assert NAVIGATION_TIMEOUT == timedelta(seconds=30)
