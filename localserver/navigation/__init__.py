"""Navigation admission for the embedded browser view.

The view asks ``NavigationPolicy`` for a verdict on every navigation attempt;
``UrlValidator`` is the allow-list primitive the policy is built on.
"""

from .allow_list import DEFAULT_ALLOW_LIST, AllowListConfig
from .policy import (
    MAX_REDIRECTS,
    NAVIGATION_TIMEOUT,
    NavigationPolicy,
    NavigationVerdict,
    navigation_message,
    should_allow_navigation,
)
from .url_validator import (
    UrlValidator,
    describe_block_reason,
    is_same_origin,
    is_url_allowed,
)

__all__ = [
    "DEFAULT_ALLOW_LIST",
    "MAX_REDIRECTS",
    "NAVIGATION_TIMEOUT",
    "AllowListConfig",
    "NavigationPolicy",
    "NavigationVerdict",
    "UrlValidator",
    "describe_block_reason",
    "is_same_origin",
    "is_url_allowed",
    "navigation_message",
    "should_allow_navigation",
]
