"""Unit tests for localserver.navigation.url_validator."""

import pytest

from localserver.navigation import (
    AllowListConfig,
    UrlValidator,
    describe_block_reason,
    is_same_origin,
    is_url_allowed,
)

pytestmark = pytest.mark.unit


class TestIsUrlAllowed:
    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:3000",
            "http://localhost:3000/api/status",
            "https://127.0.0.1:8080/",
            "http://0.0.0.0:5000",
            "HTTP://LOCALHOST:3001/page",
            "http://localhost",
        ],
    )
    def test_is_url_allowed_when_on_allow_list_then_true(self, url: str) -> None:
        assert is_url_allowed(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:9999",
            "https://example.com",
            "file:///etc/passwd",
            "javascript:alert(1)",
            "ftp://localhost:3000",
            "http://localhost:abc",
            "http://[::1",
            "",
            "not a url",
        ],
    )
    def test_is_url_allowed_when_off_allow_list_or_malformed_then_false(self, url: str) -> None:
        assert is_url_allowed(url) is False

    def test_is_url_allowed_when_not_a_string_then_false(self) -> None:
        assert is_url_allowed(None) is False  # type: ignore[arg-type]

    def test_custom_allow_list_when_configured_then_used(self) -> None:
        validator = UrlValidator(AllowListConfig(hosts=frozenset({"Device.Local"}), ports=(9000,)))

        assert validator.is_url_allowed("http://device.local:9000") is True
        assert validator.is_url_allowed("http://localhost:3000") is False


class TestDescribeBlockReason:
    def test_describe_block_reason_when_port_not_allowed_then_lists_ports(self) -> None:
        assert (
            describe_block_reason("http://localhost:9999")
            == "Port 9999 is not allowed. Allowed ports: 3000, 8000, 8080, 3001, 5000"
        )

    def test_describe_block_reason_when_protocol_not_allowed_then_protocol_message(self) -> None:
        assert describe_block_reason("file:///etc/passwd") == "Only HTTP and HTTPS protocols are allowed"

    def test_describe_block_reason_when_host_not_allowed_then_localhost_message(self) -> None:
        assert describe_block_reason("https://example.com") == "Navigation is restricted to localhost only"

    def test_describe_block_reason_when_protocol_and_host_bad_then_protocol_reported_first(
        self,
    ) -> None:
        assert describe_block_reason("ftp://example.com:21") == "Only HTTP and HTTPS protocols are allowed"

    def test_describe_block_reason_when_unparseable_then_invalid_format(self) -> None:
        assert describe_block_reason("http://localhost:99999999") == "Invalid URL format"

    def test_describe_block_reason_when_url_allowed_then_generic_message(self) -> None:
        assert describe_block_reason("http://localhost:3000") == "URL is not allowed"


class TestIsSameOrigin:
    def test_is_same_origin_when_paths_differ_then_true(self) -> None:
        assert is_same_origin("http://localhost:3000/a?b=1", "http://localhost:3000") is True

    def test_is_same_origin_when_ports_differ_then_false(self) -> None:
        assert is_same_origin("http://localhost:3001", "http://localhost:3000") is False

    def test_is_same_origin_when_schemes_differ_then_false(self) -> None:
        assert is_same_origin("https://localhost:3000", "http://localhost:3000") is False

    def test_is_same_origin_when_default_port_implicit_then_false(self) -> None:
        assert is_same_origin("http://localhost", "http://localhost:80") is False

    def test_is_same_origin_when_either_malformed_then_false(self) -> None:
        assert is_same_origin("http://localhost:abc", "http://localhost:3000") is False
