"""Unit tests for the localserver command-line entry."""

from typing import Any
from unittest.mock import patch

import pytest

from localserver.__main__ import _create_parser, main

pytestmark = pytest.mark.unit


class TestCreateParser:
    def test_parser_when_no_args_then_all_none(self) -> None:
        args = _create_parser().parse_args([])

        assert args.port is None
        assert args.host is None
        assert args.bind is None
        assert args.debug is False

    def test_parser_when_options_given_then_parsed(self) -> None:
        args = _create_parser().parse_args(["--port", "8080", "--host", "dev.local", "--debug"])

        assert args.port == 8080
        assert args.host == "dev.local"
        assert args.debug is True

    def test_parser_when_port_not_integer_then_exits(self) -> None:
        with pytest.raises(SystemExit):
            _create_parser().parse_args(["--port", "abc"])


class TestMain:
    def test_main_when_server_returns_then_exits_with_its_code(self, monkeypatch: Any) -> None:
        monkeypatch.setattr("sys.argv", ["localserver", "--port", "5000"])

        with patch("localserver.__main__.run_server", return_value=0) as run_server:
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 0
        assert run_server.call_args.args[0].port == 5000
