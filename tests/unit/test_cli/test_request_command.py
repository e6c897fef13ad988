"""Unit tests for the request CLI command."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import structlog
from click.testing import CliRunner

from src.cli.request import cli
from src.client.metrics import RequestMetrics
from src.transport.auth import AuthScheme, AuthTarget
from src.transport.constants import ProxyAccessType, RequestFlag
from src.transport.scripted import ScriptedTransport
from tests.helpers.exchanges import binary_exchange, challenge_exchange, text_exchange


@pytest.fixture(autouse=True)
def quiet_logging(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Iterator[MagicMock]:
    """Keep global logging untouched and the environment clean."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("AUTHFLOW_PROXY", raising=False)
    monkeypatch.delenv("AUTHFLOW_USER_AGENT", raising=False)
    RequestMetrics.reset()
    with patch("src.cli.request.configure_logging") as configure:
        yield configure


class TestRequestCommand:
    """Tests for `authflow request`."""

    def test_text_response(self) -> None:
        """Status, headers and body are printed."""
        transport = ScriptedTransport([text_exchange("hello there")])
        runner = CliRunner()

        result = runner.invoke(
            cli,
            ["request", "api.example.com", "/status"],
            obj={"transport": transport},
        )

        assert result.exit_code == 0
        assert "Status: 200" in result.stdout
        assert "Content-Type: text/html; charset=utf-8" in result.stdout
        assert "hello there" in result.stdout
        connection = transport.calls_for("open_connection")[0]
        assert connection.details == {"host": "api.example.com", "port": 80}

    def test_request_context_cleared(self) -> None:
        """The request id is unbound once the command finishes."""
        transport = ScriptedTransport([text_exchange("ok")])

        result = CliRunner().invoke(
            cli,
            ["request", "api.example.com"],
            obj={"transport": transport},
        )

        assert result.exit_code == 0
        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_secure_uses_443(self) -> None:
        """--secure defaults the port to 443 and sets the TLS flag."""
        transport = ScriptedTransport([text_exchange("ok")])

        CliRunner().invoke(
            cli,
            ["request", "api.example.com", "--secure"],
            obj={"transport": transport},
        )

        assert transport.calls_for("open_connection")[0].details["port"] == 443
        flags = transport.calls_for("open_request")[0].details["flags"]
        assert flags & RequestFlag.SECURE

    def test_post_with_headers_and_data(self) -> None:
        """Method, headers and body are passed through."""
        transport = ScriptedTransport([text_exchange("created", status_code=201)])

        result = CliRunner().invoke(
            cli,
            [
                "request",
                "api.example.com",
                "/items",
                "--method",
                "post",
                "--port",
                "8080",
                "--header",
                "X-Trace: 1",
                "--header",
                "Accept: */*",
                "--data",
                '{"name": "x"}',
            ],
            obj={"transport": transport},
        )

        assert result.exit_code == 0
        assert transport.calls_for("open_request")[0].details["verb"] == "POST"
        send = transport.calls_for("send_request")[0]
        assert send.details["headers"] == "X-Trace: 1\r\nAccept: */*\r\n"
        assert send.details["body"] == b'{"name": "x"}'

    def test_binary_response(self) -> None:
        """Binary bodies are summarized by size."""
        transport = ScriptedTransport([binary_exchange(b"\x00" * 10)])

        result = CliRunner().invoke(
            cli, ["request", "api.example.com"], obj={"transport": transport}
        )

        assert "<10 bytes of binary content>" in result.stdout

    def test_failure_exits_nonzero(self) -> None:
        """A transport failure prints the error and exits with 1."""
        transport = ScriptedTransport([], fail_open_session=True)

        result = CliRunner().invoke(
            cli, ["request", "api.example.com"], obj={"transport": transport}
        )

        assert result.exit_code == 1
        assert "Error: open session fails" in result.stderr

    def test_proxy_and_server_credentials(self) -> None:
        """--proxy and --server-user feed the challenge rounds."""
        transport = ScriptedTransport(
            [
                challenge_exchange(407, AuthScheme.BASIC),
                challenge_exchange(401, AuthScheme.BASIC),
                text_exchange("inside"),
            ]
        )

        result = CliRunner().invoke(
            cli,
            [
                "request",
                "api.example.com",
                "--proxy",
                "http://bob:pw@proxy.local:3128",
                "--server-user",
                "alice",
                "--server-password",
                "secret",
            ],
            obj={"transport": transport},
        )

        assert result.exit_code == 0
        assert "inside" in result.stdout
        session = transport.calls_for("open_session")[0]
        assert session.details["access_type"] == ProxyAccessType.NAMED_PROXY
        credentials = {
            call.details["target"]: call.details["username"]
            for call in transport.calls_for("set_credentials")
        }
        assert credentials == {AuthTarget.PROXY: "bob", AuthTarget.SERVER: "alice"}

    def test_user_agent_from_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """AUTHFLOW_USER_AGENT sets the session user agent."""
        monkeypatch.setenv("AUTHFLOW_USER_AGENT", "authflow-test/1")
        transport = ScriptedTransport([text_exchange("ok")])

        CliRunner().invoke(
            cli, ["request", "api.example.com"], obj={"transport": transport}
        )

        session = transport.calls_for("open_session")[0]
        assert session.details["user_agent"] == "authflow-test/1"

    def test_logging_flags(self, quiet_logging: MagicMock) -> None:
        """--no-json-logs and -v reach the logging setup."""
        transport = ScriptedTransport([text_exchange("ok")])

        CliRunner().invoke(
            cli,
            ["request", "api.example.com", "--no-json-logs", "-v"],
            obj={"transport": transport},
        )

        quiet_logging.assert_called_once_with(level=10, json_format=False)
