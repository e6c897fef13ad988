"""Unit tests for environment driven client settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.settings.app import ClientSettings, get_settings


class TestClientSettings:
    """Tests for ClientSettings."""

    @pytest.fixture(autouse=True)
    def isolated_env(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Run without AUTHFLOW_ variables or a .env file."""
        monkeypatch.chdir(tmp_path)
        for name in (
            "AUTHFLOW_USER_AGENT",
            "AUTHFLOW_PROXY",
            "AUTHFLOW_TIMEOUT_SECONDS",
            "AUTHFLOW_SERVER_USERNAME",
            "AUTHFLOW_VERIFY_TLS",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self) -> None:
        """Defaults need no environment."""
        settings = get_settings()

        assert settings.user_agent == "WinHttpClient"
        assert settings.proxy == ""
        assert settings.timeout_seconds == 30.0
        assert settings.connect_retries == 0
        assert settings.verify_tls is True

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """AUTHFLOW_ variables override defaults."""
        monkeypatch.setenv("AUTHFLOW_USER_AGENT", "agent/2")
        monkeypatch.setenv("AUTHFLOW_PROXY", "http://u:p@proxy.local:3128")
        monkeypatch.setenv("AUTHFLOW_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("AUTHFLOW_VERIFY_TLS", "false")

        settings = ClientSettings()

        assert settings.user_agent == "agent/2"
        assert settings.proxy == "http://u:p@proxy.local:3128"
        assert settings.timeout_seconds == 2.5
        assert settings.verify_tls is False

    def test_invalid_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A non-positive timeout is rejected."""
        monkeypatch.setenv("AUTHFLOW_TIMEOUT_SECONDS", "0")

        with pytest.raises(ValidationError):
            ClientSettings()

    def test_dotenv_file(self, tmp_path: Path) -> None:
        """Values are read from a .env file in the working directory."""
        (tmp_path / ".env").write_text("AUTHFLOW_SERVER_USERNAME=alice\n")

        assert ClientSettings().server_username == "alice"
