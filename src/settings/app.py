"""Client settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.transport.constants import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT


class ClientSettings(BaseSettings):
    """Environment configuration for the HTTP client.

    Every field reads ``AUTHFLOW_<FIELD>`` from the environment or a
    ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHFLOW_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    proxy: str = Field(default="", description="Proxy URL, credentials allowed")
    proxy_username: str = ""
    proxy_password: str = ""
    server_username: str = ""
    server_password: str = ""
    timeout_seconds: Annotated[float, Field(gt=0, le=600)] = DEFAULT_TIMEOUT_SECONDS
    connect_retries: Annotated[int, Field(ge=0, le=10)] = 0
    verify_tls: bool = True


def get_settings() -> ClientSettings:
    """Get a settings instance."""
    return ClientSettings()
