"""Data models for the request orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from src.client.constants import CONTENT_TYPE_HEADER, ERROR_SEPARATOR
from src.client.content_type import is_binary_mime_type
from src.client.headers import get_header, parse_header_block
from src.transport.auth import NO_AUTH_SCHEME, AuthScheme
from src.transport.constants import DEFAULT_USER_AGENT, ProxyAccessType


class HttpVerb(str, Enum):
    """Request verbs supported by the orchestrator."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class RequestErrorClass(str, Enum):
    """Classification of request errors for metrics and reporting.

    - SETUP: Session, connection or request could not be opened
    - TRANSPORT: Send, receive or header query failed
    - AUTH: Challenge schemes or credentials could not be applied
    - STREAM: Body availability query or read failed
    - INVALID_INPUT: Caller input rejected before any network activity
    """

    SETUP = "SETUP"
    TRANSPORT = "TRANSPORT"
    AUTH = "AUTH"
    STREAM = "STREAM"
    INVALID_INPUT = "INVALID_INPUT"


class RequestConfig(BaseModel):
    """Per-orchestrator request configuration.

    Host binding and server credentials are fixed for the orchestrator's
    lifetime; the proxy fields are reassigned by the proxy setters.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    domain: Annotated[str, Field(min_length=1, description="Host to connect to")]
    port: Annotated[int, Field(ge=1, le=65535)]
    secure: bool = Field(default=False, description="Use TLS")
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    proxy_url: str = Field(default="", description="Explicit proxy as host:port")
    proxy_username: str = ""
    proxy_password: str = ""
    server_username: str = ""
    server_password: str = ""

    @property
    def access_type(self) -> ProxyAccessType:
        """Proxy mode implied by the configured proxy URL."""
        if self.proxy_url:
            return ProxyAccessType.NAMED_PROXY
        return ProxyAccessType.DEFAULT_PROXY


@dataclass
class HttpResponse:
    """Result of one orchestrator call.

    ``text`` is meaningful only when ``is_binary`` is False and
    ``binary_data`` only when it is True. A non-empty ``error`` may
    coexist with a partially populated body.

    Attributes:
        text: Decoded text body.
        binary_data: Raw body bytes.
        header: Raw header block as received.
        status_code: Final status code, 0 until a response arrives.
        content_length: Sum of every available-byte count reported while
            streaming, across all challenge rounds.
        error: Human readable error messages, empty when none.
        is_binary: Whether the body was classified as binary.
        error_class: Class of the first recorded error.
    """

    text: str = ""
    binary_data: bytes = b""
    header: str = ""
    status_code: int = 0
    content_length: int = 0
    error: str = ""
    is_binary: bool = False
    error_class: RequestErrorClass | None = None
    _header_dict: dict[str, str] | None = field(
        default=None, repr=False, compare=False
    )

    def reset(self) -> None:
        """Return the response to its freshly constructed state."""
        self.text = ""
        self.binary_data = b""
        self.header = ""
        self.status_code = 0
        self.content_length = 0
        self.error = ""
        self.is_binary = False
        self.error_class = None
        self._header_dict = None

    def get_header_dictionary(self) -> dict[str, str]:
        """Get the parsed header mapping.

        Parsed from ``header`` on first access and cached, even when the
        result is empty; ``reset`` drops the cache.
        """
        if self._header_dict is None:
            self._header_dict = parse_header_block(self.header)
        return self._header_dict

    def get_content_type(self) -> str:
        """Get the Content-Type header value, or "" when absent."""
        return get_header(self.get_header_dictionary(), CONTENT_TYPE_HEADER) or ""

    @staticmethod
    def is_binary_mime_type(content_type: str) -> bool:
        """Check if a Content-Type denotes a binary body."""
        return is_binary_mime_type(content_type)

    def record_error(self, message: str, error_class: RequestErrorClass) -> None:
        """Append an error message, keeping the first error class.

        Args:
            message: Description of the failed operation.
            error_class: Classification of the failure.
        """
        if self.error:
            self.error = f"{self.error}{ERROR_SEPARATOR}{message}"
        else:
            self.error = message
        if self.error_class is None:
            self.error_class = error_class

    def to_dict(self) -> dict[str, object]:
        """Convert to the flat mapping returned by the binding surface.

        Returns:
            Dictionary with headers, content, contentLength, status, error
            and, for binary bodies, binaryContent.
        """
        result: dict[str, object] = {
            "headers": self.header or None,
            "content": None if self.is_binary else self.text,
            "contentLength": self.content_length,
            "status": self.status_code,
            "error": self.error or None,
        }
        if self.is_binary:
            result["binaryContent"] = bytes(self.binary_data)
        return result


@dataclass
class AuthChallengeState:
    """Challenge bookkeeping for one state-machine run.

    Attributes:
        last_status: Status code seen in the previous iteration.
        proxy_auth_scheme: Scheme chosen for a proxy challenge, reapplied
            before every send.
        succeeded: Whether the current iteration's I/O succeeded.
        iterations: Send attempts made, resends included.
    """

    last_status: int = 0
    proxy_auth_scheme: AuthScheme = NO_AUTH_SCHEME
    succeeded: bool = False
    iterations: int = 0
