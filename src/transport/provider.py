"""Protocol interface for transport providers."""

from typing import Protocol, runtime_checkable

from src.transport.auth import AuthScheme, AuthTarget
from src.transport.constants import ProxyAccessType, RequestFlag


@runtime_checkable
class TransportProvider(Protocol):
    """Protocol for the session/connection/request handle chain.

    Any engine implementing these primitives can drive the request
    orchestrator. Handles are opaque to callers. Every failing primitive
    raises a ``TransportError`` subclass; ``ResendRequestError`` and
    ``InsufficientBufferError`` carry protocol meaning and must be raised
    exactly where documented.
    """

    def open_session(
        self,
        user_agent: str,
        access_type: ProxyAccessType,
        proxy: str | None,
        proxy_bypass: str,
    ) -> object:
        """Open a session bound to a user agent and proxy policy."""
        ...

    def open_connection(self, session: object, host: str, port: int) -> object:
        """Open a connection bound to host:port within a session."""
        ...

    def open_request(
        self,
        connection: object,
        verb: str,
        path: str,
        flags: RequestFlag,
    ) -> object:
        """Open a request for a verb and path on a connection."""
        ...

    def send_request(
        self,
        request: object,
        headers: str | None,
        body: bytes,
    ) -> None:
        """Send the request.

        Args:
            request: Request handle.
            headers: Raw "Name: Value\\r\\n" block, or None for no headers.
            body: Request body bytes.

        Raises:
            ResendRequestError: If the request must be sent again.
            TransportError: On any other failure.
        """
        ...

    def receive_response(self, request: object) -> None:
        """Wait for the response status line and headers.

        Raises:
            ResendRequestError: If the request must be sent again.
            TransportError: On any other failure.
        """
        ...

    def query_status_code(self, request: object) -> int:
        """Get the numeric status code of the received response."""
        ...

    def query_raw_headers(self, request: object, buffer_size: int) -> str:
        """Get the raw response header block.

        Args:
            request: Request handle.
            buffer_size: Characters the caller can accept; 0 probes the size.

        Raises:
            InsufficientBufferError: If ``buffer_size`` is too small.
        """
        ...

    def query_auth_schemes(
        self, request: object
    ) -> tuple[AuthScheme, AuthScheme, AuthTarget]:
        """Get (supported mask, first offered scheme, challenge target)."""
        ...

    def set_credentials(
        self,
        request: object,
        target: AuthTarget,
        scheme: AuthScheme,
        username: str,
        password: str,
    ) -> None:
        """Attach credentials for the next send."""
        ...

    def query_data_available(self, request: object) -> int:
        """Get the number of body bytes readable now; 0 means end of body."""
        ...

    def read_data(self, request: object, count: int) -> bytes:
        """Read up to ``count`` body bytes."""
        ...

    def close_handle(self, handle: object | None) -> None:
        """Close any handle; closing None is a no-op."""
        ...
