"""Scripted in-memory transport for deterministic exchanges.

Provides a transport provider that:
- Replays scripted responses (status, headers, body chunks, challenges)
- Injects transport failures and resend signals on demand
- Records every primitive call for audit
"""

from dataclasses import dataclass, field
from http import HTTPStatus
from itertools import count

import structlog

from src.transport.auth import NO_AUTH_SCHEME, AuthScheme, AuthTarget
from src.transport.constants import (
    DEFAULT_CHUNK_SIZE,
    ERROR_CANNOT_CONNECT,
    ERROR_INCORRECT_HANDLE_STATE,
    ERROR_INVALID_PARAMETER,
    ERROR_INVALID_URL,
    ProxyAccessType,
    RequestFlag,
)
from src.transport.errors import (
    InsufficientBufferError,
    InvalidHandleError,
    ResendRequestError,
    TransportError,
)


logger = structlog.get_logger()

HTTP_STATUS_PROXY_AUTH_REQUIRED = 407


@dataclass
class ScriptedExchange:
    """One scripted reply to a send.

    Attributes:
        status_code: Status code to report.
        headers: Response headers, in order.
        body: Body bytes, delivered in ``chunk_size`` pieces.
        chunk_size: Size of each available-data chunk.
        auth_schemes: Scheme mask reported for a challenge.
        auth_target: Challenge target; derived from the status when None.
        resend: Raise the resend signal instead of replying.
        send_error: Raised by send_request.
        receive_error: Raised by receive_response.
        available_error: Raised once by query_data_available.
        read_error: Raised once by read_data.
        auth_query_error: Raised by query_auth_schemes.
        credentials_error: Raised by set_credentials.
        read_limit: Cap on bytes returned per read, to simulate short reads.
    """

    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    auth_schemes: AuthScheme = NO_AUTH_SCHEME
    auth_target: AuthTarget | None = None
    resend: bool = False
    send_error: TransportError | None = None
    receive_error: TransportError | None = None
    available_error: TransportError | None = None
    read_error: TransportError | None = None
    auth_query_error: TransportError | None = None
    credentials_error: TransportError | None = None
    read_limit: int | None = None

    def raw_header_block(self) -> str:
        """Render the status line and headers as a CRLF block."""
        try:
            reason = HTTPStatus(self.status_code).phrase
        except ValueError:
            reason = ""
        lines = [f"HTTP/1.1 {self.status_code} {reason}".rstrip()]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        return "\r\n".join(lines) + "\r\n\r\n"


@dataclass
class TransportCall:
    """Record of a transport primitive call.

    Attributes:
        operation: Primitive name.
        details: Arguments worth asserting on.
    """

    operation: str
    details: dict[str, object] = field(default_factory=dict)


@dataclass
class ScriptedHandle:
    """Opaque handle issued by the scripted transport."""

    kind: str
    handle_id: int
    closed: bool = False


@dataclass
class _RequestState:
    exchange: ScriptedExchange | None = None
    chunks: list[bytes] = field(default_factory=list)
    available_error: TransportError | None = None
    read_error: TransportError | None = None


class ScriptedTransport:
    """Transport provider that replays scripted exchanges.

    Each send consumes the next exchange. When the script runs out the
    last exchange is replayed if ``repeat_last`` is set, otherwise the
    send fails.
    """

    def __init__(
        self,
        exchanges: list[ScriptedExchange],
        repeat_last: bool = False,
        fail_open_session: bool = False,
        fail_open_connection: bool = False,
        fail_open_request: bool = False,
    ) -> None:
        """Initialize the scripted transport.

        Args:
            exchanges: Replies, in send order.
            repeat_last: Replay the final exchange forever.
            fail_open_session: Reject open_session.
            fail_open_connection: Reject open_connection.
            fail_open_request: Reject open_request.
        """
        self._exchanges = list(exchanges)
        self._repeat_last = repeat_last
        self._fail_open_session = fail_open_session
        self._fail_open_connection = fail_open_connection
        self._fail_open_request = fail_open_request
        self._next_exchange = 0
        self._ids = count(1)
        self._requests: dict[int, _RequestState] = {}
        self.calls: list[TransportCall] = []
        self.handles: list[ScriptedHandle] = []
        self._log = logger.bind(component="transport", provider="scripted")

    def count_calls(self, operation: str) -> int:
        """Count recorded calls of one primitive."""
        return sum(1 for call in self.calls if call.operation == operation)

    def calls_for(self, operation: str) -> list[TransportCall]:
        """Get recorded calls of one primitive, in order."""
        return [call for call in self.calls if call.operation == operation]

    @property
    def open_handles(self) -> list[ScriptedHandle]:
        """Handles issued and not yet closed."""
        return [handle for handle in self.handles if not handle.closed]

    def open_session(
        self,
        user_agent: str,
        access_type: ProxyAccessType,
        proxy: str | None,
        proxy_bypass: str,
    ) -> ScriptedHandle:
        """Open a scripted session."""
        self._record(
            "open_session",
            user_agent=user_agent,
            access_type=access_type,
            proxy=proxy,
            proxy_bypass=proxy_bypass,
        )
        if self._fail_open_session:
            msg = "Scripted session rejected"
            raise TransportError(msg, ERROR_INVALID_PARAMETER)
        return self._issue("session")

    def open_connection(self, session: object, host: str, port: int) -> ScriptedHandle:
        """Open a scripted connection."""
        self._check(session, "session")
        self._record("open_connection", host=host, port=port)
        if self._fail_open_connection:
            msg = "Scripted connection rejected"
            raise TransportError(msg, ERROR_INVALID_URL)
        return self._issue("connection")

    def open_request(
        self,
        connection: object,
        verb: str,
        path: str,
        flags: RequestFlag,
    ) -> ScriptedHandle:
        """Open a scripted request."""
        self._check(connection, "connection")
        self._record("open_request", verb=verb, path=path, flags=flags)
        if self._fail_open_request:
            msg = "Scripted request rejected"
            raise TransportError(msg, ERROR_INVALID_PARAMETER)
        handle = self._issue("request")
        self._requests[handle.handle_id] = _RequestState()
        return handle

    def send_request(
        self,
        request: object,
        headers: str | None,
        body: bytes,
    ) -> None:
        """Consume the next exchange.

        Raises:
            ResendRequestError: If the exchange asks for a resend.
            TransportError: If the exchange injects a send failure or the
                script is exhausted.
        """
        state = self._state(request)
        self._record("send_request", headers=headers, body=body)
        exchange = self._take_exchange()
        state.exchange = None
        state.chunks = []
        if exchange is None:
            msg = "No scripted exchange left"
            raise TransportError(msg, ERROR_CANNOT_CONNECT)
        if exchange.resend:
            raise ResendRequestError
        if exchange.send_error is not None:
            raise exchange.send_error
        state.exchange = exchange
        state.available_error = exchange.available_error
        state.read_error = exchange.read_error

    def receive_response(self, request: object) -> None:
        """Make the scripted response readable."""
        state = self._state(request)
        self._record("receive_response")
        exchange = self._require_exchange(state)
        if exchange.receive_error is not None:
            raise exchange.receive_error
        size = max(exchange.chunk_size, 1)
        state.chunks = [
            exchange.body[i : i + size] for i in range(0, len(exchange.body), size)
        ]

    def query_status_code(self, request: object) -> int:
        """Get the scripted status code."""
        state = self._state(request)
        self._record("query_status_code")
        return self._require_exchange(state).status_code

    def query_raw_headers(self, request: object, buffer_size: int) -> str:
        """Get the scripted header block, probing size first."""
        state = self._state(request)
        self._record("query_raw_headers", buffer_size=buffer_size)
        block = self._require_exchange(state).raw_header_block()
        if buffer_size < len(block):
            raise InsufficientBufferError(len(block))
        return block

    def query_auth_schemes(
        self, request: object
    ) -> tuple[AuthScheme, AuthScheme, AuthTarget]:
        """Get the scripted challenge schemes."""
        state = self._state(request)
        self._record("query_auth_schemes")
        exchange = self._require_exchange(state)
        if exchange.auth_query_error is not None:
            raise exchange.auth_query_error
        target = exchange.auth_target
        if target is None:
            target = (
                AuthTarget.PROXY
                if exchange.status_code == HTTP_STATUS_PROXY_AUTH_REQUIRED
                else AuthTarget.SERVER
            )
        first = next(
            (scheme for scheme in AuthScheme if exchange.auth_schemes & scheme),
            NO_AUTH_SCHEME,
        )
        return exchange.auth_schemes, first, target

    def set_credentials(
        self,
        request: object,
        target: AuthTarget,
        scheme: AuthScheme,
        username: str,
        password: str,
    ) -> None:
        """Record credentials."""
        state = self._state(request)
        self._record(
            "set_credentials",
            target=target,
            scheme=scheme,
            username=username,
            password=password,
        )
        exchange = state.exchange
        if exchange is not None and exchange.credentials_error is not None:
            raise exchange.credentials_error

    def query_data_available(self, request: object) -> int:
        """Get the size of the next scripted chunk."""
        state = self._state(request)
        self._record("query_data_available")
        if state.available_error is not None:
            error, state.available_error = state.available_error, None
            raise error
        return len(state.chunks[0]) if state.chunks else 0

    def read_data(self, request: object, count: int) -> bytes:
        """Read from the head of the scripted chunk queue."""
        state = self._state(request)
        self._record("read_data", count=count)
        if state.read_error is not None:
            error, state.read_error = state.read_error, None
            raise error
        if not state.chunks:
            return b""
        exchange = self._require_exchange(state)
        limit = count
        if exchange.read_limit is not None:
            limit = min(count, exchange.read_limit)
        head = state.chunks[0]
        data, rest = head[:limit], head[limit:]
        if rest:
            state.chunks[0] = rest
        else:
            state.chunks.pop(0)
        return data

    def close_handle(self, handle: object | None) -> None:
        """Close a scripted handle; None is a no-op."""
        if handle is None:
            return
        if not isinstance(handle, ScriptedHandle):
            msg = f"Not a scripted handle: {type(handle).__name__}"
            raise InvalidHandleError(msg)
        self._record("close_handle", kind=handle.kind, handle_id=handle.handle_id)
        handle.closed = True
        self._requests.pop(handle.handle_id, None)

    def _record(self, operation: str, **details: object) -> None:
        self.calls.append(TransportCall(operation=operation, details=details))
        self._log.debug("scripted_call", operation=operation)

    def _issue(self, kind: str) -> ScriptedHandle:
        handle = ScriptedHandle(kind=kind, handle_id=next(self._ids))
        self.handles.append(handle)
        return handle

    def _check(self, handle: object, kind: str) -> ScriptedHandle:
        if not isinstance(handle, ScriptedHandle) or handle.kind != kind:
            msg = f"Expected a {kind} handle"
            raise InvalidHandleError(msg)
        if handle.closed:
            msg = f"The {kind} handle is closed"
            raise InvalidHandleError(msg)
        return handle

    def _state(self, request: object) -> _RequestState:
        handle = self._check(request, "request")
        return self._requests[handle.handle_id]

    def _take_exchange(self) -> ScriptedExchange | None:
        if self._next_exchange < len(self._exchanges):
            exchange = self._exchanges[self._next_exchange]
            self._next_exchange += 1
            return exchange
        if self._repeat_last and self._exchanges:
            return self._exchanges[-1]
        return None

    def _require_exchange(self, state: _RequestState) -> ScriptedExchange:
        if state.exchange is None:
            msg = "No scripted response for this request"
            raise TransportError(msg, ERROR_INCORRECT_HANDLE_STATE)
        return state.exchange

