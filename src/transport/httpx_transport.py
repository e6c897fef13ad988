"""Transport provider backed by httpx."""

import re
import urllib.request
from collections.abc import Iterator
from dataclasses import dataclass, field

import httpx
import structlog

from src.transport.auth import (
    AuthScheme,
    AuthTarget,
    parse_auth_challenges,
    scheme_name,
)
from src.transport.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    ERROR_CANNOT_CONNECT,
    ERROR_CONNECTION_ERROR,
    ERROR_INCORRECT_HANDLE_STATE,
    ERROR_INVALID_PARAMETER,
    ERROR_INVALID_SERVER_RESPONSE,
    ERROR_INVALID_URL,
    ERROR_TIMEOUT,
    PROXY_AUTHENTICATE_HEADER,
    WWW_AUTHENTICATE_HEADER,
    ProxyAccessType,
    RequestFlag,
)
from src.transport.errors import (
    InsufficientBufferError,
    InvalidHandleError,
    ResendRequestError,
    TransportError,
    UnsupportedAuthSchemeError,
)
from src.transport.redact import redact_header_block


logger = structlog.get_logger()

HTTP_STATUS_PROXY_AUTH_REQUIRED = 407

# httpcore reports a refused CONNECT as "<status> <reason>"
_TUNNEL_STATUS_PATTERN = re.compile(r"^(\d{3})\b")

# Offer assumed for a refused tunnel, whose challenge headers httpx drops
TUNNEL_PROXY_CHALLENGE = "Basic"


@dataclass
class HttpxSession:
    """Session handle: one httpx.Client plus its proxy policy."""

    user_agent: str
    access_type: ProxyAccessType
    proxy: str | None
    client: httpx.Client | None = None
    proxy_auth: tuple[str, str] | None = None
    environment_proxy: str | None = None


@dataclass
class HttpxConnection:
    """Connection handle: a host:port binding inside a session."""

    session: HttpxSession
    host: str
    port: int


@dataclass
class HttpxRequest:
    """Request handle: one verb/path exchange and its streamed response."""

    connection: HttpxConnection
    verb: str
    path: str
    flags: RequestFlag
    server_auth: httpx.Auth | None = None
    response: httpx.Response | None = None
    raw_headers: str = ""
    resend_count: int = 0
    pending: bytes = b""
    chunks: Iterator[bytes] | None = field(default=None, repr=False)

    @property
    def url(self) -> str:
        """Absolute URL of this request."""
        scheme = "https" if self.flags & RequestFlag.SECURE else "http"
        return (
            f"{scheme}://{self.connection.host}:{self.connection.port}{self.path}"
        )


class HttpxTransport:
    """Transport provider implemented on httpx.

    Sessions own an ``httpx.Client``. A named proxy is routed through
    ``httpx.Proxy``; the default proxy mode lets httpx read the
    environment proxy configuration until proxy credentials pin that
    proxy explicitly. A tunnel refused with 407 is reported as a 407
    response so the caller can answer it. A custom ``transport`` (for example
    ``httpx.MockTransport``) replaces the network entirely and owns its
    own routing, so proxies are not applied to it.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        connect_retries: int = 0,
        verify_tls: bool = True,
        max_resends: int = 1,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the httpx provider.

        Args:
            timeout_seconds: Per-operation timeout applied to every client.
            connect_retries: Connection-level retries done by httpx itself.
            verify_tls: Whether to verify server certificates.
            max_resends: How many dropped keep-alive connections per request
                are reported as a resend signal instead of a failure.
            transport: Optional httpx transport replacing the network.
        """
        self._timeout_seconds = timeout_seconds
        self._connect_retries = connect_retries
        self._verify_tls = verify_tls
        self._max_resends = max_resends
        self._transport = transport
        self._log = logger.bind(component="transport", provider="httpx")

    def open_session(
        self,
        user_agent: str,
        access_type: ProxyAccessType,
        proxy: str | None,
        proxy_bypass: str,  # noqa: ARG002
    ) -> HttpxSession:
        """Open a session.

        Args:
            user_agent: User-Agent sent with every request.
            access_type: Proxy resolution mode.
            proxy: ``host:port`` for NAMED_PROXY, ignored otherwise.
            proxy_bypass: Bypass list (unused by httpx).

        Returns:
            Session handle.

        Raises:
            TransportError: If the proxy configuration is unusable.
        """
        if access_type == ProxyAccessType.NAMED_PROXY and (
            not proxy or ":" not in proxy
        ):
            msg = f"Named proxy requires host:port, got {proxy!r}"
            raise TransportError(msg, ERROR_INVALID_PARAMETER)

        session = HttpxSession(
            user_agent=user_agent,
            access_type=access_type,
            proxy=proxy if access_type == ProxyAccessType.NAMED_PROXY else None,
        )
        session.client = self._build_client(session)
        self._log.debug(
            "session_opened",
            access_type=access_type.value,
            proxy=session.proxy,
        )
        return session

    def open_connection(
        self, session: object, host: str, port: int
    ) -> HttpxConnection:
        """Bind a host and port to a session.

        Raises:
            TransportError: If host or port is invalid.
        """
        session = _as_session(session)
        if not host or any(ch in host for ch in "/?#@ "):
            msg = f"Invalid host {host!r}"
            raise TransportError(msg, ERROR_INVALID_URL)
        if not 0 < port < 65536:  # noqa: PLR2004
            msg = f"Invalid port {port}"
            raise TransportError(msg, ERROR_INVALID_URL)
        return HttpxConnection(session=session, host=host, port=port)

    def open_request(
        self,
        connection: object,
        verb: str,
        path: str,
        flags: RequestFlag,
    ) -> HttpxRequest:
        """Create a request handle.

        Raises:
            TransportError: If the verb is empty.
        """
        connection = _as_connection(connection)
        if not verb:
            msg = "Request verb must not be empty"
            raise TransportError(msg, ERROR_INVALID_PARAMETER)
        if not path.startswith("/"):
            path = "/" + path
        return HttpxRequest(
            connection=connection,
            verb=verb.upper(),
            path=path,
            flags=flags,
        )

    def send_request(
        self,
        request: object,
        headers: str | None,
        body: bytes,
    ) -> None:
        """Send the request and read the response head.

        Raises:
            ResendRequestError: If a reused connection dropped before replying.
            TransportError: On any other failure.
        """
        request = _as_request(request)
        session = request.connection.session
        if session.client is None:
            msg = "Session is closed"
            raise TransportError(msg, ERROR_INCORRECT_HANDLE_STATE)

        self._close_response(request)
        request_headers = _split_header_block(headers)
        if request.flags & RequestFlag.REFRESH:
            request_headers.setdefault("Cache-Control", "no-cache")
            request_headers.setdefault("Pragma", "no-cache")

        log = self._log.bind(verb=request.verb, url=request.url)
        log.debug("send_request", headers=redact_header_block(headers or ""))

        try:
            http_request = session.client.build_request(
                request.verb,
                request.url,
                headers=request_headers,
                content=body or None,
            )
            response = session.client.send(
                http_request,
                auth=request.server_auth or httpx.USE_CLIENT_DEFAULT,
                stream=True,
            )
        except httpx.TimeoutException as e:
            msg = f"Request timed out: {e}"
            raise TransportError(msg, ERROR_TIMEOUT) from e
        except httpx.ConnectError as e:
            msg = f"Connection failed: {e}"
            raise TransportError(msg, ERROR_CANNOT_CONNECT) from e
        except httpx.RemoteProtocolError as e:
            if request.resend_count < self._max_resends:
                request.resend_count += 1
                log.info("resend_requested", reason=str(e))
                raise ResendRequestError(str(e)) from e
            msg = f"Invalid server response: {e}"
            raise TransportError(msg, ERROR_INVALID_SERVER_RESPONSE) from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            msg = f"Invalid URL: {e}"
            raise TransportError(msg, ERROR_INVALID_URL) from e
        except httpx.ProxyError as e:
            response = _tunnel_challenge(e, http_request)
            if response is None:
                msg = f"Proxy refused the tunnel: {e}"
                raise TransportError(msg, ERROR_CONNECTION_ERROR) from e
            log.info("proxy_tunnel_challenge", reason=str(e))
        except httpx.HTTPError as e:
            msg = f"Request failed: {e}"
            raise TransportError(msg, ERROR_CONNECTION_ERROR) from e

        request.response = response
        request.raw_headers = ""

    def receive_response(self, request: object) -> None:
        """Capture the status line and header block of the sent request.

        Raises:
            TransportError: If nothing has been sent.
        """
        request = _as_request(request)
        response = _require_response(request)
        encoding = response.headers.encoding
        lines = [
            f"{response.http_version} {response.status_code} {response.reason_phrase}"
        ]
        lines.extend(
            f"{key.decode(encoding)}: {value.decode(encoding)}"
            for key, value in response.headers.raw
        )
        request.raw_headers = "\r\n".join(lines) + "\r\n\r\n"

    def query_status_code(self, request: object) -> int:
        """Get the response status code."""
        return _require_response(_as_request(request)).status_code

    def query_raw_headers(self, request: object, buffer_size: int) -> str:
        """Get the raw header block.

        Raises:
            InsufficientBufferError: If ``buffer_size`` is smaller than the block.
        """
        request = _as_request(request)
        _require_response(request)
        required = len(request.raw_headers)
        if buffer_size < required:
            raise InsufficientBufferError(required)
        return request.raw_headers

    def query_auth_schemes(
        self, request: object
    ) -> tuple[AuthScheme, AuthScheme, AuthTarget]:
        """Parse the challenge headers of the current response."""
        response = _require_response(_as_request(request))
        if response.status_code == HTTP_STATUS_PROXY_AUTH_REQUIRED:
            target = AuthTarget.PROXY
            values = response.headers.get_list(PROXY_AUTHENTICATE_HEADER)
        else:
            target = AuthTarget.SERVER
            values = response.headers.get_list(WWW_AUTHENTICATE_HEADER)
        supported, first = parse_auth_challenges(values)
        return supported, first, target

    def set_credentials(
        self,
        request: object,
        target: AuthTarget,
        scheme: AuthScheme,
        username: str,
        password: str,
    ) -> None:
        """Attach credentials for the next send.

        Server Basic and Digest map to httpx auth flows. Proxy Basic is
        attached to the session's ``httpx.Proxy``: the named proxy, or in
        default mode the proxy the environment configures for this URL.
        Proxy credentials never travel on the origin request.

        Raises:
            UnsupportedAuthSchemeError: For schemes httpx cannot perform.
            TransportError: If default mode resolves no proxy for the URL.
        """
        request = _as_request(request)
        if target == AuthTarget.SERVER:
            if scheme == AuthScheme.BASIC:
                request.server_auth = httpx.BasicAuth(username, password)
            elif scheme == AuthScheme.DIGEST:
                request.server_auth = httpx.DigestAuth(username, password)
            else:
                raise UnsupportedAuthSchemeError(scheme_name(scheme))
            return

        if scheme != AuthScheme.BASIC:
            raise UnsupportedAuthSchemeError(scheme_name(scheme))

        session = request.connection.session
        if (
            session.access_type == ProxyAccessType.DEFAULT_PROXY
            and session.environment_proxy is None
        ):
            environment_proxy = _environment_proxy_url(request.url)
            if environment_proxy is None:
                msg = f"No proxy is configured for {request.url}"
                raise TransportError(msg, ERROR_INVALID_PARAMETER)
            session.environment_proxy = environment_proxy

        if session.proxy_auth != (username, password):
            self._close_response(request)
            session.proxy_auth = (username, password)
            if session.client is not None:
                session.client.close()
            session.client = self._build_client(session)

    def query_data_available(self, request: object) -> int:
        """Get the size of the next buffered body chunk.

        Raises:
            TransportError: If reading the body stream fails.
        """
        request = _as_request(request)
        response = _require_response(request)
        if request.pending:
            return len(request.pending)
        if request.chunks is None:
            request.chunks = response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE)
        try:
            for chunk in request.chunks:
                if chunk:
                    request.pending = chunk
                    return len(chunk)
        except httpx.TimeoutException as e:
            msg = f"Body read timed out: {e}"
            raise TransportError(msg, ERROR_TIMEOUT) from e
        except httpx.HTTPError as e:
            msg = f"Body read failed: {e}"
            raise TransportError(msg, ERROR_CONNECTION_ERROR) from e
        return 0

    def read_data(self, request: object, count: int) -> bytes:
        """Read up to ``count`` bytes of the buffered chunk."""
        request = _as_request(request)
        _require_response(request)
        data = request.pending[:count]
        request.pending = request.pending[count:]
        return data

    def close_handle(self, handle: object | None) -> None:
        """Close a session, connection or request handle.

        Raises:
            InvalidHandleError: If the object is not a handle of this provider.
        """
        if handle is None:
            return
        if isinstance(handle, HttpxRequest):
            self._close_response(handle)
        elif isinstance(handle, HttpxSession):
            if handle.client is not None:
                handle.client.close()
                handle.client = None
        elif not isinstance(handle, HttpxConnection):
            msg = f"Not an httpx transport handle: {type(handle).__name__}"
            raise InvalidHandleError(msg)

    def _build_client(self, session: HttpxSession) -> httpx.Client:
        """Build the httpx client for a session."""
        timeout = httpx.Timeout(self._timeout_seconds)
        headers = {"User-Agent": session.user_agent}

        if self._transport is not None:
            return httpx.Client(
                headers=headers,
                timeout=timeout,
                follow_redirects=True,
                transport=self._transport,
                trust_env=False,
            )

        transport = httpx.HTTPTransport(
            retries=self._connect_retries,
            verify=self._verify_tls,
        )
        proxy_url = _session_proxy_url(session)
        if proxy_url is not None:
            proxy = httpx.Proxy(proxy_url, auth=session.proxy_auth)
            return httpx.Client(
                headers=headers,
                timeout=timeout,
                follow_redirects=True,
                verify=self._verify_tls,
                transport=transport,
                proxy=proxy,
                trust_env=False,
            )

        # Default proxy mode: httpx reads HTTP(S)_PROXY / NO_PROXY from the environment
        return httpx.Client(
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            verify=self._verify_tls,
            transport=transport,
            trust_env=True,
        )

    def _close_response(self, request: HttpxRequest) -> None:
        """Close and forget the request's current response."""
        if request.response is not None:
            request.response.close()
        request.response = None
        request.chunks = None
        request.pending = b""


def _split_header_block(headers: str | None) -> dict[str, str]:
    """Split a raw "Name: Value" block into a header mapping."""
    result: dict[str, str] = {}
    if not headers:
        return result
    for line in headers.splitlines():
        name, sep, value = line.partition(":")
        if sep and name.strip():
            result[name.strip()] = value.strip()
    return result


def _session_proxy_url(session: HttpxSession) -> str | None:
    """Get the explicit proxy URL of a session, if it has one."""
    if session.access_type == ProxyAccessType.NAMED_PROXY:
        return f"http://{session.proxy}"
    return session.environment_proxy


def _environment_proxy_url(url: str) -> str | None:
    """Resolve the proxy the environment configures for ``url``.

    Reads the same HTTP(S)_PROXY, ALL_PROXY and NO_PROXY variables httpx
    honors with ``trust_env``.

    Args:
        url: Absolute request URL.

    Returns:
        Proxy URL with a scheme, or None when the URL goes direct.
    """
    target = httpx.URL(url)
    proxies = urllib.request.getproxies()
    if not proxies or urllib.request.proxy_bypass(target.host):
        return None
    proxy = proxies.get(target.scheme) or proxies.get("all")
    if not proxy:
        return None
    if "://" not in proxy:
        proxy = f"http://{proxy}"
    return proxy


def _tunnel_challenge(
    error: httpx.ProxyError, http_request: httpx.Request
) -> httpx.Response | None:
    """Turn a CONNECT refused with 407 into a challenge response.

    Args:
        error: The error httpx raised for the refused tunnel.
        http_request: The request that needed the tunnel.

    Returns:
        An empty 407 response offering Basic, or None for any other refusal.
    """
    match = _TUNNEL_STATUS_PATTERN.match(str(error))
    if match is None or int(match.group(1)) != HTTP_STATUS_PROXY_AUTH_REQUIRED:
        return None
    return httpx.Response(
        HTTP_STATUS_PROXY_AUTH_REQUIRED,
        headers={PROXY_AUTHENTICATE_HEADER: TUNNEL_PROXY_CHALLENGE},
        content=b"",
        request=http_request,
    )


def _as_session(handle: object) -> HttpxSession:
    if not isinstance(handle, HttpxSession):
        msg = "Expected a session handle"
        raise InvalidHandleError(msg)
    return handle


def _as_connection(handle: object) -> HttpxConnection:
    if not isinstance(handle, HttpxConnection):
        msg = "Expected a connection handle"
        raise InvalidHandleError(msg)
    return handle


def _as_request(handle: object) -> HttpxRequest:
    if not isinstance(handle, HttpxRequest):
        msg = "Expected a request handle"
        raise InvalidHandleError(msg)
    return handle


def _require_response(request: HttpxRequest) -> httpx.Response:
    if request.response is None:
        msg = "No response has been received for this request"
        raise TransportError(msg, ERROR_INCORRECT_HANDLE_STATE)
    return request.response

