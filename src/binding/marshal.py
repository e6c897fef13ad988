"""Flat request function for embedding hosts.

Hosts that cannot hold an orchestrator object call ``send_http_request``
with plain values and get a plain dictionary back.
"""

import structlog
from pydantic import ValidationError

from src.client.metrics import RequestMetrics
from src.client.models import HttpResponse, HttpVerb, RequestErrorClass
from src.client.request import HttpRequest
from src.transport.constants import DEFAULT_TIMEOUT_SECONDS
from src.transport.httpx_transport import HttpxTransport
from src.transport.provider import TransportProvider


logger = structlog.get_logger()

# Method index accepted by send_http_request
VERBS_BY_INDEX: tuple[HttpVerb, ...] = (
    HttpVerb.GET,
    HttpVerb.POST,
    HttpVerb.PUT,
    HttpVerb.DELETE,
)

INVALID_METHOD_ERROR = "Invalid method"
INVALID_CONFIG_ERROR = "Invalid request configuration"


def _encode_body(body: bytes | str | None) -> bytes:
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def send_http_request(
    domain: str,
    port: int,
    https: bool,
    path: str | None,
    method: int,
    body: bytes | str | None = None,
    headers: str | None = None,
    proxy: str | None = None,
    timeout: float = 0,
    transport: TransportProvider | None = None,
) -> dict[str, object]:
    """Execute one request and marshal the response into a dictionary.

    Args:
        domain: Host to connect to.
        port: Port to connect to.
        https: Whether to use TLS.
        path: Path on the host; None is treated as "".
        method: 0=GET, 1=POST, 2=PUT, 3=DELETE.
        body: Request body; text is UTF-8 encoded.
        headers: Raw "Name: Value\\r\\n" header block.
        proxy: Proxy URL, credentials allowed; empty uses the system proxy.
        timeout: Provider timeout in seconds; 0 or less keeps the default.
            Ignored when ``transport`` is given.
        transport: Transport provider; defaults to the httpx provider.

    Returns:
        Dictionary with headers, content, contentLength, status, error and,
        for binary bodies, binaryContent. Invalid input yields only status
        0 and an error, without network activity.
    """
    log = logger.bind(component="binding", domain=domain, port=port, method=method)

    if not 0 <= method < len(VERBS_BY_INDEX):
        log.warning("binding_invalid_method")
        RequestMetrics.get_instance().record_failure(RequestErrorClass.INVALID_INPUT)
        return {"status": 0, "error": INVALID_METHOD_ERROR}

    if transport is None:
        timeout_seconds = timeout if timeout > 0 else DEFAULT_TIMEOUT_SECONDS
        transport = HttpxTransport(timeout_seconds=timeout_seconds)

    try:
        client = HttpRequest(domain, port, https, transport=transport)
    except ValidationError as e:
        log.warning("binding_invalid_config", error_count=e.error_count())
        RequestMetrics.get_instance().record_failure(RequestErrorClass.INVALID_INPUT)
        error = f"{INVALID_CONFIG_ERROR}: {e.error_count()} error(s)"
        return {"status": 0, "error": error}

    if proxy:
        client.set_proxy(proxy)

    response = HttpResponse()
    client.request(
        VERBS_BY_INDEX[method],
        path or "",
        headers or "",
        _encode_body(body),
        response,
    )
    result = response.to_dict()
    response.reset()
    return result
