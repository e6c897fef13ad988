"""Transport providers for the request orchestrator.

This module provides the session/connection/request handle chain with:
- A Protocol every provider implements
- Authentication scheme flags and scheme selection
- An httpx-backed provider for real network access
- A scripted provider for deterministic, network-free exchanges
- Credential redaction for logging
"""

from src.transport.auth import (
    AUTH_SCHEME_PREFERENCE,
    NO_AUTH_SCHEME,
    AuthScheme,
    AuthTarget,
    choose_auth_scheme,
    parse_auth_challenges,
)
from src.transport.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    NO_PROXY_BYPASS,
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
from src.transport.httpx_transport import HttpxTransport
from src.transport.provider import TransportProvider
from src.transport.redact import (
    redact_header_block,
    redact_proxy_url,
)
from src.transport.scripted import ScriptedExchange, ScriptedTransport


__all__ = [
    # Providers
    "HttpxTransport",
    "ScriptedExchange",
    "ScriptedTransport",
    "TransportProvider",
    # Auth
    "AUTH_SCHEME_PREFERENCE",
    "NO_AUTH_SCHEME",
    "AuthScheme",
    "AuthTarget",
    "choose_auth_scheme",
    "parse_auth_challenges",
    # Constants
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_TIMEOUT_SECONDS",
    "NO_PROXY_BYPASS",
    "ProxyAccessType",
    "RequestFlag",
    # Errors
    "InsufficientBufferError",
    "InvalidHandleError",
    "ResendRequestError",
    "TransportError",
    "UnsupportedAuthSchemeError",
    # Redaction
    "redact_header_block",
    "redact_proxy_url",
]
