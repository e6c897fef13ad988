"""HTTP request orchestrator.

This module provides single-host HTTP requests with:
- Proxy and server authentication challenge handling
- Text/binary classification of response bodies
- Raw header block parsing
- Proxy URL normalization with embedded credentials
"""

from src.client.content_type import (
    charset_from_content_type,
    is_binary_mime_type,
    normalize_mime_type,
)
from src.client.headers import get_header, parse_header_block
from src.client.metrics import RequestMetrics
from src.client.models import (
    AuthChallengeState,
    HttpResponse,
    HttpVerb,
    RequestConfig,
    RequestErrorClass,
)
from src.client.proxy import ProxySettings, parse_proxy_url
from src.client.request import HttpRequest
from src.client.state_machine import (
    ExchangeState,
    ExchangeStateMachine,
    ExchangeStateTransitionError,
)


__all__ = [
    # Orchestrator
    "HttpRequest",
    # Models
    "AuthChallengeState",
    "HttpResponse",
    "HttpVerb",
    "RequestConfig",
    "RequestErrorClass",
    # Headers and content
    "charset_from_content_type",
    "get_header",
    "is_binary_mime_type",
    "normalize_mime_type",
    "parse_header_block",
    # Proxy
    "ProxySettings",
    "parse_proxy_url",
    # State machine
    "ExchangeState",
    "ExchangeStateMachine",
    "ExchangeStateTransitionError",
    # Metrics
    "RequestMetrics",
]
