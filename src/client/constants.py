"""Constants for the request orchestrator.

Centralizes status codes, proxy defaults and content classification
tables to avoid duplication across modules.
"""

# HTTP status codes that trigger an authentication round
HTTP_STATUS_UNAUTHORIZED = 401
HTTP_STATUS_PROXY_AUTH_REQUIRED = 407
AUTH_CHALLENGE_STATUSES = frozenset(
    {HTTP_STATUS_UNAUTHORIZED, HTTP_STATUS_PROXY_AUTH_REQUIRED}
)

# Proxy defaults
DEFAULT_PROXY_PORT = 8080
PROXY_SCHEME_PREFIXES = ("http://", "https://")

# Non "text/" MIME types whose bodies are still buffered as text.
# text/* entries are also matched by TEXT_MIME_PREFIX.
TEXT_MIME_TYPES = frozenset(
    {
        "text/html",
        "text/css",
        "text/xml",
        "text/plain",
        "text/mathml",
        "text/vnd.sun.j2me.app-descriptor",
        "text/vnd.wap.wml",
        "text/x-component",
        "application/javascript",
        "application/atom+xml",
        "application/rss+xml",
        "application/json",
        "application/rtf",
        "application/x-perl",
        "application/xhtml+xml",
        "application/xspf+xml",
        "image/svg+xml",
    }
)
TEXT_MIME_PREFIX = "text/"

CONTENT_TYPE_HEADER = "Content-Type"
DEFAULT_TEXT_ENCODING = "utf-8"

# Joins successive error messages recorded during one request
ERROR_SEPARATOR = "; "
