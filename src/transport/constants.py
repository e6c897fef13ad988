"""Constants shared by transport providers.

Flag values and error codes use WinHTTP numbering.
"""

from enum import Enum, IntFlag


class ProxyAccessType(str, Enum):
    """How a session resolves its proxy.

    - DEFAULT_PROXY: Use the system/environment proxy configuration
    - NAMED_PROXY: Use the explicit ``host:port`` given at session open
    """

    DEFAULT_PROXY = "DEFAULT_PROXY"
    NAMED_PROXY = "NAMED_PROXY"


class RequestFlag(IntFlag):
    """Flags accepted by ``open_request``."""

    NONE = 0
    SECURE = 0x00800000
    REFRESH = 0x00000100


# Proxy bypass list value meaning "no bypass entries"
NO_PROXY_BYPASS = ""

# Transport error codes (WinHTTP numbering)
ERROR_TIMEOUT = 12002
ERROR_INTERNAL = 12004
ERROR_INVALID_URL = 12005
ERROR_NAME_NOT_RESOLVED = 12007
ERROR_CANNOT_CONNECT = 12029
ERROR_CONNECTION_ERROR = 12030
ERROR_RESEND_REQUEST = 12032
ERROR_INVALID_SERVER_RESPONSE = 12152
ERROR_INCORRECT_HANDLE_STATE = 12019
ERROR_INVALID_HANDLE = 6
ERROR_INSUFFICIENT_BUFFER = 122
ERROR_INVALID_PARAMETER = 87
ERROR_NOT_SUPPORTED = 50

# Response headers carrying authentication challenges
WWW_AUTHENTICATE_HEADER = "WWW-Authenticate"
PROXY_AUTHENTICATE_HEADER = "Proxy-Authenticate"

# Chunk size for streaming body reads
DEFAULT_CHUNK_SIZE = 8192

# Provider timeout used when the caller gives none (seconds)
DEFAULT_TIMEOUT_SECONDS = 30.0

# User-Agent sent when the caller gives none
DEFAULT_USER_AGENT = "WinHttpClient"
