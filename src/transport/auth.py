"""Authentication scheme flags, targets and scheme selection."""

import re
from enum import IntEnum, IntFlag


class AuthScheme(IntFlag):
    """Authentication schemes a server or proxy may offer.

    Bit values match WinHTTP so masks can be passed through unchanged.
    ``AuthScheme(0)`` means no scheme.
    """

    BASIC = 0x00000001
    NTLM = 0x00000002
    PASSPORT = 0x00000004
    DIGEST = 0x00000008
    NEGOTIATE = 0x00000010


class AuthTarget(IntEnum):
    """Who issued an authentication challenge."""

    SERVER = 0
    PROXY = 1


NO_AUTH_SCHEME = AuthScheme(0)

# Strongest first; Basic sends a recoverable password so it goes last
AUTH_SCHEME_PREFERENCE: tuple[AuthScheme, ...] = (
    AuthScheme.NEGOTIATE,
    AuthScheme.NTLM,
    AuthScheme.PASSPORT,
    AuthScheme.DIGEST,
    AuthScheme.BASIC,
)

_SCHEME_NAMES: dict[str, AuthScheme] = {
    "negotiate": AuthScheme.NEGOTIATE,
    "ntlm": AuthScheme.NTLM,
    "passport1.4": AuthScheme.PASSPORT,
    "digest": AuthScheme.DIGEST,
    "basic": AuthScheme.BASIC,
}

_DISPLAY_NAMES: dict[AuthScheme, str] = {
    AuthScheme.NEGOTIATE: "Negotiate",
    AuthScheme.NTLM: "NTLM",
    AuthScheme.PASSPORT: "Passport1.4",
    AuthScheme.DIGEST: "Digest",
    AuthScheme.BASIC: "Basic",
}

# A challenge starts a header value or follows a comma, and is a bare token
# (auth-params such as realm="x" are followed by "=" and do not match).
_CHALLENGE_PATTERN = re.compile(
    r"(?:^|,)\s*([A-Za-z][A-Za-z0-9!#$%&'*+.^_`|~-]*)(?=\s|,|$)"
)

# Quoted auth-param values may contain commas and scheme-like words
_QUOTED_STRING_PATTERN = re.compile(r'"(?:[^"\\]|\\.)*"')


def choose_auth_scheme(supported_schemes: int) -> AuthScheme:
    """Pick the most secure scheme from a supported-scheme mask.

    Args:
        supported_schemes: Bitmask of AuthScheme values.

    Returns:
        The preferred scheme, or ``NO_AUTH_SCHEME`` if none is usable.
    """
    for scheme in AUTH_SCHEME_PREFERENCE:
        if supported_schemes & scheme:
            return scheme
    return NO_AUTH_SCHEME


def parse_auth_challenges(header_values: list[str]) -> tuple[AuthScheme, AuthScheme]:
    """Parse WWW-Authenticate / Proxy-Authenticate values into scheme flags.

    Unknown schemes are ignored.

    Args:
        header_values: Raw challenge header values, in response order.

    Returns:
        Tuple of (supported scheme mask, first scheme offered).
    """
    supported = NO_AUTH_SCHEME
    first = NO_AUTH_SCHEME
    for value in header_values:
        unquoted = _QUOTED_STRING_PATTERN.sub('""', value)
        for match in _CHALLENGE_PATTERN.finditer(unquoted):
            scheme = _SCHEME_NAMES.get(match.group(1).lower())
            if scheme is None:
                continue
            if not first:
                first = scheme
            supported |= scheme
    return supported, first


def scheme_name(scheme: AuthScheme) -> str:
    """Get the wire name of a single scheme.

    Args:
        scheme: A single AuthScheme flag.

    Returns:
        Scheme name as used in challenge headers, or "None".
    """
    return _DISPLAY_NAMES.get(scheme, "None")
