"""Credential redaction utilities for logging."""

import re


# Request headers that carry credentials and must never appear in logs
SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie"})

REDACTED_VALUE = "[REDACTED]"

# user[:pass]@ prefix of a proxy URL, with or without scheme
_PROXY_CREDENTIALS_PATTERN = re.compile(r"^((?:https?://)?)[^@/]+@")


def _is_sensitive_header(header_name: str) -> bool:
    return header_name.strip().lower() in SENSITIVE_HEADERS


def redact_header_block(block: str) -> str:
    """Redact sensitive lines of a raw "Name: Value\\r\\n" header block.

    Line terminators are preserved so the result keeps its layout.

    Args:
        block: Raw header block.

    Returns:
        Header block with sensitive values replaced.
    """
    lines = block.splitlines(keepends=True)
    result: list[str] = []
    for line in lines:
        name, sep, _ = line.partition(":")
        if sep and _is_sensitive_header(name):
            ending = line[len(line.rstrip("\r\n")) :]
            result.append(f"{name}: {REDACTED_VALUE}{ending}")
        else:
            result.append(line)
    return "".join(result)


def redact_proxy_url(url: str) -> str:
    """Redact credentials from a proxy URL.

    Handles ``user:pass@host:port`` with or without an http(s) scheme.

    Args:
        url: Proxy URL that may contain credentials.

    Returns:
        URL with the credential part replaced.
    """
    return _PROXY_CREDENTIALS_PATTERN.sub(rf"\1{REDACTED_VALUE}@", url)
