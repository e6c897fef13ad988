"""Raw header block parser.

Scans a "Name: Value" block character by character. This is a small
finite-state scanner rather than an RFC 7230 parser: it does not unfold
continuation lines and does not comma-join repeated headers.
"""

from enum import Enum


class ScanState(Enum):
    """States of the header scanner.

    State transitions:
    READING_KEY -> READING_VALUE on the first ":" of a line
    READING_KEY | READING_VALUE -> READING_KEY on "\\n"
    READING_KEY | READING_VALUE -> LINE_BOUNDARY on "\\r"
    LINE_BOUNDARY -> READING_KEY on "\\n"
    """

    READING_KEY = "reading_key"
    READING_VALUE = "reading_value"
    LINE_BOUNDARY = "line_boundary"


def parse_header_block(block: str) -> dict[str, str]:
    """Parse a raw header block into a name -> value mapping.

    Lines end with CRLF or a bare LF. The key is everything before the
    first colon of a line; a single space after that colon is skipped and
    the rest of the line is the value. Pairs with an empty key or value are
    dropped and the last occurrence of a name wins. After a bare CR the
    remainder of the line is discarded.

    Args:
        block: Raw header text, e.g. "HTTP/1.1 200 OK\\r\\nA: 1\\r\\n".

    Returns:
        Mapping of header name to value, names in observed case.
    """
    headers: dict[str, str] = {}
    key: list[str] = []
    value: list[str] = []
    state = ScanState.READING_KEY
    skip_space = False

    def commit() -> None:
        if key and value:
            headers["".join(key)] = "".join(value)
        key.clear()
        value.clear()

    for ch in block:
        if state == ScanState.LINE_BOUNDARY:
            if ch == "\n":
                state = ScanState.READING_KEY
            continue

        if ch == "\r":
            commit()
            state = ScanState.LINE_BOUNDARY
            continue
        if ch == "\n":
            commit()
            state = ScanState.READING_KEY
            continue

        if state == ScanState.READING_KEY:
            if ch == ":":
                state = ScanState.READING_VALUE
                skip_space = True
            else:
                key.append(ch)
            continue

        if skip_space:
            skip_space = False
            if ch == " ":
                continue
        value.append(ch)

    commit()
    return headers


def get_header(headers: dict[str, str], name: str) -> str | None:
    """Look up a header by name.

    Tries the given capitalization, then lowercase, then any case.

    Args:
        headers: Parsed header mapping.
        name: Header name in canonical capitalization.

    Returns:
        Header value, or None if absent.
    """
    if name in headers:
        return headers[name]
    lowered = name.lower()
    if lowered in headers:
        return headers[lowered]
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None
