"""Content-Type classification for response bodies."""

import codecs

from src.client.constants import (
    DEFAULT_TEXT_ENCODING,
    TEXT_MIME_PREFIX,
    TEXT_MIME_TYPES,
)


_WHITESPACE = " \t\r\n"


def normalize_mime_type(content_type: str) -> str:
    """Reduce a Content-Type value to its bare, lowercase MIME type.

    Args:
        content_type: Header value, e.g. "Text/HTML; charset=utf-8".

    Returns:
        MIME type without parameters, e.g. "text/html".
    """
    mime_type, _, _ = content_type.partition(";")
    return mime_type.strip(_WHITESPACE).lower()


def is_binary_mime_type(content_type: str) -> bool:
    """Decide whether a body with this Content-Type is binary.

    Anything under "text/" and the MIME types in ``TEXT_MIME_TYPES`` are
    text. An empty or blank Content-Type is treated as text.

    Args:
        content_type: Raw Content-Type header value.

    Returns:
        True if the body should be kept as bytes.
    """
    mime_type = normalize_mime_type(content_type)
    if not mime_type:
        return False
    if mime_type.startswith(TEXT_MIME_PREFIX):
        return False
    return mime_type not in TEXT_MIME_TYPES


def charset_from_content_type(content_type: str) -> str:
    """Get the text encoding named by a Content-Type charset parameter.

    Args:
        content_type: Raw Content-Type header value.

    Returns:
        A codec name Python knows, falling back to UTF-8.
    """
    _, _, params = content_type.partition(";")
    for param in params.split(";"):
        name, sep, value = param.partition("=")
        if not sep or name.strip(_WHITESPACE).lower() != "charset":
            continue
        charset = value.strip(_WHITESPACE).strip("\"'")
        try:
            return codecs.lookup(charset).name
        except LookupError:
            return DEFAULT_TEXT_ENCODING
    return DEFAULT_TEXT_ENCODING
