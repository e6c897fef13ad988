"""Flat, dictionary based request surface."""

from src.binding.marshal import (
    INVALID_METHOD_ERROR,
    VERBS_BY_INDEX,
    send_http_request,
)


__all__ = [
    "INVALID_METHOD_ERROR",
    "VERBS_BY_INDEX",
    "send_http_request",
]
