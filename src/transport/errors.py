"""Exception types raised by transport providers.

Providers signal every failed primitive by raising one of these. The
request orchestrator is the only consumer and converts them into
response error messages.
"""

from src.transport.constants import (
    ERROR_INSUFFICIENT_BUFFER,
    ERROR_INVALID_HANDLE,
    ERROR_NOT_SUPPORTED,
    ERROR_RESEND_REQUEST,
)


class TransportError(Exception):
    """Base exception for all transport failures.

    Carries the numeric error code reported by the underlying engine.
    """

    def __init__(self, message: str, code: int = 0) -> None:
        """Initialize transport error.

        Args:
            message: Error message.
            code: Engine-specific error code.
        """
        self.code = code
        super().__init__(message)


class ResendRequestError(TransportError):
    """The engine asks for the same request to be submitted again.

    Distinct from an authentication challenge; the orchestrator restarts
    the send loop without counting it as a repeated challenge.
    """

    def __init__(self, message: str = "Request must be resent") -> None:
        """Initialize resend error.

        Args:
            message: Error message.
        """
        super().__init__(message, ERROR_RESEND_REQUEST)


class InsufficientBufferError(TransportError):
    """The caller's buffer is too small for the requested data.

    Used by the two-phase raw header query: probing with no buffer yields
    this error with ``required_size`` set.
    """

    def __init__(self, required_size: int) -> None:
        """Initialize insufficient buffer error.

        Args:
            required_size: Size the buffer must have.
        """
        self.required_size = required_size
        super().__init__(
            f"Buffer too small, {required_size} characters required",
            ERROR_INSUFFICIENT_BUFFER,
        )


class UnsupportedAuthSchemeError(TransportError):
    """The provider cannot answer a challenge with the chosen scheme."""

    def __init__(self, scheme_name: str) -> None:
        """Initialize unsupported scheme error.

        Args:
            scheme_name: Name of the rejected scheme.
        """
        self.scheme_name = scheme_name
        super().__init__(
            f"Authentication scheme {scheme_name} is not supported",
            ERROR_NOT_SUPPORTED,
        )


class InvalidHandleError(TransportError):
    """A handle of the wrong kind, or one already closed, was passed."""

    def __init__(self, message: str = "Invalid handle") -> None:
        """Initialize invalid handle error.

        Args:
            message: Error message.
        """
        super().__init__(message, ERROR_INVALID_HANDLE)
