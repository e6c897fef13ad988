"""Exchange state machine for one request execution."""

from enum import Enum

import structlog


logger = structlog.get_logger()


class ExchangeState(Enum):
    """States of a request exchange.

    State transitions:
    PENDING -> SENDING -> RECEIVING -> STREAMING -> DONE
    STREAMING -> CHALLENGED -> SENDING (authentication round)
    SENDING | RECEIVING -> SENDING (resend signal)
    Any non-terminal state can transition to FAILED.
    """

    PENDING = "pending"
    SENDING = "sending"
    RECEIVING = "receiving"
    STREAMING = "streaming"
    CHALLENGED = "challenged"
    DONE = "done"
    FAILED = "failed"


# Valid state transitions (from_state -> [to_states])
_VALID_TRANSITIONS: dict[ExchangeState, list[ExchangeState]] = {
    ExchangeState.PENDING: [ExchangeState.SENDING, ExchangeState.FAILED],
    ExchangeState.SENDING: [
        ExchangeState.SENDING,
        ExchangeState.RECEIVING,
        ExchangeState.FAILED,
    ],
    ExchangeState.RECEIVING: [
        ExchangeState.SENDING,
        ExchangeState.STREAMING,
        ExchangeState.FAILED,
    ],
    ExchangeState.STREAMING: [
        ExchangeState.CHALLENGED,
        ExchangeState.DONE,
        ExchangeState.FAILED,
    ],
    ExchangeState.CHALLENGED: [
        ExchangeState.SENDING,
        ExchangeState.DONE,
        ExchangeState.FAILED,
    ],
    ExchangeState.DONE: [],
    ExchangeState.FAILED: [],
}


class ExchangeStateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: ExchangeState, to_state: ExchangeState) -> None:
        """Initialize the error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid exchange state transition: {from_state.value} -> {to_state.value}"
        )


class ExchangeStateMachine:
    """State machine for one request exchange.

    Enforces the order send -> receive -> stream, with authentication
    rounds looping back to send until DONE or FAILED.
    """

    def __init__(self, verb: str, path: str) -> None:
        """Initialize the state machine.

        Args:
            verb: Request verb, for logging.
            path: Request path, for logging.
        """
        self._state = ExchangeState.PENDING
        self._log = logger.bind(component="http", verb=verb, path=path)

    @property
    def state(self) -> ExchangeState:
        """Get the current state."""
        return self._state

    def is_done(self) -> bool:
        """Check if in DONE state."""
        return self._state == ExchangeState.DONE

    def is_failed(self) -> bool:
        """Check if in FAILED state."""
        return self._state == ExchangeState.FAILED

    def is_terminal(self) -> bool:
        """Check if in a terminal state (DONE or FAILED)."""
        return self._state in (ExchangeState.DONE, ExchangeState.FAILED)

    def can_transition(self, to_state: ExchangeState) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: Target state.

        Returns:
            True if transition is valid.
        """
        return to_state in _VALID_TRANSITIONS.get(self._state, [])

    def transition(self, to_state: ExchangeState) -> None:
        """Transition to a new state.

        Args:
            to_state: Target state.

        Raises:
            ExchangeStateTransitionError: If transition is invalid.
        """
        if not self.can_transition(to_state):
            raise ExchangeStateTransitionError(self._state, to_state)

        old_state = self._state
        self._state = to_state

        self._log.debug(
            "exchange_state_transition",
            from_state=old_state.value,
            to_state=to_state.value,
        )

    def fail(self, reason: str) -> None:
        """Transition to FAILED state.

        Args:
            reason: Reason for failure.
        """
        if self.is_terminal():
            self._log.warning(
                "exchange_already_terminal",
                current_state=self._state.value,
                reason=reason,
            )
            return

        old_state = self._state
        self._state = ExchangeState.FAILED

        self._log.warning(
            "exchange_state_failed",
            from_state=old_state.value,
            reason=reason,
        )
