"""Lifecycle state machine for the bridge."""

import logging
from enum import Enum, auto
from typing import Callable

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    """
    Bridge lifecycle states.

    State transitions:
        IDLE -> RUNNING -> STOPPED -> RUNNING -> ...

    A bridge can be restarted after it has stopped, but never started
    twice while running.
    """

    IDLE = auto()
    RUNNING = auto()
    STOPPED = auto()

    def __str__(self) -> str:
        return self.name


class InvalidStateTransition(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: LifecycleState, to_state: LifecycleState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


# Type for state transition callbacks
StateTransitionCallback = Callable[[LifecycleState, LifecycleState], None]


class LifecycleStateMachine:
    """
    Tracks bridge lifecycle state.

    Enforces valid state transitions and notifies listeners
    when transitions occur.
    """

    VALID_TRANSITIONS: dict[LifecycleState, list[LifecycleState]] = {
        LifecycleState.IDLE: [LifecycleState.RUNNING],
        LifecycleState.RUNNING: [LifecycleState.STOPPED],
        LifecycleState.STOPPED: [LifecycleState.RUNNING],
    }

    def __init__(self, initial_state: LifecycleState = LifecycleState.IDLE):
        self._state = initial_state
        self._listeners: list[StateTransitionCallback] = []

    @property
    def state(self) -> LifecycleState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == LifecycleState.RUNNING

    @property
    def is_stopped(self) -> bool:
        return self._state == LifecycleState.STOPPED

    def can_transition_to(self, new_state: LifecycleState) -> bool:
        """Check if transition to new_state is valid."""
        return new_state in self.VALID_TRANSITIONS.get(self._state, [])

    def transition(self, new_state: LifecycleState) -> None:
        """
        Transition to a new state.

        Args:
            new_state: The target state.

        Raises:
            InvalidStateTransition: If the transition is not valid.
        """
        if not self.can_transition_to(new_state):
            raise InvalidStateTransition(self._state, new_state)

        old_state = self._state
        self._state = new_state

        for listener in self._listeners:
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception(
                    f"State listener failed on {old_state.name} -> {new_state.name}"
                )

    def on_transition(self, callback: StateTransitionCallback) -> None:
        """
        Register a callback for state transitions.

        Args:
            callback: Function called with (old_state, new_state) on transitions.
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: StateTransitionCallback) -> None:
        """Remove a previously registered callback."""
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def __str__(self) -> str:
        return f"LifecycleStateMachine({self._state.name})"

    def __repr__(self) -> str:
        return f"LifecycleStateMachine(state={self._state!r})"
