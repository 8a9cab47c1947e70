"""Run session lifecycle state tracking.

A session moves through LISTENING -> CONNECTED -> LAUNCHED -> TERMINATED;
TERMINATED can also be reached directly from LISTENING or CONNECTED.
"""

from __future__ import annotations

import asyncio
from enum import Enum
import logging
from typing import ClassVar

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states for a run session."""

    LISTENING = "listening"
    CONNECTED = "connected"
    LAUNCHED = "launched"
    TERMINATED = "terminated"


class SessionTransitionError(Exception):
    """Raised when an invalid lifecycle state transition is attempted."""

    def __init__(self, from_state: SessionState, to_state: SessionState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid session transition: {from_state.value} -> {to_state.value}")


class SessionLifecycle:
    """Tracks the state of one run session and validates transitions.

    Transitions are synchronous: they never await, so a handler observes a
    consistent state for the whole of its synchronous section.
    """

    _VALID_TRANSITIONS: ClassVar[dict[SessionState, set[SessionState]]] = {
        SessionState.LISTENING: {
            SessionState.CONNECTED,
            SessionState.TERMINATED,
        },
        SessionState.CONNECTED: {
            SessionState.LAUNCHED,
            SessionState.TERMINATED,
        },
        SessionState.LAUNCHED: {
            SessionState.TERMINATED,
        },
        SessionState.TERMINATED: set(),  # Final state
    }

    def __init__(self, name: str = "run-session") -> None:
        self._name = name
        self._state = SessionState.LISTENING
        self._terminated = asyncio.Event()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_terminated(self) -> bool:
        return self._state is SessionState.TERMINATED

    def can_transition_to(self, new_state: SessionState) -> bool:
        return new_state in self._VALID_TRANSITIONS[self._state]

    def transition_to(self, new_state: SessionState) -> None:
        """Move to ``new_state``.

        Raises:
            SessionTransitionError: If the transition is invalid
        """
        if not self.can_transition_to(new_state):
            raise SessionTransitionError(self._state, new_state)

        old_state = self._state
        self._state = new_state
        logger.debug("%s: %s -> %s", self._name, old_state.value, new_state.value)

        if new_state is SessionState.TERMINATED:
            self._terminated.set()

    def mark_connected(self) -> None:
        self.transition_to(SessionState.CONNECTED)

    def mark_launched(self) -> None:
        self.transition_to(SessionState.LAUNCHED)

    def mark_terminated(self) -> bool:
        """Enter TERMINATED; returns False if the session already was."""
        if self.is_terminated:
            return False
        self.transition_to(SessionState.TERMINATED)
        return True

    async def wait_terminated(self) -> None:
        await self._terminated.wait()
