"""
Request State Machine
---------------------
Tracks the lifecycle of a single tool call.

    RECEIVED -> VALIDATING -> (REJECTED | EXECUTING) -> (COMPLETED | FAILED)

REJECTED, COMPLETED and FAILED are terminal. Every transition is logged
at DEBUG with the call's id.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Dict, List, Optional, Set
import logging


class RequestState(Enum):
    """States of a tool call."""
    RECEIVED = auto()    # Name + arguments accepted from the transport
    VALIDATING = auto()  # Registry lookup and schema check
    REJECTED = auto()    # Unknown tool or schema violation
    EXECUTING = auto()   # Handler running
    COMPLETED = auto()   # Handler produced a success envelope
    FAILED = auto()      # Handler produced a failure envelope or raised


TERMINAL_STATES: Set[RequestState] = {
    RequestState.REJECTED,
    RequestState.COMPLETED,
    RequestState.FAILED,
}


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: RequestState
    to_state: RequestState
    timestamp: datetime
    reason: str
    metadata: Dict = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"StateTransition({self.from_state.name} → {self.to_state.name}, "
            f"reason='{self.reason}')"
        )


VALID_TRANSITIONS: Dict[RequestState, Set[RequestState]] = {
    RequestState.RECEIVED: {RequestState.VALIDATING},
    RequestState.VALIDATING: {RequestState.REJECTED, RequestState.EXECUTING},
    RequestState.EXECUTING: {RequestState.COMPLETED, RequestState.FAILED},
    RequestState.REJECTED: set(),
    RequestState.COMPLETED: set(),
    RequestState.FAILED: set(),
}


class RequestStateMachine:
    """
    State machine for one tool call.

    Created per request by the dispatcher and discarded with it;
    nothing is shared between concurrent calls.
    """

    def __init__(self, tool_name: str, call_id: Optional[str] = None):
        self.tool_name = tool_name
        self.call_id = call_id or "-"
        self._state = RequestState.RECEIVED
        self._history: List[StateTransition] = []
        self._logger = logging.getLogger("music_mcp.state")

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def history(self) -> List[StateTransition]:
        return self._history.copy()

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def can_transition(self, to_state: RequestState) -> bool:
        return to_state in VALID_TRANSITIONS.get(self._state, set())

    def transition(
        self,
        to_state: RequestState,
        reason: str,
        metadata: Optional[Dict] = None
    ) -> StateTransition:
        """
        Move to a new state.

        Raises:
            ValueError: If the transition is not allowed
        """
        if not self.can_transition(to_state):
            valid_names = [s.name for s in VALID_TRANSITIONS.get(self._state, set())]
            raise ValueError(
                f"Invalid transition: {self._state.name} → {to_state.name}. "
                f"Valid targets: {valid_names}"
            )

        transition = StateTransition(
            from_state=self._state,
            to_state=to_state,
            timestamp=datetime.now(),
            reason=reason,
            metadata=metadata or {}
        )
        self._state = to_state
        self._history.append(transition)

        self._logger.debug(
            f"{self.tool_name} [{self.call_id}]: {transition.from_state.name} → "
            f"{to_state.name} (reason: {reason})"
        )
        return transition
