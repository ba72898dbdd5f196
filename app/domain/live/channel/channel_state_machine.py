"""Channel state machine for managing lifecycle transitions."""

from app.schemas import ChannelState


class ChannelStateMachine:
    """State machine for channel lifecycle transitions.

    State flow with triggers:
    - CREATING (record created) -> PROVISIONING (allocation issued) | TERMINATING
    - PROVISIONING -> ACTIVE (instance ready, or mock fallback) | FAILED
    - ACTIVE -> STREAMING (ingest started) | MAINTENANCE (admin) | TERMINATING
    - STREAMING -> ACTIVE (ingest stopped) | TERMINATING
    - MAINTENANCE -> ACTIVE (admin)
    - FAILED -> TERMINATING
    - TERMINATING is terminal; the document is deleted right after
    """

    TRANSITIONS: dict[ChannelState, set[ChannelState]] = {
        ChannelState.CREATING: {
            ChannelState.PROVISIONING,
            ChannelState.TERMINATING,
        },
        ChannelState.PROVISIONING: {
            ChannelState.ACTIVE,
            ChannelState.FAILED,
        },
        ChannelState.ACTIVE: {
            ChannelState.STREAMING,
            ChannelState.MAINTENANCE,
            ChannelState.TERMINATING,
        },
        ChannelState.STREAMING: {
            ChannelState.ACTIVE,
            ChannelState.TERMINATING,
        },
        ChannelState.MAINTENANCE: {ChannelState.ACTIVE},
        ChannelState.FAILED: {ChannelState.TERMINATING},
        ChannelState.TERMINATING: set(),
    }

    TERMINAL_STATES: set[ChannelState] = {ChannelState.TERMINATING}

    @classmethod
    def can_transition(cls, current: ChannelState, new: ChannelState) -> bool:
        """Check if state transition is valid."""
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: ChannelState) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, state: ChannelState) -> set[ChannelState]:
        return cls.TRANSITIONS.get(state, set())

    @classmethod
    def get_valid_sources(cls, target: ChannelState) -> set[ChannelState]:
        """Get all states that can transition to the target state."""
        return {state for state, targets in cls.TRANSITIONS.items() if target in targets}
