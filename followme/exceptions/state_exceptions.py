from typing import Set

from followme.enums.session_state import SessionState


class IllegalStateSwitchException(Exception):
    def __init__(self, state: SessionState, event: str, valid_events: Set[str]):
        self.state: SessionState = state
        self.event: str = event
        self.valid_events: Set[str] = valid_events

        message: str = (
            f"Event '{event}' invalid from {state.name}. Valid: {sorted(valid_events)}"
        )
        super().__init__(message)
