from typing import Dict

from followme.enums.session_state import SessionState as State
from followme.exceptions.state_exceptions import IllegalStateSwitchException


class StateMachine:
    def __init__(self):
        self.__state: State = State.DISCONNECTED
        self.__transitions: Dict[State, Dict[str, State]] = {
            State.DISCONNECTED: {"connect": State.CONNECTED},
            State.CONNECTED: {"ready": State.READY_FOR_ACTION},
            State.READY_FOR_ACTION: {"arm": State.ARMED},
            State.ARMED: {"takeoff": State.AIRBORNE},
            State.AIRBORNE: {
                "follow": State.FOLLOWING,
                "stop": State.STOPPING,
            },
            State.FOLLOWING: {"stop": State.STOPPING},
            State.STOPPING: {"land": State.LANDED},
            State.LANDED: {},
        }

    def trigger(self, event: str) -> bool:
        if event in self.__transitions[self.__state]:
            self.__state = self.__transitions[self.__state][event]
            return True
        else:
            raise IllegalStateSwitchException(
                self.__state, event, set(self.__transitions[self.__state].keys())
            )

    def get_state(self) -> State:
        return self.__state

    def is_airborne(self) -> bool:
        return self.__state in (State.AIRBORNE, State.FOLLOWING, State.STOPPING)
