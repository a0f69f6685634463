from enum import Enum


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    READY_FOR_ACTION = "ready_for_action"
    ARMED = "armed"
    AIRBORNE = "airborne"
    FOLLOWING = "following"
    STOPPING = "stopping"
    LANDED = "landed"
