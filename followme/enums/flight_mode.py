from enum import Enum


class FlightMode(Enum):
    UNKNOWN = "Unknown"
    READY = "Ready"
    TAKEOFF = "Takeoff"
    HOLD = "Hold"
    MISSION = "Mission"
    RETURN_TO_LAUNCH = "Return to launch"
    LAND = "Land"
    OFFBOARD = "Offboard"
    FOLLOW_ME = "FollowMe"
    MANUAL = "Manual"
    ALTCTL = "Altitude control"
    POSCTL = "Position control"
    ACRO = "Acro"
    STABILIZED = "Stabilized"
    RATTITUDE = "Rattitude"

    @classmethod
    def from_name(cls, name: str) -> "FlightMode":
        try:
            return cls[name]
        except KeyError:
            return cls.UNKNOWN
