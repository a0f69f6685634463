from enum import Enum

_RETRYABLE = {"TIMEOUT", "BUSY", "CONNECTION_ERROR"}


class OperationResult(Enum):
    """Outcome of a single vehicle operation.

    Member names mirror the MAVSDK result enumerations so an SDK result can be
    converted by name. A failure is either retryable (the same request may
    succeed later) or terminal. Nothing in the session retries automatically;
    the classification is only reported.
    """

    @classmethod
    def from_name(cls, name: str):
        try:
            return cls[name]
        except KeyError:
            return cls["UNKNOWN"]

    @property
    def is_success(self) -> bool:
        return self.name == "SUCCESS"

    @property
    def is_retryable(self) -> bool:
        return self.name in _RETRYABLE

    @property
    def is_terminal(self) -> bool:
        return not self.is_success and not self.is_retryable

    @property
    def description(self) -> str:
        return self.value


class ConnectionResult(OperationResult):
    SUCCESS = "Success"
    TIMEOUT = "Timeout"
    SOCKET_ERROR = "Socket error"
    BIND_ERROR = "Bind error"
    CONNECTION_ERROR = "Connection error"
    CONNECTION_URL_INVALID = "Invalid connection URL"
    NOT_CONNECTED = "Not connected"
    UNKNOWN = "Unknown error"


class ActionResult(OperationResult):
    SUCCESS = "Success"
    UNKNOWN = "Unknown error"
    NO_SYSTEM = "No system connected"
    CONNECTION_ERROR = "Connection error"
    BUSY = "Vehicle busy"
    COMMAND_DENIED = "Command denied"
    COMMAND_DENIED_LANDED_STATE_UNKNOWN = "Command denied, landed state unknown"
    COMMAND_DENIED_NOT_LANDED = "Command denied, not landed"
    TIMEOUT = "Timeout"
    PARAMETER_ERROR = "Parameter error"
    UNSUPPORTED = "Unsupported"


class FollowMeResult(OperationResult):
    SUCCESS = "Success"
    UNKNOWN = "Unknown error"
    NO_SYSTEM = "No system connected"
    CONNECTION_ERROR = "Connection error"
    BUSY = "Vehicle busy"
    COMMAND_DENIED = "Command denied"
    TIMEOUT = "Timeout"
    NOT_ACTIVE = "FollowMe not active"
    SET_CONFIG_FAILED = "Failed to set configuration"
    INVALID_TARGET_LOCATION = "Invalid target location"
