from followme.enums.results import OperationResult


class SessionAbortException(Exception):
    """Base for failures that end a session before Follow-Me is reached"""

    def __init__(self, reason: str, result: OperationResult):
        self.reason: str = reason
        self.result: OperationResult = result
        super().__init__(f"{reason}: {result.description}")


class ConnectivityFailure(SessionAbortException):
    pass


class CommandFailure(SessionAbortException):
    pass
