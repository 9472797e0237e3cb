class EngineError(Exception):
    kind = "EngineError"
    status_code = 500

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidParameter(EngineError):
    """Rejected input. Nothing changed, safe to retry with corrected values."""
    kind = "InvalidParameter"
    status_code = 400


class InvalidRoundState(EngineError):
    """Request does not match the round's current lifecycle stage."""
    kind = "InvalidRoundState"
    status_code = 409


class NotFound(EngineError):
    kind = "NotFound"
    status_code = 404
