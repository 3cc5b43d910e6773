"""
Error taxonomy for the capture pipeline and the task lifecycle.

Every error carries a `kind` that is surfaced verbatim to API callers, so a
client can tell a retryable AI outage from a rejected transition.
"""


class BoomerangError(Exception):
    kind = "BoomerangError"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class AIUnavailable(BoomerangError):
    """Model call errored or timed out. The whole capture may be resubmitted."""
    kind = "AIUnavailable"


class NoActionableIntent(AIUnavailable):
    """Model answered but produced no usable function call."""
    kind = "NoActionableIntent"


class PersistenceError(BoomerangError):
    kind = "PersistenceError"


class InvalidTransition(BoomerangError):
    kind = "InvalidTransition"


class NotFound(BoomerangError):
    kind = "NotFound"


class ValidationError(BoomerangError):
    kind = "ValidationError"


class UnknownAction(ValidationError):
    kind = "UnknownAction"


class InvalidActionCall(ValidationError):
    kind = "InvalidActionCall"
