"""Domain errors raised by the workflow services.

Every error carries a stable ``kind`` and the HTTP status it maps to, so the
single exception handler in ``pressroom.main`` can render any of them.
"""


class WorkflowError(Exception):
    """Base class for workflow failures."""

    kind = "WorkflowError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WorkflowError):
    """Bad or missing input."""

    kind = "ValidationError"
    status_code = 400


class InvalidRole(ValidationError):
    """Requested role is not one that can be requested."""

    pass


class NotFound(WorkflowError):
    """Referenced entity does not exist."""

    kind = "NotFound"
    status_code = 404


class Forbidden(WorkflowError):
    """Actor is authenticated but not allowed to act on this entity."""

    kind = "Forbidden"
    status_code = 403


class Conflict(WorkflowError):
    """State-machine precondition violated."""

    kind = "Conflict"
    status_code = 409


class AlreadyReviewed(Conflict):
    pass


class DuplicatePending(Conflict):
    pass


class AlreadyHasRole(Conflict):
    pass


class CannotDelete(Conflict):
    pass


class RoleMismatch(Conflict):
    pass


class StaleWrite(Conflict):
    """A conditional update matched no row because the entity changed underneath."""

    pass


class NoEditorsAvailable(WorkflowError):
    kind = "NoEditorsAvailable"
    status_code = 400


class StoreUnavailable(WorkflowError):
    kind = "StoreUnavailable"
    status_code = 503


class NotifierUnavailable(WorkflowError):
    kind = "NotifierUnavailable"
    status_code = 503
