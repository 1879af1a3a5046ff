class TaskTrackerError(Exception):
    """Base error: carries the HTTP status and a client-safe detail."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail=None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(TaskTrackerError):
    status_code = 400
    detail = "Invalid input"


class AuthFailure(TaskTrackerError):
    # one message for unknown email and wrong password
    status_code = 400
    detail = "Invalid credentials"


class Unauthenticated(TaskTrackerError):
    status_code = 401
    detail = "Not authenticated"


class NotFound(TaskTrackerError):
    status_code = 404
    detail = "Task not found"


class HashingError(TaskTrackerError):
    status_code = 500


class PersistenceError(TaskTrackerError):
    """Raised inside the store only; never surfaced to clients."""
