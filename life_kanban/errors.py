class KanbanError(Exception):
    """Base for errors that map onto an HTTP status and a short message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(KanbanError):
    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(KanbanError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(Unauthenticated):
    # same message for unknown email and wrong password
    default_message = "Invalid credentials"


class NotFound(KanbanError):
    status_code = 404
    default_message = "Not found"


class Conflict(KanbanError):
    status_code = 409
    default_message = "Email already in use"
