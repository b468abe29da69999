class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ParseError(AppError):
    """Raised when a clock time string is not HH:MM."""
    def __init__(self, value: object):
        super().__init__(f"Invalid clock time {value!r}, expected HH:MM", status_code=400, details={"value": str(value)})


class PreconditionError(AppError):
    """Raised when a drop cannot be attempted until the user fixes the selection."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class ResolutionError(AppError):
    """Raised when an entry involved in a placement no longer exists."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class PersistenceError(AppError):
    """Raised when a call against the schedule store fails."""
    def __init__(self, message: str, op=None, details: dict = None):
        super().__init__(message, status_code=502, details=details)
        self.op = op


class EditSessionStateError(AppError):
    """Raised when an edit session operation is invalid in the current mode."""
    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
