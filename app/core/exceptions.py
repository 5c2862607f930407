from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """A referenced entity id (or natural key) does not resolve."""

    def __init__(self, resource: str, field: str, value):
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found with {field}: {value}",
        )


class ValidationConflictError(HTTPException):
    """A business rule was violated. Never retried automatically."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.message = message
        super().__init__(status_code=status_code, detail=message)


class BookingStateError(ValidationConflictError):
    """Requested status transition is not legal from the booking's current status."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class AuthorizationDeniedError(HTTPException):
    def __init__(self, message: str = "You are not allowed to manage this location"):
        self.message = message
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=message)
