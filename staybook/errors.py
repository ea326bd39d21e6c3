"""Domain errors raised by the booking services.

Each error carries the HTTP status it maps to; the API layer converts them in
``staybook.api.exceptions``. Services never raise ``HTTPException`` directly.
"""

from typing import Any

from starlette import status


class BookingError(Exception):
    """Base class for every expected, caller-facing failure."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message}


class ValidationError(BookingError):
    """Malformed or unacceptable input: bad dates, too many guests, unbookable property."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(BookingError):
    """The requested dates are not available."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "dates unavailable") -> None:
        super().__init__(message)


class InvalidTransitionError(BookingError):
    """The action is not legal from the booking's current status."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, action: str, current_status: Any) -> None:
        current = getattr(current_status, "value", current_status)
        super().__init__(f"Cannot {action} booking with status {current}")
        self.action = action
        self.current_status = current

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "action": self.action, "current_status": self.current_status}


class NotPermittedError(BookingError):
    """The caller is not the guest or host this action requires."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "not permitted") -> None:
        super().__init__(message)


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
