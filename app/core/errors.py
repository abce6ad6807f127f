"""Error kinds raised by the record stores and rendered by the API."""


class AppError(Exception):
    code = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    code = "validation_error"
    status_code = 400


class InvalidDateError(AppError):
    code = "invalid_date"
    status_code = 400


class InvalidTimeError(AppError):
    code = "invalid_time"
    status_code = 400


class DuplicateSlugError(AppError):
    code = "duplicate_slug"
    status_code = 400


class DuplicateBookingError(AppError):
    code = "duplicate_booking"
    status_code = 409


class EventNotFoundError(AppError):
    code = "event_not_found"
    status_code = 404


class ConnectionError(AppError):
    """Raised when the record store cannot be reached."""

    code = "connection_error"
    status_code = 500
