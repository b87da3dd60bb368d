"""Error kinds raised by the scheduling core.

Every error is scoped to a single request and is never retried. Routes turn
them into ``HTTPException`` responses carrying a machine-readable ``error`` kind
and a human-readable ``message``.
"""

from fastapi import HTTPException, status


class BookingError(Exception):
    kind = 'booking_error'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {'error': self.kind, 'message': self.message}


class InvalidRequestError(BookingError):
    """Missing or malformed request fields."""
    kind = 'validation_error'
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BookingError):
    kind = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND


class InvalidDateError(BookingError):
    kind = 'invalid_date'
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(BookingError):
    kind = 'conflict'
    status_code = status.HTTP_409_CONFLICT


class InvalidOperationError(BookingError):
    """Illegal appointment status transition."""
    kind = 'invalid_operation'
    status_code = status.HTTP_400_BAD_REQUEST


def to_http_exception(exc: BookingError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail='Database unavailable. Verify DATABASE_URL and database credentials.',
    )
