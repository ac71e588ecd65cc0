"""Typed rejections raised by the booking core.

Every rejection carries a stable machine code, a human readable message and the
HTTP status the API layer should answer with.
"""

ERROR_STATUS = {
    "VALIDATION_ERROR": 400,
    "PAST_DATE": 400,
    "BEYOND_BOOKING_WINDOW": 400,
    "CUTOFF_VIOLATION": 400,
    "INVALID_SEARCH_PARAMS": 400,
    "NOT_FOUND": 404,
    "BOOKING_NOT_FOUND": 404,
    "SLOT_FULL": 409,
    "ALREADY_CANCELLED": 409,
    "ALREADY_COMPLETED": 409,
    "CANNOT_CANCEL_COMPLETED": 409,
    "CANNOT_COMPLETE_CANCELLED": 409,
    "INVALID_STATUS": 409,
    "BOOKING_CONFLICT": 409,
    "OVERRIDE_CONFLICT": 409,
    "INTERNAL_ERROR": 500,
}


class BookingError(Exception):
    def __init__(self, code: str, message: str, status: int = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status or ERROR_STATUS.get(code, 400)

    def to_dict(self):
        return {"error": self.message, "code": self.code}


def validation_error(message: str) -> BookingError:
    return BookingError("VALIDATION_ERROR", message)


def booking_not_found() -> BookingError:
    return BookingError("BOOKING_NOT_FOUND", "Booking not found")
