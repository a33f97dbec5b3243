class BookingError(RuntimeError):
    """Base class for errors surfaced by the booking core."""

    error_code = "BOOKING_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Raised when request fields are missing or malformed."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = dict(errors or {})


class SlotUnavailable(BookingError):
    """Raised when the target slot is occupied or the hold on it lapsed."""

    error_code = "SLOT_UNAVAILABLE"


class StoreError(BookingError):
    """Raised when the durable booking store fails."""

    error_code = "STORE_ERROR"


class DuplicateSlotError(StoreError):
    """Raised by a store whose uniqueness constraint rejected an occupied slot."""

    error_code = "DUPLICATE_SLOT"


class ReservationNotFound(BookingError):
    """Raised when a hold id is unknown or already expired."""

    error_code = "RESERVATION_NOT_FOUND"


class BookingNotFound(BookingError):
    """Raised when a booking id does not exist in the store."""

    error_code = "BOOKING_NOT_FOUND"
