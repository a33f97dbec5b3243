from __future__ import annotations

from fastapi.responses import JSONResponse

from app.application.exceptions import (
    BookingError,
    BookingNotFound,
    DuplicateSlotError,
    ReservationNotFound,
    SlotUnavailable,
    StoreError,
    ValidationError,
)

# Checked in order; DuplicateSlotError must precede its StoreError parent.
STATUS_BY_ERROR: list[tuple[type[BookingError], int]] = [
    (ValidationError, 400),
    (SlotUnavailable, 409),
    (DuplicateSlotError, 409),
    (StoreError, 503),
    (ReservationNotFound, 404),
    (BookingNotFound, 404),
]


def error_response(error: BookingError) -> JSONResponse:
    status_code = next((code for cls, code in STATUS_BY_ERROR if isinstance(error, cls)), 500)
    content: dict[str, object] = {
        "success": False,
        "errorCode": error.error_code,
        "message": error.message,
    }
    if isinstance(error, ValidationError) and error.errors:
        content["errors"] = error.errors
    return JSONResponse(status_code=status_code, content=content)
