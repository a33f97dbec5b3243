import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from app.api.v1.errors import error_response
from app.api.v1.schemas import (
    BookingListResponseSchema,
    BookingResponseSchema,
    BookingSchema,
    StatusUpdateSchema,
)
from app.application.dto.booking_request import BookingRequestDTO
from app.application.exceptions import BookingError
from app.application.use_cases.booking import BookingUseCase
from app.wiring.dependencies import get_booking_use_case, require_admin

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/bookings", response_model=BookingResponseSchema, status_code=201)
def create_booking(
    req: BookingRequestDTO,
    background_tasks: BackgroundTasks,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        booking = uc.create_booking(req)
    except BookingError as e:
        return error_response(e)

    background_tasks.add_task(uc.notify_booking_confirmed, booking)
    return BookingResponseSchema(
        message="Grooming appointment booked successfully!",
        data=BookingSchema.from_entity(booking),
    )


@router.get(
    "/bookings",
    response_model=BookingListResponseSchema,
    dependencies=[Depends(require_admin)],
)
def list_bookings(
    date: str | None = Query(None),
    status: str | None = Query(None),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        bookings = uc.list_bookings(date=date, status=status)
    except BookingError as e:
        return error_response(e)
    return BookingListResponseSchema(
        count=len(bookings),
        data=[BookingSchema.from_entity(b) for b in bookings],
    )


@router.get(
    "/bookings/{booking_id}",
    response_model=BookingResponseSchema,
    dependencies=[Depends(require_admin)],
)
def get_booking(
    booking_id: int,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        booking = uc.get_booking(booking_id)
    except BookingError as e:
        return error_response(e)
    return BookingResponseSchema(message="Booking found", data=BookingSchema.from_entity(booking))


@router.put(
    "/bookings/{booking_id}/status",
    response_model=BookingResponseSchema,
    dependencies=[Depends(require_admin)],
)
def update_booking_status(
    booking_id: int,
    req: StatusUpdateSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        booking = uc.update_booking_status(booking_id, req.status)
    except BookingError as e:
        return error_response(e)
    logger.info("Status updated via admin API", extra={"booking_id": booking.id, "status": booking.status})
    return BookingResponseSchema(message="Booking status updated", data=BookingSchema.from_entity(booking))
