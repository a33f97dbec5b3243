from fastapi import APIRouter, Depends, Response

from app.api.v1.errors import error_response
from app.api.v1.schemas import ReservationRequestSchema, ReservationResponseSchema
from app.application.exceptions import BookingError
from app.application.use_cases.reservations import ReservationUseCase, ReservationView
from app.wiring.dependencies import get_reservation_use_case

router = APIRouter()


def _to_schema(view: ReservationView) -> ReservationResponseSchema:
    return ReservationResponseSchema(
        reservation_id=view.hold.id,
        expires_in=view.expires_in,
        appointment_date=view.hold.slot.date,
        appointment_time=view.hold.slot.time,
        groomer=view.hold.slot.groomer,
    )


@router.post("/reservations", response_model=ReservationResponseSchema, status_code=201)
def create_reservation(
    req: ReservationRequestSchema,
    uc: ReservationUseCase = Depends(get_reservation_use_case),
):
    try:
        view = uc.reserve(
            appointment_date=req.appointment_date,
            appointment_time=req.appointment_time,
            groomer=req.groomer,
            hold_type=req.hold_type,
        )
    except BookingError as e:
        return error_response(e)
    return _to_schema(view)


@router.get("/reservations/{reservation_id}", response_model=ReservationResponseSchema)
def get_reservation(
    reservation_id: str,
    uc: ReservationUseCase = Depends(get_reservation_use_case),
):
    try:
        view = uc.get(reservation_id)
    except BookingError as e:
        return error_response(e)
    return _to_schema(view)


@router.delete("/reservations/{reservation_id}", status_code=204)
def cancel_reservation(
    reservation_id: str,
    uc: ReservationUseCase = Depends(get_reservation_use_case),
):
    try:
        uc.cancel(reservation_id)
    except BookingError as e:
        return error_response(e)
    return Response(status_code=204)
