from fastapi import APIRouter, Depends, Query

from app.api.v1.errors import error_response
from app.api.v1.schemas import AvailabilityResponseSchema, AvailabilitySlotSchema
from app.application.exceptions import ValidationError
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.utils.time_normalizer import ISO_DATE_RE, normalize_date
from app.wiring.dependencies import get_availability_use_case, get_timezone

router = APIRouter()


@router.get("/availability", response_model=AvailabilityResponseSchema)
def get_availability(
    date: str | None = Query(None),
    force_refresh: bool = Query(False, alias="forceRefresh"),
    uc: AvailabilityUseCase = Depends(get_availability_use_case),
):
    normalized = normalize_date(date or "", get_timezone())
    if not ISO_DATE_RE.match(normalized):
        return error_response(ValidationError("Date is required", {"date": "Use YYYY-MM-DD"}))

    result = uc.get_availability(normalized, force_refresh=force_refresh)
    return AvailabilityResponseSchema(
        date=result.date,
        available_time_slots=[
            AvailabilitySlotSchema(time=s.slot.time, groomer=s.slot.groomer, available=s.available)
            for s in result.slots
        ],
        degraded=result.degraded,
        error=result.error,
    )
