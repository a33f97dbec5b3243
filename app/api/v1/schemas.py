from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.entities.booking import Booking


class CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AvailabilitySlotSchema(CamelSchema):
    time: str
    groomer: str
    available: bool


class AvailabilityResponseSchema(CamelSchema):
    success: bool = True
    date: str
    available_time_slots: list[AvailabilitySlotSchema]
    degraded: bool = False
    error: str | None = None


class ReservationRequestSchema(CamelSchema):
    appointment_date: str | None = None
    appointment_time: str | None = None
    groomer: str | None = None
    hold_type: str = "checkout"


class ReservationResponseSchema(CamelSchema):
    success: bool = True
    reservation_id: str
    expires_in: int
    appointment_date: str
    appointment_time: str
    groomer: str


class BookingSchema(CamelSchema):
    id: int
    reference: str | None = None
    service_type: str
    grooming_service: str | None = None
    appointment_date: str
    appointment_time: str
    groomer: str | None = None
    pet_name: str
    pet_breed: str
    pet_size: str
    add_on_services: list[str] = Field(default_factory=list)
    special_requests: str | None = None
    customer_name: str
    customer_phone: str
    customer_email: str
    status: str
    created_at: str

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingSchema":
        add_ons = [s.strip() for s in (booking.add_on_services or "").split(",") if s.strip()]
        return cls(
            id=booking.id,
            reference=booking.reference,
            service_type=booking.service_type,
            grooming_service=booking.grooming_service,
            appointment_date=booking.appointment_date,
            appointment_time=booking.appointment_time,
            groomer=booking.groomer,
            pet_name=booking.pet_name,
            pet_breed=booking.pet_breed,
            pet_size=booking.pet_size,
            add_on_services=add_ons,
            special_requests=booking.special_requests,
            customer_name=booking.customer_name,
            customer_phone=booking.customer_phone,
            customer_email=booking.customer_email,
            status=booking.status,
            created_at=booking.created_at,
        )


class BookingResponseSchema(CamelSchema):
    success: bool = True
    message: str
    data: BookingSchema


class BookingListResponseSchema(CamelSchema):
    success: bool = True
    count: int
    data: list[BookingSchema]


class StatusUpdateSchema(CamelSchema):
    status: str
