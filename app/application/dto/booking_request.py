from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BookingRequestDTO(BaseModel):
    """
    Incoming booking form. Fields are lenient here; BookingUseCase owns
    the semantic validation so every entry point reports the same errors.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    service_type: str | None = "grooming"
    grooming_service: str | None = None

    appointment_date: str | None = None
    appointment_time: str | None = None
    groomer: str | None = None

    pet_name: str | None = None
    pet_breed: str | None = None
    pet_size: str | None = None
    add_on_services: list[str] = Field(default_factory=list)
    special_requests: str | None = None

    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None

    reservation_id: str | None = None
