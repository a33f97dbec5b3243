from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any

import httpx

from app.application.exceptions import BookingNotFound, DuplicateSlotError
from app.application.ports.booking_store import BookingStorePort
from app.application.utils.time_normalizer import normalize_date, normalize_time
from app.domain.entities.booking import Booking, NewBooking, ServiceType

UNIQUE_VIOLATION = "23505"


class SupabaseBookingStore(BookingStorePort):
    """
    Grooming appointments table behind Supabase's PostgREST API.

    Dates are plain `date` strings and travel unchanged in both directions;
    times are stored as HH:MM:00 and normalized back to HH:MM on read.
    """

    def __init__(
        self,
        url: str | None,
        api_key: str | None,
        table: str = "grooming_appointments",
        client: httpx.Client | None = None,
        timezone: tzinfo | None = None,
    ) -> None:
        if not url or not api_key:
            raise ValueError("SUPABASE_URL and a Supabase API key are required for the Supabase store")
        self._base_url = f"{url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.Client(timeout=10.0)
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def list_bookings(
        self,
        date: str | None = None,
        status: str | None = None,
        force_refresh: bool = False,
    ) -> list[Booking]:
        params = {"select": "*", "order": "id.asc"}
        if date:
            params["appointment_date"] = f"eq.{date}"
        if status:
            params["status"] = f"eq.{status}"

        response = self._client.get(self._base_url, params=params, headers=self._headers)
        self._raise_for_status(response, "list")
        return [self._to_booking(row) for row in response.json()]

    def get_booking(self, booking_id: int) -> Booking | None:
        params = {"select": "*", "id": f"eq.{booking_id}"}
        response = self._client.get(self._base_url, params=params, headers=self._headers)
        self._raise_for_status(response, "get")
        rows = response.json()
        return self._to_booking(rows[0]) if rows else None

    def insert_booking(self, booking: NewBooking) -> Booking:
        payload = {
            "appointment_date": booking.appointment_date,
            "appointment_time": f"{booking.appointment_time}:00",
            "groomer": booking.groomer,
            "grooming_service": booking.grooming_service,
            "pet_name": booking.pet_name,
            "pet_breed": booking.pet_breed,
            "pet_size": booking.pet_size,
            "add_on_services": booking.add_on_services,
            "special_requests": booking.special_requests,
            "customer_name": booking.customer_name,
            "customer_phone": booking.customer_phone,
            "customer_email": booking.customer_email,
            "status": booking.status,
            "reference": booking.reference,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        headers = {**self._headers, "Prefer": "return=representation"}
        response = self._client.post(self._base_url, json=payload, headers=headers)
        self._raise_for_status(response, "insert")

        rows = response.json()
        if not rows:
            raise ValueError("No row returned from Supabase insert")
        return self._to_booking(rows[0])

    def update_booking_status(self, booking_id: int, status: str) -> Booking:
        headers = {**self._headers, "Prefer": "return=representation"}
        response = self._client.patch(
            self._base_url,
            params={"id": f"eq.{booking_id}"},
            json={"status": status},
            headers=headers,
        )
        self._raise_for_status(response, "update")

        rows = response.json()
        if not rows:
            raise BookingNotFound(f"Booking {booking_id} not found")
        return self._to_booking(rows[0])

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        if response.status_code < 400:
            return

        try:
            error_json = response.json()
            error_code = error_json.get("code")
            error_message = error_json.get("message")
        except Exception:
            error_code = None
            error_message = response.text

        self._logger.error(
            "Supabase request failed",
            extra={"status": response.status_code, "reason": operation, "error": f"{error_code}: {error_message}"},
        )
        if response.status_code == 409 or error_code == UNIQUE_VIOLATION:
            raise DuplicateSlotError(error_message or "Slot already booked")
        response.raise_for_status()

    def _to_booking(self, row: dict[str, Any]) -> Booking:
        return Booking(
            id=int(row["id"]),
            appointment_date=normalize_date(row.get("appointment_date") or "", self._timezone),
            appointment_time=normalize_time(row.get("appointment_time") or ""),
            groomer=row.get("groomer"),
            service_type=ServiceType.GROOMING.value,
            grooming_service=row.get("grooming_service"),
            pet_name=row.get("pet_name") or "",
            pet_breed=row.get("pet_breed") or "",
            pet_size=row.get("pet_size") or "",
            add_on_services=row.get("add_on_services"),
            special_requests=row.get("special_requests"),
            customer_name=row.get("customer_name") or "",
            customer_email=row.get("customer_email") or "",
            customer_phone=row.get("customer_phone") or "",
            status=(row.get("status") or "").lower(),
            reference=row.get("reference"),
            created_at=row.get("created_at") or "",
        )
