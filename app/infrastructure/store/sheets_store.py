from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable

import gspread

from app.application.exceptions import BookingNotFound
from app.application.ports.booking_store import BookingStorePort
from app.application.utils.time_normalizer import normalize_date, normalize_time
from app.domain.entities.booking import Booking, NewBooking

DEFAULT_HEADERS = [
    "ID",
    "Service Type",
    "Appointment Date",
    "Appointment Time",
    "Grooming Service",
    "Pet Name",
    "Pet Breed",
    "Pet Size",
    "Customer Name",
    "Customer Email",
    "Customer Phone",
    "Groomer",
    "Status",
    "Reference",
    "Created At",
    "Add On Services",
    "Special Requests",
]


def header_key(header: str) -> str:
    return header.strip().lower().replace("-", "_").replace(" ", "_")


def format_private_key(raw: str) -> str:
    """Turn an env-var private key (quoted, with literal \\n) into PEM text."""
    key = raw.strip().strip('"').strip("'")
    return key.replace("\\n", "\n")


class SheetsBookingStore(BookingStorePort):
    """
    Bookings kept in a Google Sheets worksheet, one row per booking.

    Reads go through a short-lived cache of the whole sheet; any write
    invalidates it. Cells are written RAW so dates stay as typed.
    """

    def __init__(
        self,
        worksheet: Any,
        cache_ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        timezone: tzinfo | None = None,
    ) -> None:
        self._worksheet = worksheet
        self._cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._timezone = timezone
        self._cache: tuple[float, list[str], list[list[str]]] | None = None
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_service_account(
        cls,
        client_email: str | None,
        private_key: str | None,
        spreadsheet_id: str | None,
        sheet_name: str = "Bookings",
        cache_ttl_seconds: float = 30.0,
        timezone: tzinfo | None = None,
    ) -> "SheetsBookingStore":
        if not client_email or not private_key or not spreadsheet_id:
            raise ValueError("Google service account email, private key and spreadsheet id are required")

        client = gspread.service_account_from_dict(
            {
                "type": "service_account",
                "client_email": client_email,
                "private_key": format_private_key(private_key),
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        )
        spreadsheet = client.open_by_key(spreadsheet_id)
        try:
            worksheet = spreadsheet.worksheet(sheet_name)
        except gspread.WorksheetNotFound:
            worksheet = spreadsheet.add_worksheet(title=sheet_name, rows=1000, cols=len(DEFAULT_HEADERS))
        return cls(worksheet, cache_ttl_seconds=cache_ttl_seconds, timezone=timezone)

    def list_bookings(
        self,
        date: str | None = None,
        status: str | None = None,
        force_refresh: bool = False,
    ) -> list[Booking]:
        headers, rows = self._read(force_refresh)
        bookings = [self._to_booking(headers, row) for row in rows if any(cell.strip() for cell in row)]
        if date:
            bookings = [b for b in bookings if b.appointment_date == date]
        if status:
            bookings = [b for b in bookings if b.status == status.lower()]
        return bookings

    def get_booking(self, booking_id: int) -> Booking | None:
        for booking in self.list_bookings(force_refresh=True):
            if booking.id == booking_id:
                return booking
        return None

    def insert_booking(self, booking: NewBooking) -> Booking:
        with self._lock:
            headers, rows = self._read_locked(force_refresh=True)
            if not headers:
                self._worksheet.append_row(DEFAULT_HEADERS, value_input_option="RAW")
                headers = [header_key(h) for h in DEFAULT_HEADERS]

            next_id = max((self._row_id(headers, row) for row in rows), default=0) + 1
            saved = booking.persisted(id=next_id, created_at=datetime.now(timezone.utc).isoformat())
            values = {
                "id": str(saved.id),
                "service_type": saved.service_type,
                "appointment_date": saved.appointment_date,
                "appointment_time": saved.appointment_time,
                "grooming_service": saved.grooming_service or "",
                "pet_name": saved.pet_name,
                "pet_breed": saved.pet_breed,
                "pet_size": saved.pet_size,
                "customer_name": saved.customer_name,
                "customer_email": saved.customer_email,
                "customer_phone": saved.customer_phone,
                "groomer": saved.groomer or "",
                "status": saved.status,
                "reference": saved.reference or "",
                "created_at": saved.created_at,
                "add_on_services": saved.add_on_services or "",
                "special_requests": saved.special_requests or "",
            }
            self._worksheet.append_row([values.get(key, "") for key in headers], value_input_option="RAW")
            self._cache = None

        self._logger.info("Booking row appended", extra={"booking_id": saved.id, "reason": "sheets"})
        return saved

    def update_booking_status(self, booking_id: int, status: str) -> Booking:
        with self._lock:
            headers, rows = self._read_locked(force_refresh=True)
            if "status" not in headers:
                raise BookingNotFound(f"Booking {booking_id} not found")
            status_col = headers.index("status") + 1

            for row_idx, row in enumerate(rows):
                if self._row_id(headers, row) != booking_id:
                    continue
                # Row 1 is the header, sheet rows are 1-based.
                self._worksheet.update_cell(row_idx + 2, status_col, status)
                self._cache = None
                padded = list(row) + [""] * (len(headers) - len(row))
                padded[status_col - 1] = status
                return self._to_booking(headers, padded)

        raise BookingNotFound(f"Booking {booking_id} not found")

    def _read(self, force_refresh: bool) -> tuple[list[str], list[list[str]]]:
        with self._lock:
            return self._read_locked(force_refresh)

    def _read_locked(self, force_refresh: bool) -> tuple[list[str], list[list[str]]]:
        now = self._clock()
        if not force_refresh and self._cache is not None:
            fetched_at, headers, rows = self._cache
            if now - fetched_at < self._cache_ttl_seconds:
                return headers, rows

        values = self._worksheet.get_all_values()
        if not values:
            headers, rows = [], []
        else:
            headers = [header_key(h) for h in values[0]]
            rows = values[1:]
        self._cache = (now, headers, rows)
        return headers, rows

    @staticmethod
    def _row_id(headers: list[str], row: list[str]) -> int:
        try:
            return int(str(row[headers.index("id")]).strip())
        except (ValueError, IndexError):
            return 0

    def _to_booking(self, headers: list[str], row: list[str]) -> Booking:
        record = {key: (row[i] if i < len(row) else "") for i, key in enumerate(headers)}
        add_ons = record.get("add_on_services") or None
        return Booking(
            id=self._row_id(headers, row),
            appointment_date=normalize_date(record.get("appointment_date", ""), self._timezone),
            appointment_time=normalize_time(record.get("appointment_time", "")),
            groomer=record.get("groomer") or None,
            service_type=(record.get("service_type") or "").strip().lower(),
            grooming_service=record.get("grooming_service") or None,
            pet_name=record.get("pet_name", ""),
            pet_breed=record.get("pet_breed", ""),
            pet_size=record.get("pet_size", ""),
            add_on_services=add_ons,
            special_requests=record.get("special_requests") or None,
            customer_name=record.get("customer_name", ""),
            customer_email=record.get("customer_email", ""),
            customer_phone=record.get("customer_phone", ""),
            status=(record.get("status") or "").strip().lower(),
            reference=record.get("reference") or None,
            created_at=record.get("created_at", ""),
        )
