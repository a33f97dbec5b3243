from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, HTTPException

from app.core.config import settings
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.use_cases.booking import BookingUseCase
from app.application.use_cases.reconcile_duplicates import ReconcileDuplicatesUseCase
from app.application.use_cases.reservations import ReservationUseCase
from app.domain.entities.slot_catalog import SlotCatalog
from app.infrastructure.notifications.logging_notifier import LoggingNotifier
from app.infrastructure.reservations.reservation_ledger import ReservationLedger
from app.infrastructure.security.admin_token import verify_admin_token
from app.infrastructure.store.json_store import JsonBookingStore
from app.infrastructure.store.memory_store import MemoryBookingStore
from app.infrastructure.store.sheets_store import SheetsBookingStore
from app.infrastructure.store.supabase_store import SupabaseBookingStore


@lru_cache
def get_catalog() -> SlotCatalog:
    return SlotCatalog(
        times=tuple(settings.TIME_SLOTS),
        groomers=tuple(settings.GROOMERS),
        service_type=settings.SLOT_SERVICE_TYPE,
    )


@lru_cache
def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


@lru_cache
def get_reservation_ledger() -> ReservationLedger:
    return ReservationLedger(
        timezone=get_timezone(),
        sweep_interval_seconds=settings.RESERVATION_SWEEP_INTERVAL_SECONDS,
    )


@lru_cache
def get_booking_store() -> BookingStorePort:
    logger = logging.getLogger(__name__)
    provider = settings.STORE_PROVIDER.strip().lower()
    logger.info("Using booking store", extra={"reason": provider})

    if provider == "memory":
        return MemoryBookingStore(timezone=get_timezone())
    if provider == "json":
        return JsonBookingStore(settings.JSON_STORE_PATH, timezone=get_timezone())
    if provider == "supabase":
        return SupabaseBookingStore(
            url=settings.SUPABASE_URL,
            api_key=settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_ANON_KEY,
            table=settings.SUPABASE_BOOKINGS_TABLE,
            timezone=get_timezone(),
        )
    if provider == "sheets":
        return SheetsBookingStore.from_service_account(
            client_email=settings.GOOGLE_SERVICE_ACCOUNT_EMAIL,
            private_key=settings.GOOGLE_PRIVATE_KEY,
            spreadsheet_id=settings.GOOGLE_SPREADSHEET_ID,
            sheet_name=settings.GOOGLE_BOOKINGS_SHEET,
            cache_ttl_seconds=settings.SHEETS_CACHE_TTL_SECONDS,
            timezone=get_timezone(),
        )
    raise ValueError(f"Unknown STORE_PROVIDER: {settings.STORE_PROVIDER}")


@lru_cache
def get_notifier() -> NotifierPort:
    return LoggingNotifier(business_name=settings.BUSINESS_NAME)


def get_availability_use_case(
    store: BookingStorePort = Depends(get_booking_store),
    ledger: ReservationLedger = Depends(get_reservation_ledger),
    catalog: SlotCatalog = Depends(get_catalog),
) -> AvailabilityUseCase:
    return AvailabilityUseCase(store=store, ledger=ledger, catalog=catalog, timezone=get_timezone())


def get_reservation_use_case(
    ledger: ReservationLedger = Depends(get_reservation_ledger),
    availability: AvailabilityUseCase = Depends(get_availability_use_case),
    catalog: SlotCatalog = Depends(get_catalog),
) -> ReservationUseCase:
    return ReservationUseCase(
        ledger=ledger,
        availability=availability,
        catalog=catalog,
        browse_ttl_seconds=settings.BROWSE_HOLD_TTL_SECONDS,
        checkout_ttl_seconds=settings.RESERVE_HOLD_TTL_SECONDS,
        timezone=get_timezone(),
    )


def get_booking_use_case(
    store: BookingStorePort = Depends(get_booking_store),
    ledger: ReservationLedger = Depends(get_reservation_ledger),
    availability: AvailabilityUseCase = Depends(get_availability_use_case),
    catalog: SlotCatalog = Depends(get_catalog),
    notifier: NotifierPort = Depends(get_notifier),
) -> BookingUseCase:
    return BookingUseCase(
        store=store,
        ledger=ledger,
        availability=availability,
        catalog=catalog,
        notifier=notifier,
        timezone=get_timezone(),
        reference_prefix=settings.BOOKING_REFERENCE_PREFIX,
    )


def get_reconcile_use_case() -> ReconcileDuplicatesUseCase:
    return ReconcileDuplicatesUseCase(store=get_booking_store(), catalog=get_catalog(), timezone=get_timezone())


def require_admin(x_admin_token: str | None = Header(None, alias="X-Admin-Token")) -> None:
    if not verify_admin_token(x_admin_token, settings.ADMIN_API_TOKEN, settings.ENV):
        raise HTTPException(status_code=401, detail="Unauthorized")
