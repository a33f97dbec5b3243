from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    BUSINESS_NAME: str = "Novo Pets"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    TIME_SLOTS: list[str] = [
        "09:00",
        "10:00",
        "11:00",
        "12:00",
        "13:00",
        "14:00",
        "15:00",
        "16:00",
        "17:00",
    ]
    GROOMERS: list[str] = ["Groomer 1", "Groomer 2"]
    SLOT_SERVICE_TYPE: str = "grooming"

    BROWSE_HOLD_TTL_SECONDS: int = 300
    RESERVE_HOLD_TTL_SECONDS: int = 600
    RESERVATION_SWEEP_INTERVAL_SECONDS: int = 60

    STORE_PROVIDER: str = "memory"
    JSON_STORE_PATH: str = "./data/bookings.json"

    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_BOOKINGS_TABLE: str = "grooming_appointments"

    GOOGLE_SERVICE_ACCOUNT_EMAIL: str | None = None
    GOOGLE_PRIVATE_KEY: str | None = None
    GOOGLE_SPREADSHEET_ID: str | None = None
    GOOGLE_BOOKINGS_SHEET: str = "Bookings"
    SHEETS_CACHE_TTL_SECONDS: float = 30.0

    ADMIN_API_TOKEN: str | None = None
    BOOKING_REFERENCE_PREFIX: str = "NVP"


settings = Settings()
