from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SHORTLIST_SIZE = 3


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    COMPANY_NAME: str = "American Developer Group"
    BOOKING_SUBJECT: str = "Home visit: 3D scan & estimate"

    BUSINESS_TIMEZONE: str = "America/New_York"
    SLOT_MINUTES: int = 60
    WORK_START: str = "09:00"
    WORK_END: str = "18:00"
    MIN_BUFFER_MINUTES: int = 120
    SEARCH_HORIZON_DAYS: int = 10

    GOOGLE_CLIENT_EMAIL: str | None = None
    GOOGLE_PRIVATE_KEY: str | None = None
    GOOGLE_IMPERSONATE_USER: str | None = None
    CALENDAR_ID: str | None = None
    GOOGLE_CALENDAR_BASE_URL: str = "https://www.googleapis.com/calendar/v3"
    CALENDAR_TIMEOUT_SECONDS: float = 10.0

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    SLOW_CALL_THRESHOLD_MS: int = 2000

    @field_validator("GOOGLE_PRIVATE_KEY")
    @classmethod
    def _unescape_private_key(cls, value: str | None) -> str | None:
        # Keys pasted into .env files carry literal "\n" sequences.
        if value is None:
            return None
        return value.replace("\\n", "\n")


settings = Settings()
