from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Env
    env: str = "development"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Booking rules
    # Gap required after every booking on the same calendar, applied to the trailing edge only.
    buffer_minutes: int = 10
    # Optional JSON file replacing the built-in procedure/calendar tables
    catalog_file: str = ""

    # Calendar backend: "google" or "memory"
    calendar_backend: str = "memory"

    # Google Calendar (OAuth2 refresh-token flow)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_calendar_api_base: str = "https://www.googleapis.com/calendar/v3"
    google_timeout_seconds: float = 10.0

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret and self.google_refresh_token)


settings = Settings()
