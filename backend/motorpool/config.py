from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./motorpool.db"

    # CORS
    frontend_url: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    # Identity provider
    # The upstream gateway authenticates the caller and forwards the principal
    # in these headers. The engine trusts them as-is.
    auth_user_id_header: str = "X-User-Id"
    auth_user_role_header: str = "X-User-Role"
    auth_user_email_header: str = "X-User-Email"

    # Email (Power Automate style HTTP flow)
    email_enabled: bool = False  # Safety: disabled by default
    email_flow_url: Optional[str] = None
    email_from_name: str = "Motorpool Reservations"
    email_timeout_seconds: float = 30.0

    # Reservations
    reference_number_prefix: str = "RES"
    max_passengers: int = 50
    default_page_size: int = 10
    max_page_size: int = 100

    # Flask environment
    flask_env: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        raw = str(value or "INFO").strip().upper()
        return raw or "INFO"

    @field_validator("reference_number_prefix", mode="before")
    @classmethod
    def normalize_prefix(cls, value: object) -> str:
        raw = str(value or "").strip().upper()
        return raw or "RES"


settings = Settings()
