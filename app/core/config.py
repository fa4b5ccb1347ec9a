from dataclasses import dataclass, field
from decimal import Decimal
import os


def _as_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    store_backend: str = os.getenv("STORE_BACKEND", "postgres").strip().lower()
    db_host: str = os.getenv("DB_HOST", "")
    db_port: int = int(os.getenv("DB_PORT", "5432"))
    db_name: str = os.getenv("DB_NAME", "")
    db_user: str = os.getenv("DB_USER", "")
    db_password: str = os.getenv("DB_PASSWORD", "")
    db_timeout: float = float(os.getenv("DB_TIMEOUT", "10"))
    db_connect_retries: int = int(os.getenv("DB_CONNECT_RETRIES", "3"))
    db_retry_backoff: float = float(os.getenv("DB_RETRY_BACKOFF", "0.2"))
    auto_migrate: bool = _as_bool(os.getenv("AUTO_MIGRATE", "false"))
    pool_size: int = int(os.getenv("POOL_SIZE", "400"))
    ticket_price: Decimal = Decimal(os.getenv("TICKET_PRICE", "20"))
    purchase_password: str = os.getenv("PURCHASE_PASSWORD", "rifa2024")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "rifa2024")
    cors_allow_origins: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*"))
    )
    cors_allow_methods: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_METHODS", "GET,POST"))
    )
    cors_allow_headers: list[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CORS_ALLOW_HEADERS", "*"))
    )
    expose_errors: bool = _as_bool(os.getenv("EXPOSE_ERRORS", "true"))


settings = Settings()


def db_configured() -> bool:
    return all([settings.db_host, settings.db_name, settings.db_user, settings.db_password])
