from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from typing import Any, ClassVar
from decimal import Decimal
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # JWT verification for the external identity layer (fallback for local development)
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'berry_events.db'}"

    # CORS origins
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    CORS_ALLOW_ALL: bool = False

    # Optional cookie domain to scope the cart cookie across subdomains.
    COOKIE_DOMAIN: str = ""
    COOKIE_SECURE: bool = False

    # Guest carts are keyed by an opaque token stored in this cookie.
    CART_SESSION_COOKIE: str = "cartSession"
    CART_SESSION_TTL_DAYS: int = 14
    CART_MAX_ITEMS: int = 3

    # Commission charged on the pre-tip subtotal
    PLATFORM_FEE_RATE: Decimal = Decimal("0.15")

    # Default currency code used across the application
    DEFAULT_CURRENCY: str = "ZAR"

    # 32-byte AES key for gate codes: 64 hex chars or urlsafe base64.
    # Empty means a development key derived from SECRET_KEY.
    GATE_CODE_KEY: str = ""

    # Optional override for the bundled service catalog JSON
    SERVICE_CATALOG_PATH: str = ""

    LOG_LEVEL: str = "INFO"
    ENABLE_TRACING: bool = False

    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")),
        case_sensitive=True,
    )

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("GATE_CODE_KEY", "COOKIE_DOMAIN", "SERVICE_CATALOG_PATH", mode="before")
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("CART_MAX_ITEMS", "CART_SESSION_TTL_DAYS")
    def positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @model_validator(mode="after")
    def allow_all_if_requested(self) -> "Settings":
        if self.CORS_ALLOW_ALL:
            self.CORS_ORIGINS = ["*"]
        return self


def load_settings() -> "Settings":
    return Settings(_env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")))


settings = load_settings()

COOKIE_DOMAIN = settings.COOKIE_DOMAIN
