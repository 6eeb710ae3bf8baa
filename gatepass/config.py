from decimal import Decimal
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./gatepass.db"
    DB_ECHO: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ADMIN_USERNAME: str
    ADMIN_PASSWORD_HASH: str
    ADMIN_TOKEN_EXPIRE_HOURS: int = 2
    REQUIRE_TICKET_TOKEN: bool = False

    # Payment gateway
    RAZORPAY_KEY_ID: str
    RAZORPAY_KEY_SECRET: str
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"
    CURRENCY: str = "INR"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0

    # Booking
    SERIAL_ALLOCATION_ATTEMPTS: int = 3
    DEFAULT_DAY_PASS_PRICE: Decimal = Decimal("199")
    DEFAULT_SEASON_PASS_PRICE: Decimal = Decimal("699")
    SINGLE_USE_TICKETS: bool = False
    EVENT_NAME: str = "Avesham Season 2"

    # Mail
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = "tickets@example.com"

    # Application
    PROJECT_NAME: str = "Gatepass Ticketing"
    API_PREFIX: str = "/api"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
