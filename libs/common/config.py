from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Ho_Chi_Minh"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Supabase
    # Default placeholder values keep local/test runs from failing when Supabase
    # credentials are not required. Real deployments should override via env.
    SUPABASE_URL: str = "http://localhost"
    SUPABASE_ANON_KEY: str = "test-anon-key"
    SUPABASE_SERVICE_ROLE_KEY: str = "test-service-role-key"
    SUPABASE_JWT_SECRET: str = "test-jwt-secret"
    SUPABASE_PROJECT_ID: str = "test-project-id"
    SUPABASE_KYC_BUCKET: str = "ekyc-documents"

    # Admin allow-list (comma separated emails) + shared admin password
    ADMIN_EMAILS: str = ""
    ADMIN_PASSWORD: str = ""

    # AI assistant
    AI_API_KEY: Optional[str] = None
    AI_DEFAULT_MODEL: str = "gemini/gemini-1.5-flash"

    # Public captcha key (verification happens client side)
    RECAPTCHA_SITE_KEY: str = ""

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_CUP_LIFECYCLE: str = "10/minute"
    RATE_LIMIT_AI_CHAT: str = "20/minute"

    # Gateway
    GATEWAY_URL: str = "http://localhost:8000"
    CORS_ORIGINS: str = "http://localhost:3000"

    # Microservices URLs
    USERS_SERVICE_URL: str = "http://users-service:8001"
    WALLET_SERVICE_URL: str = "http://wallet-service:8002"
    CUPS_SERVICE_URL: str = "http://cups-service:8003"
    PARTNERS_SERVICE_URL: str = "http://partners-service:8004"
    MOBILITY_SERVICE_URL: str = "http://mobility-service:8005"
    KYC_SERVICE_URL: str = "http://kyc-service:8006"
    REWARDS_SERVICE_URL: str = "http://rewards-service:8007"
    SOCIAL_SERVICE_URL: str = "http://social-service:8008"
    AI_SERVICE_URL: str = "http://ai-service:8009"
    REPORTS_SERVICE_URL: str = "http://reports-service:8010"

    # Cup lifecycle (amounts in VND)
    DEPOSIT_AMOUNT: int = 10000
    BORROW_DISCOUNT: int = 3000
    BORROW_DURATION_HOURS: int = 24
    RETURN_TO_CLEANING: bool = True

    # Green points
    POINTS_RETURN_ON_TIME: int = 50
    POINTS_RETURN_LATE: int = 20
    POINTS_SPEED_RETURN: int = 200
    SPEED_RETURN_MINUTES: int = 60

    # Late fees
    LATE_FEE_24_48: int = 5000
    LATE_FEE_WINDOW_HOURS: int = 24

    # Streaks
    STREAK_VOUCHER_AFTER: int = 5
    STREAK_VOUCHER_DISCOUNT_PERCENT: int = 10

    # eKYC
    EKYC_AUTO_APPROVE_SCORE: int = 85
    EKYC_VALIDITY_DAYS: int = 365

    # Platform commission on fares (0.1%)
    PLATFORM_COMMISSION_RATE: float = 0.001

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def admin_email_list(self) -> list[str]:
        """Normalized admin allow-list."""
        return [
            email.strip().lower()
            for email in self.ADMIN_EMAILS.split(",")
            if email.strip()
        ]

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
