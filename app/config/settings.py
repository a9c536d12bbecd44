"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "postgresql+asyncpg://localhost/invest"
    database_echo: bool = False

    # Redis (for distributed locks and Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/invest.log"
    health_check_port: int = Field(
        default=8081, ge=1, le=65535, description="Health check HTTP server port"
    )

    # Accrual scheduler
    accrual_interval_hours: int = Field(
        default=6, ge=1, le=24,
        description="Interval between investment accrual passes (hours)"
    )
    accrual_run_on_startup: bool = Field(
        default=True,
        description="Run one accrual pass immediately when the scheduler starts"
    )
    emergency_stop_accrual: bool = Field(
        default=False,
        description="Emergency stop for all investment accrual passes"
    )

    # Money movement policy
    withdrawal_fee_percent: Decimal = Field(
        default=Decimal("2"), ge=0, lt=100,
        description="Withdrawal fee as a percentage of the gross amount"
    )
    investment_auto_activate: bool = Field(
        default=False,
        description="Create investments as active instead of pending admin approval"
    )

    # Notifications (email delivery through the task queue)
    notifications_enabled: bool = True
    smtp_host: str | None = None
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_sender: str = "no-reply@minecrusttrading.com"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        if v.startswith('postgresql://'):
            # Async engine requires the asyncpg driver
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f'Invalid LOG_LEVEL: {v}')
        return level

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if self.database_url.startswith('sqlite'):
                logger.warning(
                    'DATABASE_URL points to SQLite in production. '
                    'Row locks are not enforced on SQLite.'
                )

        if self.notifications_enabled and not self.smtp_host:
            logger.debug(
                'SMTP_HOST is not set, email notifications will only be logged'
            )

        return self


# Global settings instance
settings = Settings()
