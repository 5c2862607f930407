from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "SkedEat Booking API"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "12345"
    POSTGRES_DB: str = "skedeat_db"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""

    # Commission webhook
    WEBHOOK_URL_PREFIX: str = "http://localhost:8081"
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0

    # Outgoing mail. An empty SMTP_HOST means notifications are only logged.
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    MAIL_FROM: str = "no-reply@skedeat.local"

    # Background jobs
    SCHEDULER_ENABLED: bool = True
    PROMOTION_JOB_INTERVAL_SECONDS: float = 10.0
    BILLING_JOB_INTERVAL_SECONDS: float = 60.0

    # Booking policy
    VOUCHER_REQUIRES_FOOD: bool = True
    COMMISSION_RATE: Decimal = Decimal("0.10")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    def assemble_db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

settings = Settings()
settings.DATABASE_URL = settings.assemble_db_url()
