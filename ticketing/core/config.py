from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Festival Ticketing API"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Exchanged for an admin/staff bearer token at POST /admin/auth/token
    ADMIN_SECRET_KEY: str = "change-this-admin-secret"

    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "12345"
    POSTGRES_DB: str = "ticketing_db"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""

    # Booking engine
    RESERVATION_TTL_MINUTES: int = 15
    EXPIRY_SWEEP_INTERVAL_SECONDS: int = 60
    # "preserve_sold" keeps sold tickets sold when an admin edits a total;
    # "reset" makes available equal to the new total.
    INVENTORY_TOTAL_MODE: str = "preserve_sold"

    # Storefront
    EVENT_NAME: str = "Rangotsav"
    CURRENCY: str = "INR"
    PAYMENT_REDIRECT_URL: str = "http://localhost:3000/booking?payment_success=true"

    # Ticket e-mail; leave SMTP_HOST empty to only log outgoing tickets
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "tickets@example.com"

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
