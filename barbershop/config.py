# barbershop/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./barbershop.db"

    SECRET_KEY: str = "change-me-later"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CLIENT_URL: str = "http://localhost:5173"

    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    EMAIL_FROM: str = "Barber Salon <noreply@barbersalon.local>"

    MAX_SLOT_GENERATION_DAYS: int = 30
    AUTO_GENERATE_SLOT_DAYS: int = 7
    AUTO_GENERATE_SLOTS_ON_STARTUP: bool = False

    CANCELLATION_CUTOFF_HOURS: int = 2
    RESET_TOKEN_EXPIRE_MINUTES: int = 30
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = 24


settings = Settings()
