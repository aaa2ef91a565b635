from pydantic_settings import BaseSettings

from app.core.currency import Currency


class Settings(BaseSettings):
    database_url: str = ""
    environment: str = "dev"
    # Billing settings
    default_currency: Currency = Currency.INR  # Currency for schools registered without one
    school_code_max_attempts: int = 10  # Retries before giving up on a unique school code
    invoice_sequence_width: int = 4  # Zero-padding for INV-{school_code}-{sequence}
    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]
    cors_expose_headers: list[str] = []


class LoggingSettings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" or "json"
    ENV: str = "dev"  # dev | staging | prod

    class Config:
        env_prefix = "APP_"


logging_settings = LoggingSettings()

settings = Settings()  # type: ignore
