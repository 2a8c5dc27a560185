"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "dinewave API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./dinewave.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "60"))
    google_maps_api_key: str = getenv("GOOGLE_MAPS_API_KEY", "")
    geocoding_base_url: str = getenv("GEOCODING_BASE_URL", "https://maps.googleapis.com/maps/api")
    geocoding_timeout_seconds: float = float(getenv("GEOCODING_TIMEOUT_SECONDS", "5"))
    default_country: str = getenv("DEFAULT_COUNTRY", "USA")
    message_default_radius_km: int = int(getenv("MESSAGE_DEFAULT_RADIUS_KM", "10"))


settings: Settings = Settings()
