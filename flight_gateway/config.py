# flight_gateway/config.py
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION_HOST = "https://api.amadeus.com"
TEST_HOST = "https://test.api.amadeus.com"


class Settings(BaseSettings):
    # App
    APP_ENV: Literal["dev", "prod", "staging"] = "dev"
    TZ: str = "UTC"

    # Amadeus
    AMADEUS_CLIENT_ID: str = ""
    AMADEUS_CLIENT_SECRET: str = ""
    AMADEUS_ENV: str = "sandbox"  # or "production"
    AMADEUS_BASE_URL: Optional[str] = None  # overrides the env-derived host
    AMADEUS_CLIENT_REF: str = "FLIGHT GATEWAY-PDT"

    # Outbound HTTP
    HTTP_CONNECT_TIMEOUT: float = 3.0
    HTTP_READ_TIMEOUT: float = 45.0

    # Audit side-channel (request/response dumps)
    AUDIT_LOG_ENABLED: bool = False
    AUDIT_LOG_DIR: str = "logs/amadeus-requests"

    # read .env and ignore any extra keys
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.AMADEUS_ENV.lower() == "production"

    @property
    def amadeus_base_url(self) -> str:
        if self.AMADEUS_BASE_URL:
            return self.AMADEUS_BASE_URL.rstrip("/")
        return PRODUCTION_HOST if self.is_production else TEST_HOST


settings = Settings()
