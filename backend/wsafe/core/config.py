"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from wsafe.core.sos_policies import LOCATION_TIMEOUT_SECONDS


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WSAFE_",
        case_sensitive=False,
    )

    app_name: str = "wsafe"
    debug: bool = False
    database_url: str = "sqlite:///./wsafe.db"

    # Outbound messages
    map_service_url: str = "https://maps.google.com/"
    app_signature: str = "W-Safe Pro"

    # Bounded wait for a location fix
    location_timeout_seconds: float = LOCATION_TIMEOUT_SECONDS

    # Shared secret the phone presents on /ws; empty disables the check
    device_token: str = ""

    # Speech recognition locale pushed to the device when listening starts
    speech_locale: str = "en-US"

    # Optional HTTP SMS gateway used for silent delivery
    sms_gateway_url: str = ""
    sms_gateway_token: str = ""
    sms_gateway_timeout_seconds: float = 10.0


settings = Settings()
