from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    oura_access_token: str = ""
    oura_base_url: str = "https://api.ouraring.com"
    notion_token: str = ""
    notion_database_id: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    normal_wake_up_calendar_id: str = ""
    sleep_in_calendar_id: str = ""
    table_backend: str = "notion"  # "notion" or "sqlite"
    database_url: str = "sqlite:///./sleepsync.db"
    night_cutoff_hour: int = 6  # bedtimes before this hour belong to the previous night
    wake_threshold_hour: int = 7  # wake-ups before this hour are "Normal Wake Up"
    timezone: Optional[str] = None  # IANA name; None = use the tracker's own offset
    timezone_label: str = "ET"
    http_timeout_seconds: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
