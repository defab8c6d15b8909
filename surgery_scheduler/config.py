import sys
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_data_dir() -> Path:
    """Per-user data folder; never inside the installed package."""
    if sys.platform == "win32" or sys.platform == "darwin":
        return Path.home() / "Documents" / "AmeliyatListesi"
    return Path.home() / ".local" / "share" / "ameliyat-listesi"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SURGERY_", env_file=".env", extra="ignore")

    app_name: str = "Ameliyat Listesi"
    clinic_name: str = "EGE ÜROLOJİ"
    log_level: str = "INFO"

    data_dir: Path = Field(default_factory=default_data_dir)
    database_url: str = ""       # empty: caselist.db in data_dir
    room_store_path: str = ""    # empty: kv_entries table in the case database

    cors_origins: str = "*"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def db_url(self) -> str:
        return self.database_url or f"sqlite:///{self.data_dir / 'caselist.db'}"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
