from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    STORE_URL: str = "sqlite:///./seat_ledger.db"
    STORAGE_KEY: str = "poker_tables_v5"

    TABLE_COUNT: int = 4

    # IANA zone name for rendered timestamps; empty means the host's local time
    TIMEZONE: str = ""

    EXPORT_DIR: str = "./exports"

    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    def cors_list(self) -> list[str]:
        return [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]


settings = Settings()
