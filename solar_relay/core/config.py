from __future__ import annotations

from zoneinfo import ZoneInfo

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        frozen=True,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:8000"]
    )
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    tb_base_url: AnyHttpUrl = Field(default="http://localhost:8080/api")
    tb_device_id: str = Field(min_length=1, max_length=64)
    tb_username: str = Field(min_length=1)
    tb_password: str = Field(min_length=1)
    tb_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)

    telegram_bot_token: str | None = Field(default=None)

    display_timezone: str = Field(default="UTC")
    logs_default_window_seconds: int = Field(default=5 * 60, ge=1, le=60 * 60 * 24 * 31)
    logs_default_interval_ms: int = Field(default=60 * 60 * 1000, ge=0)
    export_default_window_seconds: int = Field(
        default=24 * 60 * 60, ge=1, le=60 * 60 * 24 * 366
    )

    @field_validator("display_timezone")
    @classmethod
    def _validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except Exception as e:  # noqa: BLE001 - zoneinfo raises several types
            raise ValueError(f"Unknown timezone '{v}'") from e
        return v

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.display_timezone)

    @property
    def upstream_base_url(self) -> str:
        return str(self.tb_base_url).rstrip("/")


def load_settings() -> Settings:
    return Settings()
