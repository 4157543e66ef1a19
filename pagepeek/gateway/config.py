import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEVELOPMENT = "Development"


class Settings(BaseSettings):
    basepath: Path  # storage root; every preview identifier resolves below it

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    mode: str = "production"  # "debug" maps to the development environment

    log_dir: Path | None = None

    render_timeout_seconds: float | None = Field(default=30.0, gt=0)  # "none" disables the bound
    render_workers: int | None = Field(default=None, ge=1)  # None: executor default
    cache_max_entries: int = Field(default=0, ge=0)  # 0 disables the in-memory preview cache

    model_config = SettingsConfigDict(
        env_prefix="PREVIEW_",
        env_file=[os.getenv("ENV_FILE", ""), ".env"],
        extra="ignore",
        env_parse_none_str="none",
    )

    @field_validator("basepath")
    @classmethod
    def _absolute_basepath(cls, value: Path) -> Path:
        return value.absolute()

    @property
    def environment(self) -> str:
        return DEVELOPMENT if self.mode.lower() == "debug" else self.mode

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == DEVELOPMENT.lower()


def get_settings() -> Settings:  # ty: ignore[invalid-return-type]
    """This is only used for dependency references, see __init__.py:

    app.dependency_overrides[get_settings] = lambda: settings
    """
    ...
