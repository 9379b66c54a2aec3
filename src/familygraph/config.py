"""Configuration loaded from FAMILYGRAPH_* environment variables (or a .env file)."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DB_ENV = "FAMILYGRAPH_DB"


class Settings(BaseSettings):
    """Defaults for CLI options; explicit options always win."""

    model_config = SettingsConfigDict(
        env_prefix="FAMILYGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: Path = Field(Path("./family_tree.db"), validation_alias=DB_ENV)
    orientation: Literal["vertical", "horizontal"] = "vertical"

    @field_validator("orientation", mode="before")
    @classmethod
    def _normalize_orientation(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


def get_settings() -> Settings:
    """Read settings from the environment, falling back to defaults.

    Raises:
        pydantic.ValidationError: a variable holds an invalid value
    """
    return Settings()
