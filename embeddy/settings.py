"""
File: embeddy/settings.py
Path: embeddy/settings.py
Global configuration loaded via environment variables (prefix ``EMBEDDY_``).
Use a `.env` file or export vars before running.

Why? Centralises all tunables (paths, server, device) in one place.
"""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "embeddy"


class Settings(BaseSettings):
    # STORAGE
    data_dir: Path = DEFAULT_DATA_DIR
    models_dir: Path | None = None  # defaults to <data_dir>/models
    registry_url: str | None = None  # defaults to sqlite:///<data_dir>/models.db
    # RUNTIME
    app_host: str = "0.0.0.0"
    app_port: int = 8080
    device: str = "cpu"
    log_level: str = Field(
        "INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"
    )
    # MODEL DIRECTORY LAYOUT
    config_file: str = "config.json"
    tokenizer_file: str = "tokenizer.json"

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _derive_paths(self) -> "Settings":
        if self.models_dir is None:
            self.models_dir = self.data_dir / "models"
        if self.registry_url is None:
            self.registry_url = f"sqlite:///{self.data_dir / 'models.db'}"
        return self

    def ensure_dirs(self) -> None:
        """Create the data and models directories if missing."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.models_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
