"""Configuration management for the go-links launcher."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Go Links"
    debug: bool = False
    log_level: Optional[str] = None

    config_path: str = Field(
        default="~/.config/golinks/links.yaml",
        description="Link configuration file; .yaml/.yml is read as YAML, anything else as JSON",
    )

    api_host: str = "127.0.0.1"
    api_port: int = 5151
    allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])

    watch_debounce: float = 0.3
    watch_rename_delay: float = 0.5
    watch_poll_interval: float = 0.5

    class Config:
        env_file = ".env"
        env_prefix = "GOLINKS_"
        case_sensitive = False

    @property
    def config_file(self) -> Path:
        return Path(self.config_path).expanduser()


@lru_cache
def get_settings() -> Settings:
    return Settings()
