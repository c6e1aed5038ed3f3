"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkerConfig(BaseSettings):
    """Root configuration for a job worker."""
    model_config = SettingsConfigDict(env_prefix="JOBWORKER_", extra="ignore")

    state_path: str = Field(
        default="~/.jobworker/state.json",
        description="JSON file holding the persisted state blob",
    )
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()

    @property
    def state_file(self) -> Path:
        """Get expanded state file path."""
        return Path(self.state_path).expanduser()
