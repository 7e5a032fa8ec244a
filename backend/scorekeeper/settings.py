"""Score keeper configuration via environment variables."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

_VALID_LOG_FORMATS = {"json", "console"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ScoreKeeperSettings(BaseSettings):
    model_config = {"env_prefix": "SCOREKEEPER_"}

    # single JSON document holding the whole application state
    state_file: str = Field(default="backend/data/scorekeeper.json", min_length=1)
    log_dir: str | None = None
    log_level: str = "INFO"
    log_format: str = "console"

    # advance numeric rounds as soon as every participant has scored
    auto_advance_rounds: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        value = str(v).upper()
        if value not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}, got {v!r}")
        return value

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        value = str(v).lower() or "console"
        if value not in _VALID_LOG_FORMATS:
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return value

    @field_validator("log_dir", mode="before")
    @classmethod
    def empty_log_dir_to_none(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        return v
