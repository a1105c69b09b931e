import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env for local/dev environments only for values missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Process-wide settings pulled from COSMOGEN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COSMOGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # Render Cache Configuration
    cache_max_entries: int = Field(default=64, ge=1, description="Cached meshes kept before FIFO eviction")

    # Generation Defaults
    default_detail_level: int = Field(default=2, ge=1, le=5, description="Detail level when none is given")
    default_quality: str = Field(default="medium", description="Galaxy quality tier when none is given")

    # Performance Configuration
    max_workers: int = Field(default=4, ge=1, description="Worker threads for batch generation")
    stream_chunk_size: int = Field(default=2000, ge=1, description="Points per chunk when streaming scatter")


# Instantiate singleton settings object
settings = Settings()
