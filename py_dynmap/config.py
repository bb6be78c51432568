"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings

from .core.constants import DEFAULT_SEED


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Generation
    default_seed: str = Field(default=DEFAULT_SEED, description="Seed used when none or an empty one is requested")
    generation_workers: int = Field(default=1, ge=1, description="Threads used for per-cell generation")
    generation_chunk_size: int = Field(default=4096, ge=1, description="Cell ids per generation task")

    # Cache
    cache_max_seeds: int = Field(default=1, ge=1, description="Generated seeds kept in memory")

    # Query surface
    default_page_size: int = Field(default=50, ge=1, description="Cells per page by default")
    max_page_size: int = Field(default=500, ge=1, description="Largest page a client may request")

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    class Config:
        env_prefix = "DYNMAP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
