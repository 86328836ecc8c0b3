"""
Application Configuration using Pydantic Settings

Loads configuration from environment variables with sensible defaults.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # ========================================================================
    # Postgres Connection Settings
    # ========================================================================
    # Credentials are not configured here: they come from the test case env vars.
    POSTGRES_HOST: str = "localhost"
    # Database used when no benchmark database is selected (switch_database("")).
    POSTGRES_DEFAULT_DATABASE: str = "postgres"
    POSTGRES_CONNECT_TIMEOUT: float = 5.0
    # Large sweep steps (10M row scans) can legitimately run for minutes.
    POSTGRES_COMMAND_TIMEOUT: float = 600.0

    # ========================================================================
    # Benchmark Settings
    # ========================================================================
    BENCHMARK_DATABASE_NAME: str = "cott_db"
    BENCHMARK_TABLE_NAME: str = "test_table"

    # Await-ready poll: 300 x 100ms gives a 30 second ceiling.
    READY_POLL_ATTEMPTS: int = 300
    READY_POLL_INTERVAL_SECONDS: float = 0.1
    READY_FAILURE_PAUSE_SECONDS: float = 1.0
    # Added to attempts x interval to bound the whole poll, slow pings included.
    READY_POLL_SLACK_SECONDS: float = 5.0

    # Rows per insert statement once a sweep step exceeds it.
    INSERT_BATCH_SIZE: int = 1000
    SWEEP_MAX_ROWS: int = 10_000_000
    # Sweep steps at or above this size also measure inserts into the full table.
    FULL_TABLE_INSERT_MIN_ROWS: int = 1000

    GENERATOR_SEED: Optional[int] = None

    @field_validator(
        "READY_POLL_ATTEMPTS", "INSERT_BATCH_SIZE", "SWEEP_MAX_ROWS", mode="after"
    )
    @classmethod
    def _require_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    # ========================================================================
    # Logging Settings
    # ========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Create global settings instance
settings = Settings()
