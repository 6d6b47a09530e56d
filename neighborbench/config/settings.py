"""
Application Settings - Pydantic Settings for configuration management.

Supports environment variables and .env file loading.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BeforeValidator, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_to_lowercase(v: str) -> str:
    """Normalize string to lowercase."""
    if isinstance(v, str):
        return v.lower()
    return v


class Neo4jSettings(BaseSettings):
    """Neo4j database connection settings."""

    model_config = SettingsConfigDict(env_prefix="NEO4J_")

    uri: str = Field(default="bolt://localhost:7687", description="Neo4j connection URI")
    username: str = Field(default="neo4j", description="Neo4j username")
    password: SecretStr = Field(default=SecretStr("password"), description="Neo4j password")
    database: str = Field(default="neo4j", description="Neo4j database name")
    max_connection_pool_size: int = Field(default=1, description="Connection pool size")
    index_await_timeout_seconds: int = Field(
        default=300, ge=0, description="Seconds to wait for indexes to come online"
    )


class BenchmarkSettings(BaseSettings):
    """Latency harness settings."""

    model_config = SettingsConfigDict(env_prefix="BENCH_")

    warmup_n: int = Field(default=20000, ge=0, description="Unmeasured warmup queries")
    measure_n: int = Field(default=100000, ge=0, description="Timed queries")
    cooldown_n: int = Field(default=500, ge=0, description="Untimed queries after measurement")
    transaction_window: int = Field(
        default=10000, gt=0, description="Measured queries sharing one transaction"
    )
    node_label: str = Field(default="Node", description="Label carrying the name<k> indexes")

    # Measurement has historically replayed the warmup query content
    measure_query_source: Annotated[
        Literal["warmup", "measurement"],
        BeforeValidator(normalize_to_lowercase),
    ] = Field(
        default="warmup",
        description="Which sequence supplies the query content during measurement",
    )

    attribute_count: int = Field(
        default=0, ge=0, description="Number of name<k> indexes to ensure before running"
    )
    summary_dir: str | None = Field(
        default=None, description="Directory for JSON latency summaries (disabled when unset)"
    )


class ObservabilitySettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="OBSERVABILITY_")

    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format (json for collection, console for terminals)"
    )


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="neighbor-bench", description="Application name")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )

    neo4j: Neo4jSettings = Field(default_factory=Neo4jSettings)
    benchmark: BenchmarkSettings = Field(default_factory=BenchmarkSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
