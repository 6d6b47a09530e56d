"""Configuration for the neighbor-node latency benchmark."""

from neighborbench.config.settings import (
    BenchmarkSettings,
    Neo4jSettings,
    ObservabilitySettings,
    Settings,
    get_settings,
)

__all__ = [
    "BenchmarkSettings",
    "Neo4jSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
