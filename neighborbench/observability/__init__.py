"""
Observability Module.

Structured logging for benchmark runs.
"""

from neighborbench.observability.logging import LogContext, configure_logging

__all__ = [
    "configure_logging",
    "LogContext",
]
