"""Top-level package for the multi-timeframe crypto signal bot."""

__all__ = [
    "config",
    "data",
    "indicators",
    "structure",
    "strategy",
    "sessions",
    "scheduler",
    "transport",
    "monitoring",
]
