"""Weighted, data-driven spawn selection graphs with per-context state."""

__version__ = "0.1.0"

__all__ = [
    "composites",
    "context",
    "decorators",
    "node",
    "query",
    "randomization",
    "samplers",
    "scatter",
    "table",
    "types",
]