"""
Observability module: log formatting.

Usage:
    from eqbal.observability import configure_logging

    configure_logging("DEBUG", json_format=False)
"""

from .logging import HumanFormatter, JSONFormatter, configure_logging

__all__ = [
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
]
