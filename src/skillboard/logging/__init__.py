"""
Logging module - Structured logging system.

structlog on top of stdlib logging, plus the HUMAN level (25) used for
user-facing board events.
"""

from .human import HumanLog, HumanLogHandler
from .levels import HUMAN
from .setup import configure_logging

__all__ = [
    "configure_logging",
    "HUMAN",
    "HumanLog",
    "HumanLogHandler",
]
