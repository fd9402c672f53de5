"""Shared utilities package."""

from cytetype.shared.logging import configure_logging, get_logger
from cytetype.shared.retry import PollPolicy
from cytetype.shared.metrics import MetricsCollector

__all__ = [
    "configure_logging",
    "get_logger",
    "PollPolicy",
    "MetricsCollector",
]
