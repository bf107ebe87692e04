"""
Observability utilities for the coverage collector.

This module provides structured logging with run ID tracking.
"""

from .logging import CollectorLogger, setup_structured_logging

__all__ = [
    "CollectorLogger",
    "setup_structured_logging",
]
