"""Structured logging module for Media Analyzer.

Provides configurable logging with JSON format support and file rotation.
"""

from media_analyzer.logging.config import configure_logging
from media_analyzer.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "configure_logging",
]
