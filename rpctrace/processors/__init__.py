"""Span processors."""

from rpctrace.processors.logging_processor import LoggingSpanProcessor

__all__ = [
    "LoggingSpanProcessor",
]
