"""Helper functions for OpenTelemetry and gRPC compatibility."""

from __future__ import annotations

from typing import Optional, Tuple

from opentelemetry.sdk.trace import ReadableSpan


def get_duration_ns(span: ReadableSpan) -> Optional[int]:
    """
    Get span duration in nanoseconds.

    Returns:
        Duration in nanoseconds, or None if span hasn't ended
    """
    if span.end_time is None or span.start_time is None:
        return None
    return span.end_time - span.start_time


def get_parent_span_id(span: ReadableSpan) -> Optional[int]:
    """Parent span ID of a finished span, or None for a root span."""
    if span.parent is None:
        return None
    return span.parent.span_id


def split_full_method(full_method: Optional[str]) -> Tuple[str, str]:
    """
    Split a gRPC method path into service and method names.

    ``/pkg.Service/Method`` gives ``("pkg.Service", "Method")``; anything
    that does not look like a method path is returned whole as the method.
    """
    if not full_method:
        return "", ""
    parts = full_method.lstrip("/").split("/")
    if len(parts) != 2 or not all(parts):
        return "", full_method
    return parts[0], parts[1]
