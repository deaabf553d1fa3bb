"""Utility functions for rpctrace."""

from rpctrace.utils.helpers import (
    get_duration_ns,
    get_parent_span_id,
    split_full_method,
)

__all__ = [
    "get_duration_ns",
    "get_parent_span_id",
    "split_full_method",
]
