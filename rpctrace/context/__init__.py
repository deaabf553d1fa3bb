"""Context utilities: ambient span access and the traceparent codec."""

from rpctrace.context.context import get_current_span_context, pop_span, push_span
from rpctrace.context.metadata import (
    TRACEPARENT_HEADER,
    get_metadata_value,
    set_metadata_value,
)
from rpctrace.context.propagators import (
    extract_traceparent,
    format_traceparent,
    inject_traceparent,
    parse_traceparent,
)

__all__ = [
    "TRACEPARENT_HEADER",
    "get_current_span_context",
    "push_span",
    "pop_span",
    "get_metadata_value",
    "set_metadata_value",
    "format_traceparent",
    "parse_traceparent",
    "inject_traceparent",
    "extract_traceparent",
]
