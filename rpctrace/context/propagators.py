"""W3C trace context encoding and decoding for the ``traceparent`` header."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from opentelemetry.trace.span import format_span_id, format_trace_id

from rpctrace.context.metadata import (
    TRACEPARENT_HEADER,
    Metadata,
    MetadataValue,
    get_metadata_value,
    set_metadata_value,
)
from rpctrace.tracer.span_context import SpanContext

logger = logging.getLogger(__name__)

SPECIFICATION_VERSION = "00"
INVALID_VERSION = "ff"

# See https://www.w3.org/TR/trace-context/#trace-flags for the bitmask.
SAMPLED_BITMASK = 0b1

_TRACEPARENT_REGEX = re.compile(
    r"^([0-9a-f]{2})-([0-9a-f]{32})-([0-9a-f]{16})-([0-9a-f]{2})(-.*)?$"
)


def format_traceparent(context: SpanContext) -> str:
    """
    Format a SpanContext as a ``traceparent`` header value.

    Always emits version 00: ``00-<32 hex trace id>-<16 hex span id>-<2 hex flags>``.
    """
    flags = SAMPLED_BITMASK if context.sampled else 0
    return "{}-{}-{}-{:02x}".format(
        SPECIFICATION_VERSION,
        format_trace_id(context.trace_id),
        format_span_id(context.span_id),
        flags,
    )


def parse_traceparent(header_value: str) -> Optional[SpanContext]:
    """
    Parse a ``traceparent`` header value into a SpanContext.

    Returns None for anything that is not a valid header; never raises.
    Future versions are read by their first four fields, version ``ff``
    and all-zero identifiers are rejected.
    """
    if not header_value or not isinstance(header_value, str):
        return None

    match = _TRACEPARENT_REGEX.match(header_value)
    if match is None:
        logger.debug("Malformed traceparent: %r", header_value)
        return None

    version, trace_id, span_id, flags, rest = match.groups()
    if version == INVALID_VERSION:
        logger.debug("traceparent version %s is invalid", version)
        return None
    if version == SPECIFICATION_VERSION and rest is not None:
        logger.debug("traceparent version 00 carries trailing data: %r", header_value)
        return None

    context = SpanContext(
        trace_id=int(trace_id, 16),
        span_id=int(span_id, 16),
        sampled=(int(flags, 16) & SAMPLED_BITMASK) == SAMPLED_BITMASK,
    )
    if not context.is_valid():
        logger.debug("traceparent carries an all-zero id: %r", header_value)
        return None
    return context


def inject_traceparent(
    metadata: Optional[Metadata], context: SpanContext
) -> List[Tuple[str, MetadataValue]]:
    """Return metadata carrying ``context`` under the traceparent key, replacing any prior value."""
    return set_metadata_value(metadata, TRACEPARENT_HEADER, format_traceparent(context))


def extract_traceparent(metadata: Optional[Metadata]) -> Optional[SpanContext]:
    """Look up the traceparent key in ``metadata`` and parse it."""
    header_value = get_metadata_value(metadata, TRACEPARENT_HEADER)
    if header_value is None:
        return None
    return parse_traceparent(header_value)
