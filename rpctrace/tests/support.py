"""Constants and small fakes shared across the test modules."""

import collections

from rpctrace.tracer import SpanContext

HandlerCallDetails = collections.namedtuple(
    "HandlerCallDetails", ("method", "invocation_metadata")
)

REMOTE_CONTEXT = SpanContext(
    trace_id=0x4BF92F3577B34DA6A3CE929D0E0E4736,
    span_id=0x00F067AA0BA902B7,
    sampled=True,
)

REMOTE_TRACEPARENT = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"
