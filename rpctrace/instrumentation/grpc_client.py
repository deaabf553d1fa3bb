"""gRPC client interceptor that propagates the current trace context."""

from __future__ import annotations

import collections
from typing import Any, Callable, Optional

import grpc

from rpctrace.context import get_current_span_context, inject_traceparent
from rpctrace.context.metadata import Metadata


class _ClientCallDetails(
    collections.namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


def inject_metadata(metadata: Optional[Metadata]) -> Optional[Metadata]:
    """
    Add the current span's traceparent to ``metadata``.

    When no real span is active the metadata is returned untouched and no
    header is written.
    """
    context = get_current_span_context()
    if context is None:
        return metadata
    return inject_traceparent(metadata, context)


class TracingClientInterceptor(
    grpc.UnaryUnaryClientInterceptor,
    grpc.UnaryStreamClientInterceptor,
    grpc.StreamUnaryClientInterceptor,
    grpc.StreamStreamClientInterceptor,
):
    """
    Inject the active trace context into every outgoing call.

    No span is opened here; wrap a channel with
    ``grpc.intercept_channel(channel, TracingClientInterceptor())``.
    """

    def intercept(self, metadata: Optional[Metadata]) -> Optional[Metadata]:
        return inject_metadata(metadata)

    def _with_trace_context(self, client_call_details: grpc.ClientCallDetails) -> grpc.ClientCallDetails:
        metadata = self.intercept(client_call_details.metadata)
        if metadata is client_call_details.metadata:
            return client_call_details
        return _ClientCallDetails(
            client_call_details.method,
            client_call_details.timeout,
            metadata,
            client_call_details.credentials,
            getattr(client_call_details, "wait_for_ready", None),
            getattr(client_call_details, "compression", None),
        )

    def intercept_unary_unary(self, continuation: Callable, client_call_details, request) -> Any:
        return continuation(self._with_trace_context(client_call_details), request)

    def intercept_unary_stream(self, continuation: Callable, client_call_details, request) -> Any:
        return continuation(self._with_trace_context(client_call_details), request)

    def intercept_stream_unary(self, continuation: Callable, client_call_details, request_iterator) -> Any:
        return continuation(self._with_trace_context(client_call_details), request_iterator)

    def intercept_stream_stream(self, continuation: Callable, client_call_details, request_iterator) -> Any:
        return continuation(self._with_trace_context(client_call_details), request_iterator)
