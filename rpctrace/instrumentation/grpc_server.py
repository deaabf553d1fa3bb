"""
gRPC server interceptor that continues incoming traces.

Each call runs the configured span context extractor against the
invocation metadata and opens a server span parented to the result. The
default extractor decodes ``traceparent`` and starts a new trace when the
header is missing or invalid; an extractor returning None gets a no-op
span instead.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Optional

import grpc
from opentelemetry.trace import SpanKind

from rpctrace.bootstrap import get_tracer
from rpctrace.context import extract_traceparent, pop_span, push_span
from rpctrace.context.metadata import Metadata
from rpctrace.errors import ConfigError
from rpctrace.tracer.span import Span
from rpctrace.tracer.span_context import SpanContext
from rpctrace.tracer.tracer import Tracer
from rpctrace.utils.helpers import split_full_method

logger = logging.getLogger(__name__)

TRACER_NAME = "rpctrace.grpc.server"

SpanContextExtractor = Callable[[Optional[Metadata]], Optional[SpanContext]]


def default_span_context_extractor(metadata: Optional[Metadata]) -> Optional[SpanContext]:
    """Decode ``traceparent``; without one the call starts a new root span."""
    context = extract_traceparent(metadata)
    if context is None:
        logger.debug("No usable traceparent in metadata, starting a new trace")
        return SpanContext.random()
    return context


class ServerTracing:
    """Extractor configuration and span creation shared by the sync and aio interceptors."""

    def __init__(self, tracer: Optional[Tracer] = None) -> None:
        self._tracer = tracer
        self._span_context_extractor: SpanContextExtractor = default_span_context_extractor

    def with_span_context_extractor(self, extractor: SpanContextExtractor):
        """
        Return a copy of this interceptor using ``extractor``.

        Return None from the extractor to keep the span as no-op.
        """
        if not callable(extractor):
            raise ConfigError("Span context extractor must be callable", {"extractor": repr(extractor)})
        layer = copy.copy(self)
        layer._span_context_extractor = extractor
        return layer

    @property
    def span_context_extractor(self) -> SpanContextExtractor:
        return self._span_context_extractor

    @property
    def tracer(self) -> Tracer:
        return self._tracer or get_tracer(TRACER_NAME)

    def _extract(self, method: str, metadata: Optional[Metadata]) -> Optional[SpanContext]:
        try:
            return self._span_context_extractor(metadata)
        except Exception:
            logger.warning("Span context extractor failed for %s", method, exc_info=True)
            return None

    def start_span(self, method: str, metadata: Optional[Metadata]) -> Span:
        """Run the extractor once and open the span for one call."""
        parent = self._extract(method, metadata)
        if parent is None:
            logger.debug("No span context for %s, using a no-op span", method)
            return Span.noop()

        service, rpc_method = split_full_method(method)
        attributes = {"rpc.system": "grpc", "rpc.method": rpc_method}
        if service:
            attributes["rpc.service"] = service
        return self.tracer.start_span(
            method,
            attributes=attributes,
            parent_context=parent,
            kind=SpanKind.SERVER,
        )


def _handler_shape(handler: grpc.RpcMethodHandler):
    if handler.request_streaming and handler.response_streaming:
        return handler.stream_stream, grpc.stream_stream_rpc_method_handler
    if handler.request_streaming:
        return handler.stream_unary, grpc.stream_unary_rpc_method_handler
    if handler.response_streaming:
        return handler.unary_stream, grpc.unary_stream_rpc_method_handler
    return handler.unary_unary, grpc.unary_unary_rpc_method_handler


class TracingServerInterceptor(ServerTracing, grpc.ServerInterceptor):
    """
    Server interceptor for ``grpc.server(..., interceptors=[...])``.

    The span is current while the servicer method runs and, for streaming
    responses, while each response is produced. It is ended exactly once on
    every exit path; handler errors are recorded and re-raised unchanged.
    """

    def intercept(self, method: str, metadata: Optional[Metadata], handler: Callable, *args, **kwargs) -> Any:
        """Run ``handler`` inside the span for one call."""
        with self.start_span(method, metadata):
            return handler(*args, **kwargs)

    def intercept_service(self, continuation, handler_call_details):
        handler = continuation(handler_call_details)
        if handler is None:
            return None

        method = handler_call_details.method
        metadata = handler_call_details.invocation_metadata
        behavior, handler_factory = _handler_shape(handler)

        if handler.response_streaming:
            traced = self._wrap_streaming(behavior, method, metadata)
        else:
            traced = self._wrap_unary(behavior, method, metadata)

        return handler_factory(
            traced,
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )

    def _wrap_unary(self, behavior, method, metadata):
        def traced(request_or_iterator, context):
            return self.intercept(method, metadata, behavior, request_or_iterator, context)

        return traced

    def _wrap_streaming(self, behavior, method, metadata):
        def traced(request_or_iterator, context):
            span = self.start_span(method, metadata)
            error = None
            try:
                token = push_span(span)
                try:
                    responses = iter(behavior(request_or_iterator, context))
                finally:
                    pop_span(token)

                while True:
                    token = push_span(span)
                    try:
                        response = next(responses)
                    except StopIteration:
                        return
                    finally:
                        pop_span(token)
                    yield response
            except BaseException as exc:
                error = exc
                raise
            finally:
                span.close(error)

        return traced
