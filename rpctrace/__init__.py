"""rpctrace: W3C trace context propagation for gRPC services."""

from rpctrace.bootstrap import (
    flush,
    get_tracer,
    get_tracer_provider,
    start_tracing,
    stop_tracing,
)
from rpctrace.context import (
    TRACEPARENT_HEADER,
    format_traceparent,
    get_current_span_context,
    parse_traceparent,
)
from rpctrace.errors import ConfigError, RpcTraceError
from rpctrace.instrumentation import (
    AioTracingServerInterceptor,
    TracingClientInterceptor,
    TracingServerInterceptor,
    aio_client_interceptors,
    default_span_context_extractor,
)
from rpctrace.tracer import Span, SpanContext, SpanStatus, Tracer, TracerProvider

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "start_tracing",
    "stop_tracing",
    "flush",
    "get_tracer",
    "get_tracer_provider",
    "TRACEPARENT_HEADER",
    "format_traceparent",
    "parse_traceparent",
    "get_current_span_context",
    "TracingClientInterceptor",
    "TracingServerInterceptor",
    "AioTracingServerInterceptor",
    "aio_client_interceptors",
    "default_span_context_extractor",
    "Span",
    "SpanContext",
    "SpanStatus",
    "Tracer",
    "TracerProvider",
    "RpcTraceError",
    "ConfigError",
]
