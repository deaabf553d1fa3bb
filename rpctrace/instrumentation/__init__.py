"""gRPC interceptors for trace context propagation."""

from rpctrace.instrumentation.grpc_client import TracingClientInterceptor, inject_metadata
from rpctrace.instrumentation.grpc_server import (
    TracingServerInterceptor,
    default_span_context_extractor,
)
from rpctrace.instrumentation.grpc_aio import (
    AioStreamStreamTracingInterceptor,
    AioStreamUnaryTracingInterceptor,
    AioTracingServerInterceptor,
    AioUnaryStreamTracingInterceptor,
    AioUnaryUnaryTracingInterceptor,
    aio_client_interceptors,
)

__all__ = [
    "TracingClientInterceptor",
    "TracingServerInterceptor",
    "AioUnaryUnaryTracingInterceptor",
    "AioUnaryStreamTracingInterceptor",
    "AioStreamUnaryTracingInterceptor",
    "AioStreamStreamTracingInterceptor",
    "AioTracingServerInterceptor",
    "aio_client_interceptors",
    "default_span_context_extractor",
    "inject_metadata",
]
