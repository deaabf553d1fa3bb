"""Trace context propagation for ``grpc.aio`` channels and servers."""

from __future__ import annotations

import inspect
from typing import Any, Callable, List, Optional

from grpc import aio

from rpctrace.context import pop_span, push_span
from rpctrace.context.metadata import Metadata
from rpctrace.instrumentation.grpc_client import inject_metadata
from rpctrace.instrumentation.grpc_server import ServerTracing, _handler_shape


class _AioTraceContextInjector:
    """Shared metadata rewrite for the ``grpc.aio`` client interceptors."""

    def intercept(self, metadata: Optional[Metadata]) -> Optional[Metadata]:
        return inject_metadata(metadata)

    def _with_trace_context(self, client_call_details: aio.ClientCallDetails) -> aio.ClientCallDetails:
        metadata = self.intercept(client_call_details.metadata)
        if metadata is client_call_details.metadata:
            return client_call_details
        return aio.ClientCallDetails(
            method=client_call_details.method,
            timeout=client_call_details.timeout,
            metadata=aio.Metadata(*metadata),
            credentials=client_call_details.credentials,
            wait_for_ready=client_call_details.wait_for_ready,
        )


# grpc.aio files each interceptor under a single call shape, so every
# shape gets its own class.
class AioUnaryUnaryTracingInterceptor(_AioTraceContextInjector, aio.UnaryUnaryClientInterceptor):
    async def intercept_unary_unary(self, continuation: Callable, client_call_details, request) -> Any:
        return await continuation(self._with_trace_context(client_call_details), request)


class AioUnaryStreamTracingInterceptor(_AioTraceContextInjector, aio.UnaryStreamClientInterceptor):
    async def intercept_unary_stream(self, continuation: Callable, client_call_details, request) -> Any:
        return await continuation(self._with_trace_context(client_call_details), request)


class AioStreamUnaryTracingInterceptor(_AioTraceContextInjector, aio.StreamUnaryClientInterceptor):
    async def intercept_stream_unary(self, continuation: Callable, client_call_details, request_iterator) -> Any:
        return await continuation(self._with_trace_context(client_call_details), request_iterator)


class AioStreamStreamTracingInterceptor(_AioTraceContextInjector, aio.StreamStreamClientInterceptor):
    async def intercept_stream_stream(self, continuation: Callable, client_call_details, request_iterator) -> Any:
        return await continuation(self._with_trace_context(client_call_details), request_iterator)


def aio_client_interceptors() -> List[aio.ClientInterceptor]:
    """
    Interceptors that inject the active trace context on a ``grpc.aio`` channel.

    Pass the whole list: ``grpc.aio.insecure_channel(target, interceptors=aio_client_interceptors())``.
    """
    return [
        AioUnaryUnaryTracingInterceptor(),
        AioUnaryStreamTracingInterceptor(),
        AioStreamUnaryTracingInterceptor(),
        AioStreamStreamTracingInterceptor(),
    ]


class AioTracingServerInterceptor(ServerTracing, aio.ServerInterceptor):
    """
    Server interceptor for ``grpc.aio.server(interceptors=[...])``.

    Same span lifecycle as the threaded interceptor; task cancellation
    ends the span too.
    """

    async def intercept(self, method: str, metadata: Optional[Metadata], handler: Callable, *args, **kwargs) -> Any:
        """Run ``handler`` (sync or async) inside the span for one call."""
        async with self.start_span(method, metadata):
            result = handler(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

    async def intercept_service(self, continuation, handler_call_details):
        handler = await continuation(handler_call_details)
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
        async def traced(request_or_iterator, context):
            return await self.intercept(method, metadata, behavior, request_or_iterator, context)

        return traced

    def _wrap_streaming(self, behavior, method, metadata):
        async def traced(request_or_iterator, context):
            span = self.start_span(method, metadata)
            error = None
            try:
                token = push_span(span)
                try:
                    responses = behavior(request_or_iterator, context)
                    if inspect.isawaitable(responses):
                        # Handlers that stream with context.write() return None.
                        responses = await responses
                finally:
                    pop_span(token)
                if responses is None:
                    return

                if hasattr(responses, "__aiter__"):
                    responses = responses.__aiter__()
                    while True:
                        token = push_span(span)
                        try:
                            response = await responses.__anext__()
                        except StopAsyncIteration:
                            return
                        finally:
                            pop_span(token)
                        yield response
                else:
                    responses = iter(responses)
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
