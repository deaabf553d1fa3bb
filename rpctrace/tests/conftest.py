"""Shared fixtures: a provider whose finished spans land in memory."""

import pytest
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from rpctrace import runtime_config
from rpctrace.tests.support import REMOTE_TRACEPARENT
from rpctrace.tracer import TracerProvider


@pytest.fixture
def exporter():
    return InMemorySpanExporter()


@pytest.fixture
def provider(exporter):
    provider = TracerProvider(resource={"service.name": "rpctrace-tests"})
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    yield provider
    provider.shutdown()


@pytest.fixture
def tracer(provider):
    return provider.get_tracer("rpctrace.tests")


@pytest.fixture
def traced_metadata():
    return (("traceparent", REMOTE_TRACEPARENT),)


@pytest.fixture(autouse=True)
def reset_runtime_config():
    runtime_config.reset()
    yield
    runtime_config.reset()
