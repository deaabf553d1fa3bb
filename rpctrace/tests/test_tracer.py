"""Tests for the Tracer wrapper: current-span handling and parent selection."""

import pytest
from opentelemetry.trace import StatusCode

from rpctrace.context import get_current_span_context
from rpctrace.tests.support import REMOTE_CONTEXT
from rpctrace.tracer import SpanContext


class TestStartAsCurrentSpan:

    def test_span_is_current_inside_block_only(self, tracer):
        assert get_current_span_context() is None

        with tracer.start_as_current_span("work") as span:
            assert get_current_span_context() == span.context
            assert not span.ended

        assert span.ended
        assert get_current_span_context() is None

    def test_nested_spans_parent_to_current(self, tracer, exporter):
        with tracer.start_as_current_span("outer") as outer:
            with tracer.start_as_current_span("inner"):
                pass

        inner, _ = exporter.get_finished_spans()
        assert inner.parent.span_id == outer.context.span_id

    def test_error_ends_span_and_propagates(self, tracer, exporter):
        with pytest.raises(ValueError):
            with tracer.start_as_current_span("work") as span:
                raise ValueError("boom")

        assert span.ended
        assert get_current_span_context() is None
        (finished,) = exporter.get_finished_spans()
        assert finished.status.status_code == StatusCode.ERROR


class TestParentContext:

    def test_remote_parent(self, tracer, exporter):
        tracer.start_span("child", parent_context=REMOTE_CONTEXT).end()

        (finished,) = exporter.get_finished_spans()
        assert finished.context.trace_id == REMOTE_CONTEXT.trace_id
        assert finished.parent.span_id == REMOTE_CONTEXT.span_id

    def test_context_without_span_id_starts_root(self, tracer, exporter):
        with tracer.start_as_current_span("outer") as outer:
            span = tracer.start_span("fresh", parent_context=SpanContext.random())
            span.end()

        assert span.parent is None
        fresh = [s for s in exporter.get_finished_spans() if s.name == "fresh"][0]
        assert fresh.parent is None
        assert fresh.context.trace_id != outer.context.trace_id
