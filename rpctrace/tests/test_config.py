"""Tests for runtime configuration, tracing setup, exporters and processors."""

import io
import logging
import unittest
from unittest import mock

import pytest
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

import rpctrace
from rpctrace import runtime_config
from rpctrace.errors import ConfigError, RpcTraceError
from rpctrace.exporter import ConsoleExporter
from rpctrace.processors import LoggingSpanProcessor
from rpctrace.tests.support import REMOTE_CONTEXT
from rpctrace.tracer import TracerProvider


class TestRuntimeConfig:

    def test_defaults(self):
        assert runtime_config.get_service_name() == "rpctrace"
        assert runtime_config.get_debug() is False

    def test_load_from_env(self):
        runtime_config.load_from_env(
            {"RPCTRACE_SERVICE_NAME": " billing ", "RPCTRACE_DEBUG": "Yes"}
        )
        assert runtime_config.get_service_name() == "billing"
        assert runtime_config.get_debug() is True

    def test_unset_variables_keep_values(self):
        runtime_config.set_service_name("orders")
        runtime_config.load_from_env({})
        assert runtime_config.get_service_name() == "orders"

    def test_invalid_debug_value(self):
        with pytest.raises(ConfigError) as excinfo:
            runtime_config.load_from_env({"RPCTRACE_DEBUG": "maybe"})
        assert "value=maybe" in str(excinfo.value)

    def test_empty_service_name(self):
        with pytest.raises(ConfigError):
            runtime_config.load_from_env({"RPCTRACE_SERVICE_NAME": "  "})

    def test_error_hierarchy(self):
        error = ConfigError("bad", {"key": "x"})
        assert isinstance(error, RpcTraceError)
        assert error.details == {"key": "x"}
        assert str(ConfigError("plain")) == "plain"


class TestStartTracing(unittest.TestCase):
    """Tests for start_tracing() / stop_tracing()."""

    def tearDown(self):
        rpctrace.stop_tracing()
        runtime_config.reset()
        logging.getLogger("rpctrace").setLevel(logging.NOTSET)

    def test_start_and_stop(self):
        provider = rpctrace.start_tracing("checkout", set_global=False, load_env=False)
        self.assertIs(rpctrace.get_tracer_provider(), provider)
        self.assertEqual(provider.resource, {"service.name": "checkout"})

        tracer = rpctrace.get_tracer("test")
        self.assertIs(tracer, provider.get_tracer("test"))

        rpctrace.stop_tracing()
        self.assertIsNot(rpctrace.get_tracer_provider(), provider)

    def test_second_start_warns_and_reuses(self):
        provider = rpctrace.start_tracing(set_global=False, load_env=False)
        with self.assertLogs("rpctrace.bootstrap", level="WARNING") as logs:
            again = rpctrace.start_tracing(set_global=False, load_env=False)
        self.assertIs(again, provider)
        self.assertTrue(any("already running" in line for line in logs.output))

    def test_console_exporter_and_flush(self):
        provider = rpctrace.start_tracing(
            set_global=False, load_env=False, enable_console_exporter=True
        )
        self.assertEqual(len(provider.export_processors), 1)
        self.assertIsInstance(provider.export_processors, tuple)
        with rpctrace.get_tracer("test").start_as_current_span("work"):
            pass
        rpctrace.flush(timeout=5)

    def test_debug_from_runtime_config(self):
        runtime_config.set_debug(True)
        rpctrace.start_tracing(set_global=False, load_env=False)
        self.assertEqual(logging.getLogger("rpctrace").level, logging.DEBUG)

    def test_stop_without_start(self):
        rpctrace.stop_tracing()
        rpctrace.flush()

    def test_default_provider_without_start(self):
        provider = rpctrace.get_tracer_provider()
        self.assertIs(provider, rpctrace.get_tracer_provider())
        with rpctrace.get_tracer("test").start_as_current_span("work") as span:
            self.assertTrue(span.context.is_valid())


class TestConsoleExporter:

    def test_prints_one_line_per_span(self):
        stream = io.StringIO()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(ConsoleExporter(stream=stream)))
        tracer = provider.get_tracer("test")

        with tracer.start_as_current_span("child", parent_context=REMOTE_CONTEXT):
            pass
        provider.shutdown()

        (line,) = stream.getvalue().splitlines()
        assert line.startswith("[span] name=child ")
        assert "trace_id=4bf92f3577b34da6a3ce929d0e0e4736" in line
        assert "parent_id=00f067aa0ba902b7" in line
        assert "status=OK" in line


class TestLoggingSpanProcessor:

    def test_logs_span_summary(self, caplog):
        provider = TracerProvider()
        provider.add_span_processor(LoggingSpanProcessor())
        tracer = provider.get_tracer("test")

        with caplog.at_level(logging.INFO, logger="rpctrace.traces"):
            with tracer.start_as_current_span("child", parent_context=REMOTE_CONTEXT) as span:
                span.set_attribute("rpc.method", "Ping")
        provider.shutdown()

        (record,) = [r for r in caplog.records if r.name == "rpctrace.traces"]
        message = record.getMessage()
        assert "name=child" in message
        assert "parent_id=00f067aa0ba902b7" in message
        assert "status=OK" in message
        assert "'rpc.method': 'Ping'" in message

    def test_processor_errors_do_not_break_spans(self):
        class Broken:
            def on_end(self, span):
                raise RuntimeError("broken")

        provider = TracerProvider()
        provider.add_span_processor(Broken())
        span = provider.get_tracer("test").start_span("work")
        span.end()
        assert span.ended


class TestTracerProvider(unittest.TestCase):

    def test_export_processors_lists_otel_processors_only(self):
        provider = TracerProvider()
        exporting = SimpleSpanProcessor(ConsoleExporter(stream=io.StringIO()))
        provider.add_span_processor(exporting)
        provider.add_span_processor(LoggingSpanProcessor())
        self.assertEqual(provider.export_processors, (exporting,))

    def test_force_flush_zero_timeout_is_not_default(self):
        provider = TracerProvider()
        with mock.patch.object(provider.otel_tracer_provider, "force_flush") as flush:
            provider.force_flush(timeout=0)
        flush.assert_called_once_with(timeout_millis=0)

    def test_force_flush_without_timeout_uses_default(self):
        provider = TracerProvider()
        with mock.patch.object(provider.otel_tracer_provider, "force_flush") as flush:
            provider.force_flush()
        flush.assert_called_once_with(timeout_millis=30000)
