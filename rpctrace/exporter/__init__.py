"""Exporters for delivering spans to backends."""

from rpctrace.exporter.console_exporter import ConsoleExporter

__all__ = ["ConsoleExporter"]
