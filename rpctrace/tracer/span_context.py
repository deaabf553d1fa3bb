"""Immutable trace metadata."""

from dataclasses import dataclass

from opentelemetry.trace import SpanContext as OTelSpanContext, TraceFlags
from opentelemetry.sdk.trace.id_generator import RandomIdGenerator

_id_generator = RandomIdGenerator()


@dataclass(frozen=True)
class SpanContext:
    trace_id: int  # 128-bit
    span_id: int  # 64-bit
    sampled: bool = True

    def is_valid(self) -> bool:
        return bool(self.trace_id and self.span_id)

    @property
    def trace_flags(self) -> int:
        return TraceFlags.SAMPLED if self.sampled else TraceFlags.DEFAULT

    def is_root(self) -> bool:
        """No span id: a span started under this context begins a new trace."""
        return not self.span_id

    @classmethod
    def random(cls) -> "SpanContext":
        """A fresh sampled trace id with no parent span."""
        return cls(
            trace_id=_id_generator.generate_trace_id(),
            span_id=0,
            sampled=True,
        )

    def to_otel(self) -> OTelSpanContext:
        """Convert to an OpenTelemetry SpanContext flagged as remote."""
        return OTelSpanContext(
            trace_id=self.trace_id,
            span_id=self.span_id,
            is_remote=True,
            trace_flags=TraceFlags(self.trace_flags),
        )

    @classmethod
    def from_otel(cls, otel_context: OTelSpanContext) -> "SpanContext":
        return cls(
            trace_id=otel_context.trace_id,
            span_id=otel_context.span_id,
            sampled=otel_context.trace_flags.sampled,
        )
