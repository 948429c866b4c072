"""Trace context for correlating the log lines of one JSON-RPC request."""

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class TraceContext:
    """Lightweight, immutable trace context.

    Attributes:
        trace_id: Unique identifier for one inbound request (UUID string).
        request_id: JSON-RPC id of the request, if it carried one.
        parent_span_id: Optional parent span ID for nested operations.
    """

    trace_id: str
    request_id: str | int | None = None
    parent_span_id: str | None = None

    @classmethod
    def new_trace(cls, request_id: str | int | None = None) -> "TraceContext":
        """Start a new trace for an inbound request.

        Args:
            request_id: JSON-RPC id to carry along for log correlation.

        Returns:
            A new TraceContext with a generated trace_id.
        """
        return cls(trace_id=str(uuid.uuid4()), request_id=request_id)

    def new_span(self) -> tuple["TraceContext", str]:
        """Create a child span within this trace.

        Returns:
            Tuple of (child context, new span_id).
        """
        span_id = str(uuid.uuid4())
        child = TraceContext(
            trace_id=self.trace_id, request_id=self.request_id, parent_span_id=span_id
        )
        return child, span_id
