"""OpenTelemetry helpers.

Spans go to whatever tracer provider the host process installed; without one
the API hands back a no-op tracer.
"""

from opentelemetry import trace

TRACER_NAME = "sandbox_coder"


def get_tracer() -> trace.Tracer:
    """Get the package tracer from the global tracer provider."""
    return trace.get_tracer(TRACER_NAME)
