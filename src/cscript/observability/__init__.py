"""
Observability — Logging and metrics for the compiler driver.

Provides:
- Log lines tagged with the invocation id and source name
- Per-compile counts and phase timings, folded into process totals
"""

from cscript.observability.logging import (
    Invocation,
    invocation,
    current_invocation,
    configure_logging,
    get_logger,
    JSONFormatter,
    ReadableFormatter,
)
from cscript.observability.metrics import (
    PhaseTiming,
    MetricsSnapshot,
    CompilerMetrics,
    collect_metrics,
    get_metrics,
    reset_metrics,
)

__all__ = [
    # Logging
    "Invocation",
    "invocation",
    "current_invocation",
    "configure_logging",
    "get_logger",
    "JSONFormatter",
    "ReadableFormatter",
    # Metrics
    "PhaseTiming",
    "MetricsSnapshot",
    "CompilerMetrics",
    "collect_metrics",
    "get_metrics",
    "reset_metrics",
]
