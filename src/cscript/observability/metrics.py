"""
Metrics — Tallies of lowering, building and profiling work.

An orchestrated compile collects into its own `CompilerMetrics`; the
finished snapshot is attached to the result and then folded into the
process-wide totals. Work done outside a compile (a bare `lower()` call,
a standalone `PGOLoop`) records straight into the process totals.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from threading import Lock

from cscript.vocabulary import Metric, TimedPhase


@dataclass
class PhaseTiming:
    """Wall time spent in one phase."""
    runs: int = 0
    total_ms: float = 0.0
    longest_ms: float = 0.0

    def add(self, elapsed_ms: float) -> None:
        self.runs += 1
        self.total_ms += elapsed_ms
        self.longest_ms = max(self.longest_ms, elapsed_ms)

    def absorb(self, other: "PhaseTiming") -> None:
        self.runs += other.runs
        self.total_ms += other.total_ms
        self.longest_ms = max(self.longest_ms, other.longest_ms)

    @property
    def mean_ms(self) -> float:
        return self.total_ms / self.runs if self.runs else 0.0


@dataclass(frozen=True)
class MetricsSnapshot:
    """Point-in-time copy of a `CompilerMetrics`."""
    counts: dict[Metric, int]
    timings: dict[TimedPhase, PhaseTiming]

    def __getitem__(self, metric: Metric) -> int:
        return self.counts.get(metric, 0)

    def summary(self) -> list[str]:
        """One line per non-zero count and per phase that ran."""
        lines = [f"{metric.value}={n}" for metric, n in self.counts.items() if n]
        for phase, timing in self.timings.items():
            if timing.runs:
                lines.append(
                    f"{phase.value}: {timing.runs}x, "
                    f"{timing.total_ms:.1f} ms total, {timing.longest_ms:.1f} ms longest"
                )
        return lines


class CompilerMetrics:
    """Thread-safe counts and phase timings for one scope."""

    def __init__(self):
        self._lock = Lock()
        self._counts = dict.fromkeys(Metric, 0)
        self._timings = {phase: PhaseTiming() for phase in TimedPhase}

    def count(self, metric: Metric, amount: int = 1) -> None:
        with self._lock:
            self._counts[metric] += amount

    def __getitem__(self, metric: Metric) -> int:
        return self._counts[metric]

    def timing(self, phase: TimedPhase) -> PhaseTiming:
        return self._timings[phase]

    def observe(self, phase: TimedPhase, elapsed_ms: float) -> None:
        with self._lock:
            self._timings[phase].add(elapsed_ms)

    @contextmanager
    def timed(self, phase: TimedPhase) -> Iterator[None]:
        """Record the wall time of the block, whether or not it raises."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.observe(phase, (time.perf_counter() - started) * 1000)

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                counts=dict(self._counts),
                timings={phase: replace(t) for phase, t in self._timings.items()},
            )

    def merge(self, other: "CompilerMetrics") -> None:
        """Add another scope's tallies to this one."""
        incoming = other.snapshot()
        with self._lock:
            for metric, n in incoming.counts.items():
                self._counts[metric] += n
            for phase, timing in incoming.timings.items():
                self._timings[phase].absorb(timing)

    def reset(self) -> None:
        with self._lock:
            self._counts = dict.fromkeys(Metric, 0)
            self._timings = {phase: PhaseTiming() for phase in TimedPhase}


_process_metrics = CompilerMetrics()
_active_metrics: ContextVar[CompilerMetrics | None] = ContextVar("active_metrics", default=None)


def get_metrics() -> CompilerMetrics:
    """Metrics of the compile running in this context, else the process totals."""
    active = _active_metrics.get()
    return active if active is not None else _process_metrics


@contextmanager
def collect_metrics() -> Iterator[CompilerMetrics]:
    """
    Collect into fresh metrics for the duration of the block.

    On exit the collected tallies are added to the process totals.
    """
    metrics = CompilerMetrics()
    token = _active_metrics.set(metrics)
    try:
        yield metrics
    finally:
        _active_metrics.reset(token)
        _process_metrics.merge(metrics)


def reset_metrics() -> None:
    """Zero the process totals (for testing)."""
    _process_metrics.reset()
