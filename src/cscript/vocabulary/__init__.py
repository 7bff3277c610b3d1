"""
Vocabulary — Enumerated types shared across the compiler.
"""

from cscript.vocabulary.enums import (
    EnumKind,
    PassKind,
    Severity,
    DiagnosticCode,
    OptLevel,
    BuildStage,
    Metric,
    TimedPhase,
)

__all__ = [
    "EnumKind",
    "PassKind",
    "Severity",
    "DiagnosticCode",
    "OptLevel",
    "BuildStage",
    "Metric",
    "TimedPhase",
]
