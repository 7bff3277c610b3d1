"""
Orchestrator — Runs a whole compile: lowering, PGO, arm choice, build.
"""

from cscript.orchestrator.workspace import BuildWorkspace
from cscript.orchestrator.orchestrator import (
    TranslationResult,
    BuildResult,
    BuildOrchestrator,
    create_orchestrator,
)

__all__ = [
    "BuildWorkspace",
    "TranslationResult",
    "BuildResult",
    "BuildOrchestrator",
    "create_orchestrator",
]
