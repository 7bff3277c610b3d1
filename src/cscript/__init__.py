"""
C-Script — Source-to-source compiler driver for the C-Script dialect of C.

Lowers `.csc` documents to C through a fixed pass pipeline, checks
switch exhaustiveness over declared enums, optionally profiles the
program to mark hot functions, and learns build settings across runs.
"""

__version__ = "0.4.0"

from cscript.config import CompileConfig, create_config
from cscript.diagnostics import (
    Diagnostic,
    CompilerError,
    StructuralLoweringError,
    ExhaustivenessError,
    PluginPassError,
    ToolchainError,
    LearningStoreError,
)
from cscript.compiler import (
    SourceUnit,
    Pass,
    PassResult,
    PassPipeline,
    create_pipeline,
    lower,
)
from cscript.orchestrator import (
    BuildOrchestrator,
    BuildResult,
    TranslationResult,
    create_orchestrator,
)

__all__ = [
    "__version__",
    "CompileConfig",
    "create_config",
    "Diagnostic",
    "CompilerError",
    "StructuralLoweringError",
    "ExhaustivenessError",
    "PluginPassError",
    "ToolchainError",
    "LearningStoreError",
    "SourceUnit",
    "Pass",
    "PassResult",
    "PassPipeline",
    "create_pipeline",
    "lower",
    "BuildOrchestrator",
    "BuildResult",
    "TranslationResult",
    "create_orchestrator",
]
