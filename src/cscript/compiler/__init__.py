"""
Compiler — Source units, the enum registry and the lowering pipeline.

Turns a C-Script document into a C translation unit body:
1. SourceUnit splits directives from the body
2. PassPipeline runs the lowering passes in fixed order
3. prelude() supplies the macros the lowered body relies on
"""

from cscript.compiler.source import SourceUnit
from cscript.compiler.registry import (
    EnumDeclaration,
    EnumRegistry,
    RegistryFrozenError,
    create_registry,
)
from cscript.compiler.context import PassContext, create_context
from cscript.compiler.passes import (
    Pass,
    PassResult,
    EnumLoweringPass,
    ExhaustivenessCheckPass,
    UnsafeBlockPass,
    PatternLoweringPass,
    SugarLoweringPass,
    SwitchSite,
    builtin_passes,
)
from cscript.compiler.pipeline import (
    PassPipeline,
    PipelineResult,
    PipelineOrderError,
    create_pipeline,
    lower,
)
from cscript.compiler.prelude import (
    PROFILE_ENV_VAR,
    PROFILE_BUILD_MACRO,
    prelude,
    assemble_unit,
)

__all__ = [
    # Source
    "SourceUnit",
    # Registry
    "EnumDeclaration",
    "EnumRegistry",
    "RegistryFrozenError",
    "create_registry",
    # Context
    "PassContext",
    "create_context",
    # Passes
    "Pass",
    "PassResult",
    "EnumLoweringPass",
    "ExhaustivenessCheckPass",
    "UnsafeBlockPass",
    "PatternLoweringPass",
    "SugarLoweringPass",
    "SwitchSite",
    "builtin_passes",
    # Pipeline
    "PassPipeline",
    "PipelineResult",
    "PipelineOrderError",
    "create_pipeline",
    "lower",
    # Prelude
    "PROFILE_ENV_VAR",
    "PROFILE_BUILD_MACRO",
    "prelude",
    "assemble_unit",
]
