"""
Passes — Built-in lowering passes and the pass contract.

Pipeline order:
1. EnumLoweringPass          (populates the enum registry)
2. ExhaustivenessCheckPass   (reads the registry)
3. UnsafeBlockPass
4. PatternLoweringPass
5. SugarLoweringPass
6. plugin passes
"""

from cscript.compiler.passes.base import Pass, PassResult
from cscript.compiler.passes.enums import (
    EnumLoweringPass,
    parse_members,
    create_enum_pass,
)
from cscript.compiler.passes.exhaustiveness import (
    SwitchSite,
    ExhaustivenessCheckPass,
    find_switch_sites,
    create_exhaustiveness_pass,
)
from cscript.compiler.passes.blocks import UnsafeBlockPass, create_block_pass
from cscript.compiler.passes.match import PatternLoweringPass, create_match_pass
from cscript.compiler.passes.sugar import SugarLoweringPass, create_sugar_pass


def builtin_passes() -> list[Pass]:
    """Fresh instances of the built-in passes, in pipeline order."""
    return [
        create_enum_pass(),
        create_exhaustiveness_pass(),
        create_block_pass(),
        create_match_pass(),
        create_sugar_pass(),
    ]


__all__ = [
    "Pass",
    "PassResult",
    "EnumLoweringPass",
    "parse_members",
    "create_enum_pass",
    "SwitchSite",
    "ExhaustivenessCheckPass",
    "find_switch_sites",
    "create_exhaustiveness_pass",
    "UnsafeBlockPass",
    "create_block_pass",
    "PatternLoweringPass",
    "create_match_pass",
    "SugarLoweringPass",
    "create_sugar_pass",
    "builtin_passes",
]
