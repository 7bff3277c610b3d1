"""
Config — Compile settings and `@directive` ingestion.
"""

from cscript.config.models import (
    DEFAULT_HOT_SET_SIZE,
    DEFAULT_PROFILE_TIMEOUT_SECONDS,
    DEFAULT_LEARNING_STORE,
    CompileConfig,
    create_config,
)
from cscript.config.directives import (
    Directive,
    parse_directive_line,
    split_directives,
    apply_directives,
)

__all__ = [
    "DEFAULT_HOT_SET_SIZE",
    "DEFAULT_PROFILE_TIMEOUT_SECONDS",
    "DEFAULT_LEARNING_STORE",
    "CompileConfig",
    "create_config",
    "Directive",
    "parse_directive_line",
    "split_directives",
    "apply_directives",
]
