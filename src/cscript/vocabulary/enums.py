"""
Vocabulary enums — the shared language of the C-Script compiler.

All enumerated types referenced by passes, diagnostics, the build
learner and the toolchain driver.
"""

from enum import Enum


# =============================================================================
# DECLARATIONS
# =============================================================================

class EnumKind(str, Enum):
    """
    Domain kind of an `enum!` / `enum_flags!` declaration.

    STANDARD enums are closed domains and must be handled exhaustively.
    FLAGS enums are bitmasks; members combine, so exhaustiveness is exempt.
    """
    STANDARD = "STANDARD"
    FLAGS = "FLAGS"

    @property
    def requires_exhaustive(self) -> bool:
        return self is EnumKind.STANDARD


# =============================================================================
# PASSES
# =============================================================================

class PassKind(str, Enum):
    """
    Pass families, declared in pipeline order.

    The pipeline only accepts passes whose kinds appear in this order.
    """
    ENUM_LOWERING = "ENUM_LOWERING"
    EXHAUSTIVENESS_CHECK = "EXHAUSTIVENESS_CHECK"
    BLOCK_LOWERING = "BLOCK_LOWERING"
    PATTERN_LOWERING = "PATTERN_LOWERING"
    SUGAR_LOWERING = "SUGAR_LOWERING"
    PLUGIN = "PLUGIN"

    @property
    def rank(self) -> int:
        return list(PassKind).index(self)


# =============================================================================
# DIAGNOSTICS
# =============================================================================

class Severity(str, Enum):
    """Diagnostic severity. FATAL aborts the pipeline."""
    WARNING = "warning"
    FATAL = "error"


class DiagnosticCode(str, Enum):
    """Stable identifiers for every diagnostic the compiler emits."""
    UNKNOWN_DIRECTIVE = "unknown-directive"
    BAD_DIRECTIVE_VALUE = "bad-directive-value"
    STRUCTURAL = "structural"
    NON_EXHAUSTIVE = "non-exhaustive"
    UNCHECKED_SWITCH = "unchecked-switch"
    PLUGIN = "plugin"
    TOOLCHAIN = "toolchain"
    PROFILE_RUN_FAILED = "profile-run-failed"
    LEARNING_STORE_UNAVAILABLE = "learning-store-unavailable"


# =============================================================================
# BUILD
# =============================================================================

class OptLevel(str, Enum):
    """Optimization levels accepted by `@opt` and `-O`."""
    O0 = "O0"
    O1 = "O1"
    O2 = "O2"
    O3 = "O3"
    SIZE = "size"
    MAX = "max"


class BuildStage(str, Enum):
    """Which toolchain invocation a build belongs to."""
    INSTRUMENTED = "instrumented"
    FINAL = "final"


# =============================================================================
# METRICS
# =============================================================================

class Metric(str, Enum):
    """Events counted during a compile."""
    COMPILES = "compiles"
    COMPILES_FAILED = "compiles_failed"
    PASSES_RUN = "passes_run"
    BUILDS = "builds"
    BUILDS_FAILED = "builds_failed"
    PROFILE_RUNS_FAILED = "profile_runs_failed"
    HOT_FUNCTIONS = "hot_functions"
    LEARNING_STORE_ERRORS = "learning_store_errors"


class TimedPhase(str, Enum):
    """Phases whose wall time is recorded."""
    PIPELINE = "pipeline"
    INSTRUMENTED_BUILD = "instrumented_build"
    PROFILE_RUN = "profile_run"
    FINAL_BUILD = "final_build"
