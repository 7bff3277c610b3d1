"""
PGO Loop — Two-pass profile-guided lowering.

1. Lower with instrumentation, build, run once with `CS_PROFILE_OUT` set.
2. Read the flushed counts, select the hot set.
3. Lower again with the hot set so hot functions get `CS_HOT`.

An instrumented build failure is fatal. A non-zero (or timed-out)
instrumented run is only a warning: the loop continues with whatever
profile was written, possibly none.
"""

from dataclasses import dataclass, field
from pathlib import Path

from cscript.config import CompileConfig, DEFAULT_HOT_SET_SIZE, DEFAULT_PROFILE_TIMEOUT_SECONDS
from cscript.diagnostics import Diagnostic, ToolchainError
from cscript.observability import get_logger, get_metrics
from cscript.vocabulary import BuildStage, DiagnosticCode, Metric, TimedPhase
from cscript.compiler import (
    PROFILE_ENV_VAR,
    PassPipeline,
    SourceUnit,
    assemble_unit,
    create_context,
    create_pipeline,
)
from cscript.learning import BuildArm
from cscript.toolchain import TIMEOUT_EXIT_CODE, Toolchain
from cscript.pgo.profile import ProfileSample, read_profile_counts
from cscript.pgo.hotset import HotSet, select_hot_set


logger = get_logger("pgo.loop")

PROFILE_FILENAME = "profile.txt"
INSTRUMENTED_FILENAME = "instrumented"


@dataclass
class PGOResult:
    """Final lowering plus the profile that shaped it."""
    hot_set: HotSet
    sample: ProfileSample
    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    run_exit_code: int = 0


class PGOLoop:
    """Runs the instrumented pass, collects the profile, runs the final pass."""

    def __init__(
        self,
        toolchain: Toolchain,
        pipeline: PassPipeline | None = None,
        hot_set_size: int = DEFAULT_HOT_SET_SIZE,
        timeout: float | None = DEFAULT_PROFILE_TIMEOUT_SECONDS,
    ):
        self.toolchain = toolchain
        self.pipeline = pipeline or create_pipeline()
        self.hot_set_size = hot_set_size
        self.timeout = timeout

    def run(
        self,
        source: SourceUnit,
        config: CompileConfig,
        workdir: Path,
        arm: BuildArm | None = None,
    ) -> PGOResult:
        """
        Raises:
            CompilerError: Lowering failed in either pass
            ToolchainError: The instrumented build failed (stage INSTRUMENTED)
        """
        metrics = get_metrics()
        workdir = Path(workdir)
        arm = arm or BuildArm.from_config(config)
        diagnostics: list[Diagnostic] = []

        # Pass 1: instrumented
        instrumented = self.pipeline.run(create_context(source, config, instrument=True))
        unit = assemble_unit(instrumented.text, config.hardline_mode)

        metrics.count(Metric.BUILDS)
        try:
            with metrics.timed(TimedPhase.INSTRUMENTED_BUILD):
                artifact = self.toolchain.build(
                    unit, arm, config,
                    output=workdir / INSTRUMENTED_FILENAME,
                    workdir=workdir,
                    stage=BuildStage.INSTRUMENTED,
                )
        except ToolchainError:
            metrics.count(Metric.BUILDS_FAILED)
            raise

        profile_path = workdir / PROFILE_FILENAME
        profile_path.unlink(missing_ok=True)
        with metrics.timed(TimedPhase.PROFILE_RUN):
            code = self.toolchain.run(
                artifact,
                env={PROFILE_ENV_VAR: str(profile_path)},
                timeout=self.timeout,
                cwd=workdir,
            )
        if code != 0:
            metrics.count(Metric.PROFILE_RUNS_FAILED)
            if code == TIMEOUT_EXIT_CODE:
                message = f"instrumented run timed out after {self.timeout}s; continuing with partial profile"
            else:
                message = f"instrumented run exited with {code}; continuing with partial profile"
            logger.warning(message)
            diagnostics.append(Diagnostic.warning(DiagnosticCode.PROFILE_RUN_FAILED, message))

        # Profile collection and hot-set selection
        sample = read_profile_counts(profile_path)
        hot_set = select_hot_set(sample, self.hot_set_size)
        metrics.count(Metric.HOT_FUNCTIONS, len(hot_set))
        logger.info(f"profile: {len(sample)} symbols, hot set {list(hot_set)}")

        # Pass 2: final
        final = self.pipeline.run(create_context(source, config, hot_set=hot_set.symbols))
        diagnostics.extend(final.diagnostics)

        return PGOResult(hot_set, sample, final.text, diagnostics, run_exit_code=code)


def create_pgo_loop(
    toolchain: Toolchain,
    config: CompileConfig,
    pipeline: PassPipeline | None = None,
) -> PGOLoop:
    """Loop sized and timed from `config`."""
    return PGOLoop(
        toolchain,
        pipeline=pipeline,
        hot_set_size=config.hot_set_size,
        timeout=config.profile_timeout_seconds,
    )
