"""
Build Orchestrator — Unified API for one compiler invocation.

Sequences directive ingestion, lowering, the optional PGO loop, the
optional adaptive arm choice, the final toolchain build and the learning
update. Fatal errors are caught here and returned as failed results;
intermediate artifacts are removed on every path.
"""

import random
import time
from dataclasses import dataclass, field
from pathlib import Path

from cscript.config import CompileConfig, apply_directives
from cscript.diagnostics import CompilerError, Diagnostic, LearningStoreError, ToolchainError
from cscript.observability import MetricsSnapshot, collect_metrics, get_logger, get_metrics, invocation
from cscript.vocabulary import BuildStage, DiagnosticCode, Metric, TimedPhase
from cscript.compiler import (
    PassPipeline,
    SourceUnit,
    assemble_unit,
    create_context,
    create_pipeline,
)
from cscript.pgo import HotSet, create_pgo_loop
from cscript.learning import (
    AdaptiveSelector,
    BuildArm,
    LearningStore,
    create_learning_store,
)
from cscript.toolchain import Toolchain, create_toolchain
from cscript.orchestrator.workspace import BuildWorkspace


logger = get_logger("orchestrator")


# =============================================================================
# RESULTS
# =============================================================================

@dataclass
class TranslationResult:
    """Result of lowering without building."""
    success: bool
    text: str = ""
    body: str = ""
    config: CompileConfig | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    error: CompilerError | None = None
    exit_code: int = 0
    metrics: MetricsSnapshot | None = None


@dataclass
class BuildResult:
    """Result of a full build."""
    success: bool
    artifact: Path | None = None
    arm: BuildArm | None = None
    hot_set: HotSet = field(default_factory=HotSet)
    text: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)
    duration_ms: float = 0.0
    error: CompilerError | None = None
    exit_code: int = 0
    explored: bool = False
    workspace: Path | None = None
    metrics: MetricsSnapshot | None = None

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_fatal]


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class BuildOrchestrator:
    """
    Drives one compile from source text to executable.

    Usage:
        orchestrator = create_orchestrator()
        result = orchestrator.build(source_text, create_config(profile=True))

    Collaborators are injectable; when omitted, the toolchain and the
    learning store are created from each call's config.
    """

    def __init__(
        self,
        toolchain: Toolchain | None = None,
        store: LearningStore | None = None,
        pipeline: PassPipeline | None = None,
        rng: random.Random | None = None,
    ):
        self.toolchain = toolchain
        self.store = store
        self.pipeline = pipeline or create_pipeline()
        self.rng = rng

    def _prepare(
        self,
        text: str,
        config: CompileConfig | None,
        name: str,
        diagnostics: list[Diagnostic],
    ) -> tuple[SourceUnit, CompileConfig]:
        source = SourceUnit.from_text(text, name=name)
        config, directive_diagnostics = apply_directives(
            config or CompileConfig(), list(source.directives)
        )
        diagnostics.extend(directive_diagnostics)
        return source, config

    def translate(
        self,
        text: str,
        config: CompileConfig | None = None,
        name: str = "<input>",
    ) -> TranslationResult:
        """Lower to a C translation unit without invoking a toolchain."""
        diagnostics: list[Diagnostic] = []
        with invocation(name), collect_metrics() as metrics:
            metrics.count(Metric.COMPILES)
            try:
                source, config = self._prepare(text, config, name, diagnostics)
                result = self.pipeline.run(create_context(source, config))
            except CompilerError as e:
                metrics.count(Metric.COMPILES_FAILED)
                logger.error(f"{name}: {e}")
                return TranslationResult(
                    success=False,
                    config=config,
                    diagnostics=diagnostics + [e.to_diagnostic()],
                    error=e,
                    exit_code=e.exit_code,
                    metrics=metrics.snapshot(),
                )

            diagnostics.extend(result.diagnostics)
            return TranslationResult(
                success=True,
                text=assemble_unit(result.text, config.hardline_mode),
                body=result.text,
                config=config,
                diagnostics=diagnostics,
                metrics=metrics.snapshot(),
            )

    def build(
        self,
        text: str,
        config: CompileConfig | None = None,
        output: str | Path | None = None,
        name: str = "<input>",
    ) -> BuildResult:
        """
        Compile `text` to an executable.

        `output` overrides the configured (or `@out`) path.
        """
        diagnostics: list[Diagnostic] = []
        started = time.perf_counter()

        with invocation(name), collect_metrics() as metrics:
            metrics.count(Metric.COMPILES)
            arm: BuildArm | None = None
            hot_set = HotSet()
            explored = False
            workspace_path: Path | None = None

            try:
                source, config = self._prepare(text, config, name, diagnostics)
                toolchain = self.toolchain or create_toolchain(config)
                baseline = BuildArm.from_config(config)

                selector: AdaptiveSelector | None = None
                arm = baseline
                if config.adaptive:
                    selector = self._selector(config)
                    selection = selector.choose()
                    arm = selection.arm
                    explored = selection.explored
                    diagnostics.extend(selection.diagnostics)

                with BuildWorkspace(keep=config.keep_temps) as workspace:
                    if config.keep_temps:
                        workspace_path = workspace.path

                    if config.profile:
                        pgo = create_pgo_loop(toolchain, config, self.pipeline).run(
                            source, config, workspace.path, arm=baseline,
                        )
                        body = pgo.text
                        hot_set = pgo.hot_set
                        diagnostics.extend(pgo.diagnostics)
                    else:
                        lowered = self.pipeline.run(create_context(source, config))
                        body = lowered.text
                        diagnostics.extend(lowered.diagnostics)

                    unit = assemble_unit(body, config.hardline_mode)
                    target = Path(output) if output is not None else Path(config.out)
                    artifact = self._final_build(
                        toolchain, selector, unit, arm, config, target, workspace.path, diagnostics,
                    )

            except CompilerError as e:
                metrics.count(Metric.COMPILES_FAILED)
                logger.error(f"{name}: {e}")
                return BuildResult(
                    success=False,
                    arm=arm,
                    hot_set=hot_set,
                    diagnostics=diagnostics + [e.to_diagnostic()],
                    duration_ms=(time.perf_counter() - started) * 1000,
                    error=e,
                    exit_code=e.exit_code,
                    explored=explored,
                    workspace=workspace_path,
                    metrics=metrics.snapshot(),
                )

            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(f"built {artifact} with {arm.key} in {duration_ms:.0f} ms")
            return BuildResult(
                success=True,
                artifact=artifact,
                arm=arm,
                hot_set=hot_set,
                text=unit,
                diagnostics=diagnostics,
                duration_ms=duration_ms,
                explored=explored,
                workspace=workspace_path,
                metrics=metrics.snapshot(),
            )

    def _final_build(
        self,
        toolchain: Toolchain,
        selector: AdaptiveSelector | None,
        unit: str,
        arm: BuildArm,
        config: CompileConfig,
        target: Path,
        workdir: Path,
        diagnostics: list[Diagnostic],
    ) -> Path:
        metrics = get_metrics()
        metrics.count(Metric.BUILDS)
        started = time.perf_counter()
        try:
            artifact = toolchain.build(unit, arm, config, target, workdir, stage=BuildStage.FINAL)
        except ToolchainError:
            elapsed_ms = (time.perf_counter() - started) * 1000
            metrics.count(Metric.BUILDS_FAILED)
            metrics.observe(TimedPhase.FINAL_BUILD, elapsed_ms)
            if selector is not None:
                self._record(selector, arm, False, elapsed_ms, diagnostics)
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        metrics.observe(TimedPhase.FINAL_BUILD, elapsed_ms)
        if selector is not None:
            self._record(selector, arm, True, elapsed_ms, diagnostics)
        return artifact

    def _selector(self, config: CompileConfig) -> AdaptiveSelector:
        if self.store is None:
            self.store = create_learning_store(config.resolved_learning_store_path())
        return AdaptiveSelector(self.store, rng=self.rng)

    def _record(
        self,
        selector: AdaptiveSelector,
        arm: BuildArm,
        success: bool,
        duration_ms: float,
        diagnostics: list[Diagnostic],
    ) -> None:
        try:
            selector.record(arm, success, duration_ms)
        except LearningStoreError as e:
            message = f"could not record build outcome for {arm.key}: {e}"
            logger.warning(message)
            get_metrics().count(Metric.LEARNING_STORE_ERRORS)
            diagnostics.append(Diagnostic.warning(
                DiagnosticCode.LEARNING_STORE_UNAVAILABLE, message,
            ))


def create_orchestrator(
    toolchain: Toolchain | None = None,
    store: LearningStore | None = None,
    rng: random.Random | None = None,
) -> BuildOrchestrator:
    """Factory for orchestrators."""
    return BuildOrchestrator(toolchain=toolchain, store=store, rng=rng)
