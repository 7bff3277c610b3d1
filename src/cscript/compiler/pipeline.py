"""
Pass Pipeline — Fixed-order composition of lowering passes.

Order: enum lowering → exhaustiveness check → block lowering → pattern
lowering → sugar lowering → plugins. The order is validated when the
pipeline is built. The enum registry is frozen as soon as enum lowering
finishes, so every later pass sees a read-only symbol table.

Running the pipeline on its own output returns that output unchanged: no
built-in pass matches the syntax it emits.
"""

from dataclasses import dataclass, field
from typing import Iterable

from cscript.config import CompileConfig
from cscript.diagnostics import Diagnostic, PluginPassError
from cscript.observability import get_logger, get_metrics
from cscript.vocabulary import Metric, PassKind, TimedPhase
from cscript.compiler.context import PassContext, create_context
from cscript.compiler.registry import EnumRegistry
from cscript.compiler.source import SourceUnit
from cscript.compiler.passes import Pass, builtin_passes


logger = get_logger("compiler.pipeline")


@dataclass
class PipelineResult:
    """Lowered body plus everything collected on the way."""
    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    registry: EnumRegistry | None = None

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_fatal]


class PipelineOrderError(ValueError):
    """Passes were supplied out of the fixed total order."""
    pass


class PassPipeline:
    """
    Runs passes in order over one source unit.

    Fatal conditions propagate as `CompilerError` subclasses. A plugin
    that returns a FATAL diagnostic instead of raising is converted to
    `PluginPassError`.
    """

    def __init__(self, passes: Iterable[Pass]):
        self.passes = list(passes)
        self._validate_order()

    def _validate_order(self) -> None:
        previous: Pass | None = None
        for p in self.passes:
            if previous is not None:
                if p.kind.rank < previous.kind.rank:
                    raise PipelineOrderError(
                        f"pass {p.name!r} ({p.kind.value}) cannot run after "
                        f"{previous.name!r} ({previous.kind.value})"
                    )
                if p.kind is previous.kind and p.kind is not PassKind.PLUGIN:
                    raise PipelineOrderError(
                        f"duplicate {p.kind.value} pass {p.name!r}"
                    )
            previous = p

    def run(self, context: PassContext) -> PipelineResult:
        """Lower `context.source.body`."""
        metrics = get_metrics()
        text = context.source.body
        diagnostics: list[Diagnostic] = []

        with metrics.timed(TimedPhase.PIPELINE):
            for p in self.passes:
                if p.kind is not PassKind.ENUM_LOWERING and not context.registry.frozen:
                    context.registry.freeze()

                result = p.run(text, context)
                metrics.count(Metric.PASSES_RUN)
                diagnostics.extend(result.diagnostics)

                fatal = result.fatal
                if fatal is not None:
                    logger.error(f"pass {p.name} failed: {fatal.message}")
                    raise PluginPassError.from_diagnostic(fatal)

                text = result.text
                logger.debug(f"pass {p.name} done ({len(result.diagnostics)} diagnostics)")

        context.registry.freeze()
        return PipelineResult(text, diagnostics, context.registry)

    def __len__(self) -> int:
        return len(self.passes)

    def __repr__(self) -> str:
        return f"PassPipeline({[p.name for p in self.passes]})"


def create_pipeline(plugins: Iterable[Pass] = ()) -> PassPipeline:
    """Built-in passes followed by `plugins`."""
    plugins = list(plugins)
    for p in plugins:
        if p.kind is not PassKind.PLUGIN:
            raise PipelineOrderError(f"{p.name!r} is not a plugin pass")
    return PassPipeline(builtin_passes() + plugins)


def lower(
    source: SourceUnit | str,
    config: CompileConfig | None = None,
    instrument: bool = False,
    hot_set: Iterable[str] = (),
    pipeline: PassPipeline | None = None,
) -> PipelineResult:
    """One-shot lowering with a fresh context."""
    pipeline = pipeline or create_pipeline()
    context = create_context(source, config, instrument=instrument, hot_set=hot_set)
    return pipeline.run(context)
