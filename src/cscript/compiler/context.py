"""
Pass Context — Shared, mutable state threaded through the pipeline.

Carries the source unit, the enum registry and the per-run lowering
switches (instrumentation, hot functions).
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from cscript.config import CompileConfig
from cscript.compiler.source import SourceUnit
from cscript.compiler.registry import EnumRegistry


@dataclass
class PassContext:
    """
    Complete context for one pipeline run.

    A fresh context is built for every run; the PGO loop runs the
    pipeline twice with two contexts.
    """
    source: SourceUnit
    registry: EnumRegistry = field(default_factory=EnumRegistry)

    # Lowering switches
    hardline: bool = True
    softline: bool = True
    instrument: bool = False
    hot_set: frozenset[str] = frozenset()

    # Free-form settings for plugin passes
    options: dict[str, Any] = field(default_factory=dict)

    def locate(self, text: str, pos: int) -> tuple[int, int]:
        """Original (line, col) of offset `pos` in a lowering of the body."""
        return self.source.location(text, pos)


def create_context(
    source: SourceUnit | str,
    config: CompileConfig | None = None,
    instrument: bool = False,
    hot_set: Iterable[str] = (),
    **options: Any,
) -> PassContext:
    """Factory for pass contexts."""
    if isinstance(source, str):
        source = SourceUnit.from_text(source)
    config = config or CompileConfig()
    return PassContext(
        source=source,
        hardline=config.hardline_mode,
        softline=config.softline,
        instrument=instrument,
        hot_set=frozenset(hot_set),
        options=dict(options),
    )
