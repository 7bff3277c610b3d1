"""
Pass Base Class — The contract every lowering step implements.

A pass receives the current text and the shared context and returns the
rewritten text plus any diagnostics. Built-in passes raise a
`CompilerError` subclass for fatal conditions; plugin passes may instead
return a FATAL diagnostic, which the pipeline turns into an error.

A pass must never match its own output syntax, so running the whole
pipeline on already-lowered text leaves it unchanged.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from cscript.diagnostics import Diagnostic
from cscript.vocabulary import PassKind
from cscript.compiler.context import PassContext


@dataclass
class PassResult:
    """Output of a single pass."""
    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def fatal(self) -> Diagnostic | None:
        """First fatal diagnostic, if any."""
        for d in self.diagnostics:
            if d.is_fatal:
                return d
        return None


class Pass(ABC):
    """
    Abstract base class for pipeline passes.

    Subclasses set `name` and `kind` and implement `run()`.
    """
    name: str = "pass"
    kind: PassKind = PassKind.PLUGIN

    @abstractmethod
    def run(self, text: str, context: PassContext) -> PassResult:
        """Rewrite `text`. Must be deterministic."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, kind={self.kind.value})"
