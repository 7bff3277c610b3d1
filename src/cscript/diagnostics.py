"""
Diagnostics — Warnings, fatal errors and the compiler exception taxonomy.

Fatal conditions are raised as `CompilerError` subclasses and unwind to the
orchestrator. Warnings travel as `Diagnostic` values next to a successful
result.
"""

from dataclasses import dataclass

from cscript.vocabulary import Severity, DiagnosticCode, BuildStage


@dataclass(frozen=True)
class Diagnostic:
    """Single message produced while compiling."""
    severity: Severity
    code: DiagnosticCode
    message: str
    pass_name: str | None = None
    line: int | None = None
    col: int | None = None

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def format(self) -> str:
        """Render as `error:L:C: message` or `warning: message`."""
        if self.line is not None:
            return f"{self.severity.value}:{self.line}:{self.col or 1}: {self.message}"
        return f"{self.severity.value}: {self.message}"

    @classmethod
    def warning(
        cls,
        code: DiagnosticCode,
        message: str,
        pass_name: str | None = None,
        line: int | None = None,
        col: int | None = None,
    ) -> "Diagnostic":
        return cls(Severity.WARNING, code, message, pass_name, line, col)

    @classmethod
    def fatal(
        cls,
        code: DiagnosticCode,
        message: str,
        pass_name: str | None = None,
        line: int | None = None,
        col: int | None = None,
    ) -> "Diagnostic":
        return cls(Severity.FATAL, code, message, pass_name, line, col)


# =============================================================================
# FATAL ERRORS
# =============================================================================

class CompilerError(Exception):
    """
    Base class for every fatal compile failure.

    Carries an optional source location and the process exit code the
    command-line driver should use.
    """
    code = DiagnosticCode.STRUCTURAL
    exit_code = 1

    def __init__(
        self,
        message: str,
        line: int | None = None,
        col: int | None = None,
        pass_name: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col
        self.pass_name = pass_name

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic.fatal(
            self.code, self.message, self.pass_name, self.line, self.col
        )

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.line}:{self.col or 1}: {self.message}"
        return self.message


class StructuralLoweringError(CompilerError):
    """Unmatched delimiter, malformed declaration or mismatched markers."""
    code = DiagnosticCode.STRUCTURAL


class ExhaustivenessError(CompilerError):
    """A switch site over a STANDARD enum misses one or more members."""
    code = DiagnosticCode.NON_EXHAUSTIVE

    def __init__(
        self,
        enum_name: str,
        missing: tuple[str, ...],
        line: int | None = None,
        col: int | None = None,
        pass_name: str | None = None,
    ):
        self.enum_name = enum_name
        self.missing = tuple(missing)
        super().__init__(
            f"Non-exhaustive switch for enum '{enum_name}'. "
            f"Missing: {' '.join(self.missing)}",
            line=line,
            col=col,
            pass_name=pass_name,
        )


class PluginPassError(CompilerError):
    """A plugin pass reported a fatal diagnostic."""
    code = DiagnosticCode.PLUGIN

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> "PluginPassError":
        return cls(
            diagnostic.message,
            line=diagnostic.line,
            col=diagnostic.col,
            pass_name=diagnostic.pass_name,
        )


class ToolchainError(CompilerError):
    """External compile/link failure."""
    code = DiagnosticCode.TOOLCHAIN

    def __init__(
        self,
        message: str,
        stage: BuildStage = BuildStage.FINAL,
        returncode: int | None = None,
        command: list[str] | None = None,
        output: str = "",
    ):
        super().__init__(message)
        self.stage = stage
        self.returncode = returncode
        self.command = command or []
        self.output = output

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return 3 if self.stage is BuildStage.INSTRUMENTED else 4


# =============================================================================
# NON-FATAL ERRORS
# =============================================================================

class LearningStoreError(Exception):
    """Persisted arm statistics could not be loaded or saved."""
    pass
