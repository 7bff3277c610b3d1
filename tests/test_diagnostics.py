"""
Tests for diagnostics and the compiler error taxonomy.
"""

import pytest

from cscript.diagnostics import (
    Diagnostic,
    CompilerError,
    StructuralLoweringError,
    ExhaustivenessError,
    PluginPassError,
    ToolchainError,
    LearningStoreError,
)
from cscript.vocabulary import BuildStage, DiagnosticCode, Severity


class TestDiagnostic:
    """Tests for Diagnostic values."""

    def test_format_with_location(self):
        """Located diagnostics render as severity:line:col: message."""
        d = Diagnostic.fatal(DiagnosticCode.STRUCTURAL, "unterminated block", "block-lowering", 4, 7)
        assert d.format() == "error:4:7: unterminated block"

    def test_format_without_location(self):
        """Unlocated diagnostics omit line and column."""
        d = Diagnostic.warning(DiagnosticCode.PROFILE_RUN_FAILED, "run exited with 1")
        assert d.format() == "warning: run exited with 1"

    def test_severity_helpers(self):
        """warning() and fatal() set severity."""
        assert Diagnostic.warning(DiagnosticCode.PLUGIN, "x").is_fatal is False
        assert Diagnostic.fatal(DiagnosticCode.PLUGIN, "x").severity is Severity.FATAL


class TestCompilerErrors:
    """Tests for fatal errors."""

    def test_structural_error_is_compiler_error(self):
        """Structural errors carry location and exit code 1."""
        e = StructuralLoweringError("unmatched '{'", 3, 5, "enum-lowering")
        assert isinstance(e, CompilerError)
        assert e.exit_code == 1
        assert str(e) == "3:5: unmatched '{'"

    def test_exhaustiveness_error_lists_missing(self):
        """Message names every missing member in order."""
        e = ExhaustivenessError("Color", ("Green", "Blue"), 9, 3)
        assert e.missing == ("Green", "Blue")
        assert "Color" in e.message
        assert "Missing: Green Blue" in e.message

    def test_to_diagnostic(self):
        """Errors convert to fatal diagnostics with their code."""
        d = ExhaustivenessError("Color", ("Blue",), 2, 1, "exhaustiveness-check").to_diagnostic()
        assert d.is_fatal
        assert d.code is DiagnosticCode.NON_EXHAUSTIVE
        assert d.line == 2
        assert d.pass_name == "exhaustiveness-check"

    def test_plugin_error_from_diagnostic(self):
        """Plugin fatal diagnostics become PluginPassError."""
        d = Diagnostic.fatal(DiagnosticCode.PLUGIN, "bad shader", "shader", 8, 2)
        e = PluginPassError.from_diagnostic(d)
        assert e.line == 8
        assert e.pass_name == "shader"
        assert e.exit_code == 1

    @pytest.mark.parametrize("stage,code", [
        (BuildStage.INSTRUMENTED, 3),
        (BuildStage.FINAL, 4),
    ])
    def test_toolchain_exit_codes(self, stage, code):
        """Toolchain failures map to driver exit codes by stage."""
        e = ToolchainError("build failed", stage=stage, returncode=1)
        assert e.exit_code == code

    def test_learning_store_error_is_not_fatal_type(self):
        """Learning store failures are outside the CompilerError hierarchy."""
        assert not issubclass(LearningStoreError, CompilerError)
