"""Tests for match → switch lowering."""

import pytest

from cscript.compiler import PatternLoweringPass, create_context
from cscript.diagnostics import StructuralLoweringError


def lower_match(source):
    context = create_context(source)
    return PatternLoweringPass().run(context.source.body, context).text


class TestMatchLowering:
    """Tests for PatternLoweringPass."""

    def test_statement_and_block_arms(self):
        """Alternatives become stacked case labels; `_` becomes default."""
        out = lower_match("match (x) { A | B => f(); C => { g(); } _ => h(); }")

        assert out.startswith("switch (x) {")
        assert "case A: case B: { f(); } break;" in out
        assert "case C: { g(); } break;" in out
        assert "default: { h(); } break;" in out
        assert out.endswith("}")
        assert "match" not in out

    def test_comma_separated_arms(self):
        """Arms may be separated by commas."""
        out = lower_match("match (x) { A => { f(); }, B => g(); }")
        assert "case A: { f(); } break;" in out
        assert "case B: { g(); } break;" in out

    def test_arm_body_captured_verbatim(self):
        """Semicolons and braces inside calls and strings stay in the arm."""
        out = lower_match('match (x) { A => printf("=> ; }", f(a; b)); }')
        assert 'case A: { printf("=> ; }", f(a; b)); } break;' in out

    def test_nested_match(self):
        """A match inside an arm body is lowered recursively."""
        out = lower_match("match (a) { X => { match (b) { Y => h(); } } }")
        assert out.count("switch (") == 2
        assert "case Y: { h(); } break;" in out

    def test_nested_match_as_statement_arm(self):
        """An unbraced nested match ends at its own closing brace."""
        source = "match (a) {\n  1 => match (b) { 2 => x(); _ => y(); }\n  _ => z();\n}"
        out = lower_match(source)

        assert "_ =>" not in out
        assert out.count("switch (") == 2
        assert "default: { y(); } break;" in out
        assert "default: { z(); } break;" in out
        assert out.index("default: { y(); }") < out.index("default: { z(); }")
        assert out.count("\n") == source.count("\n")

    def test_multiline_keeps_lines(self):
        """Line count is preserved."""
        source = "match (n) {\n  1 | 2 => f();\n  _ => {\n    g();\n  }\n}\nint after;"
        out = lower_match(source)
        assert out.count("\n") == source.count("\n")
        assert out.splitlines()[-1] == "int after;"

    def test_plain_call_untouched(self):
        """match(...) without a block is an ordinary call."""
        source = "int r = match(pattern, text);"
        assert lower_match(source) == source

    def test_idempotent(self):
        """Lowered output is not lowered again."""
        once = lower_match("match (x) { A => f(); _ => g(); }")
        assert lower_match(once) == once


class TestMatchErrors:
    """Tests for malformed match statements."""

    @pytest.mark.parametrize("source", [
        "match (x) { A; }",
        "match (x) { | A => f(); }",
        "match (x) { _ => f(); _ => g(); }",
        "match (x) { A => f() }",
        "match (x) { A => { f(); }",
        "match (x) { _ | A => f(); }",
        "match (x) { A => if (c) f() B => g(); }",
    ])
    def test_structural_errors(self, source):
        """Malformed arms are fatal."""
        with pytest.raises(StructuralLoweringError):
            lower_match(source)
