"""Tests for softline sugar lowering."""

import pytest

from cscript.compiler import SugarLoweringPass, create_context
from cscript.config import create_config
from cscript.diagnostics import StructuralLoweringError


def lower_sugar(source, config=None, instrument=False, hot_set=()):
    context = create_context(source, config, instrument=instrument, hot_set=hot_set)
    return SugarLoweringPass().run(context.source.body, context).text


class TestFunctionSignatures:
    """Tests for fn rewriting."""

    def test_expression_function(self):
        """Expression-bodied fn becomes a static inline function."""
        out = lower_sugar("fn sq(int x) -> int => x * x;")
        assert out == "static inline int sq(int x){ return (x * x); }"

    def test_block_function_header(self):
        """Block fn header becomes a C function header."""
        out = lower_sugar("fn main(void) -> int {\n  return 0;\n}")
        assert out == "int main(void){ \n  return 0;\n}"

    def test_hot_functions_get_attribute(self):
        """Hot functions are marked CS_HOT."""
        source = "fn sq(int x) -> int => x * x;\nfn main(void) -> int {\n}"
        out = lower_sugar(source, hot_set=["sq", "main"])
        assert "static CS_HOT inline int sq(int x)" in out
        assert "CS_HOT int main(void){ " in out

    def test_cold_functions_unmarked(self):
        """Functions outside the hot set have no attribute."""
        out = lower_sugar("fn cold(void) -> void {\n}", hot_set=["other"])
        assert "CS_HOT" not in out

    def test_instrumentation_probe(self):
        """Instrumented builds record every function entry."""
        source = "fn sq(int x) -> int => x * x;\nfn main(void) -> int {\n}"
        out = lower_sugar(source, instrument=True)
        assert 'static inline int sq(int x){ cs_prof_hit("sq"); return (x * x); }' in out
        assert 'int main(void){ cs_prof_hit("main"); ' in out

    def test_nested_parens_in_parameters(self):
        """Parameter lists are balanced, not cut at the first ')'."""
        out = lower_sugar("fn apply(int (*f)(int), int x) -> int => f(x);")
        assert out == "static inline int apply(int (*f)(int), int x){ return (f(x)); }"

    def test_multiline_signature_keeps_lines(self):
        """Line count is preserved."""
        source = "fn add(int a,\n       int b)\n  -> int\n  => a + b;\nint after;"
        out = lower_sugar(source)
        assert out.count("\n") == source.count("\n")
        assert out.splitlines()[-1] == "int after;"

    def test_unterminated_expression(self):
        """Expression functions need a terminating semicolon."""
        with pytest.raises(StructuralLoweringError):
            lower_sugar("fn f(void) -> int => 1")

    def test_unrecognised_fn_left_alone(self):
        """fn without a return arrow is not rewritten."""
        source = "fn f(void);"
        assert lower_sugar(source) == source


class TestKeywordSubstitution:
    """Tests for let/var."""

    def test_let_becomes_const(self):
        """let introduces a const binding."""
        assert lower_sugar("let int n = 3;") == "const int n = 3;"

    def test_var_is_erased(self):
        """var disappears."""
        assert lower_sugar("var int total = 0;") == "int total = 0;"

    def test_literals_and_identifiers_untouched(self):
        """Strings, comments and longer identifiers are left alone."""
        source = 'puts("let var"); // var x\nint outlet = 1, variance = 2;'
        assert lower_sugar(source) == source


class TestSoftlineSwitch:
    """Tests for @softline off."""

    def test_disabled(self):
        """Nothing is rewritten when softline is off."""
        source = "fn sq(int x) -> int => x * x;\nlet int n = 1;"
        assert lower_sugar(source, create_config(softline=False)) == source

    def test_idempotent(self):
        """Lowered output is not lowered again."""
        once = lower_sugar("fn sq(int x) -> int => x * x;\nlet int n = sq(2);", instrument=True)
        assert lower_sugar(once, instrument=True) == once
