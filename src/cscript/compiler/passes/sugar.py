"""
Sugar Lowering — Softline syntax to plain C.

    fn sq(int x) -> int => x * x;    →  static inline int sq(int x){ return (x * x); }
    fn main(void) -> int {           →  int main(void){
    let n = 3;                       →  const n = 3;
    var int i = 0;                   →  int i = 0;

Hot functions (from the PGO hot set) get the `CS_HOT` attribute; in an
instrumented build every function records its entry with `cs_prof_hit`.
Only active under `@softline on`.
"""

import re

from cscript.diagnostics import StructuralLoweringError
from cscript.observability import get_logger
from cscript.vocabulary import PassKind
from cscript.compiler.context import PassContext
from cscript.compiler.passes.base import Pass, PassResult
from cscript.compiler.scan import (
    find_matching,
    find_top_level,
    iter_code_matches,
    pad_newlines,
)


logger = get_logger("compiler.sugar")

_FN_RE = re.compile(r"\bfn\s+(?P<name>[A-Za-z_]\w*)\s*\(")
_RET_RE = re.compile(r"\s*->\s*(?P<ret>[^={};]+?)\s*(?P<form>=>|\{)")
_LET_RE = re.compile(r"\blet(?P<ws>\s+)")
_VAR_RE = re.compile(r"\bvar(?P<ws>\s+)")


def _probe(name: str, context: PassContext) -> str:
    return f'cs_prof_hit("{name}"); ' if context.instrument else ""


class SugarLoweringPass(Pass):
    """Function-signature rewriting plus `let`/`var` substitution."""
    name = "sugar-lowering"
    kind = PassKind.SUGAR_LOWERING

    def run(self, text: str, context: PassContext) -> PassResult:
        if not context.softline:
            return PassResult(text)
        text = self._lower_functions(text, context)
        text = _substitute(_LET_RE, text, lambda m: "const" + m.group("ws"))
        text = _substitute(_VAR_RE, text, lambda m: "\n" * m.group("ws").count("\n"))
        return PassResult(text)

    def _lower_functions(self, text: str, context: PassContext) -> str:
        out: list[str] = []
        pos = 0
        lowered = 0

        for m in iter_code_matches(_FN_RE, text):
            if m.start() < pos:
                continue
            name = m.group("name")
            paren = m.end() - 1
            close_paren = find_matching(text, paren)
            if close_paren == -1:
                line, col = context.locate(text, m.start())
                raise StructuralLoweringError(
                    f"unterminated parameter list for fn {name}", line, col, self.name,
                )

            ret = _RET_RE.match(text, close_paren + 1)
            if ret is None:
                # Not a signature this pass understands; leave it for the C compiler.
                continue

            args = text[paren + 1:close_paren]
            ret_type = ret.group("ret").strip()
            hot = name in context.hot_set

            if ret.group("form") == "=>":
                semi = find_top_level(text, ";", ret.end())
                if semi == -1:
                    line, col = context.locate(text, m.start())
                    raise StructuralLoweringError(
                        f"unterminated expression body for fn {name}", line, col, self.name,
                    )
                expr = text[ret.end():semi].strip()
                prefix = "static CS_HOT inline" if hot else "static inline"
                replacement = (
                    f"{prefix} {ret_type} {name}({args}){{ "
                    f"{_probe(name, context)}return ({expr}); }}"
                )
                end = semi + 1
            else:
                prefix = "CS_HOT " if hot else ""
                replacement = f"{prefix}{ret_type} {name}({args}){{ {_probe(name, context)}"
                end = ret.end()

            out.append(text[pos:m.start()])
            out.append(pad_newlines(text[m.start():end], replacement))
            pos = end
            lowered += 1

        out.append(text[pos:])
        if lowered:
            logger.debug(f"lowered {lowered} fn signatures (hot set: {len(context.hot_set)})")
        return "".join(out)


def _substitute(pattern: re.Pattern, text: str, replace) -> str:
    out: list[str] = []
    pos = 0
    for m in iter_code_matches(pattern, text):
        out.append(text[pos:m.start()])
        out.append(replace(m))
        pos = m.end()
    out.append(text[pos:])
    return "".join(out)


def create_sugar_pass() -> SugarLoweringPass:
    return SugarLoweringPass()
