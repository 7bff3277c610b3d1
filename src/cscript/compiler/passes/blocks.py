"""
Block Lowering — `@unsafe { ... }` regions.

    @unsafe { a = b; }   →   { CS_UNSAFE_BEGIN; a = b; CS_UNSAFE_END; }

The region end is found with the balanced scanner, so braces inside the
region (nested blocks, string literals) never close it early. Nested
`@unsafe` regions are lowered recursively.
"""

import re

from cscript.diagnostics import StructuralLoweringError
from cscript.vocabulary import PassKind
from cscript.compiler.context import PassContext
from cscript.compiler.passes.base import Pass, PassResult
from cscript.compiler.scan import find_matching, iter_code_matches, pad_newlines, skip_ws


_UNSAFE_RE = re.compile(r"@unsafe\b")


class UnsafeBlockPass(Pass):
    """Wraps `@unsafe` regions in the relaxed-warnings pragmas."""
    name = "block-lowering"
    kind = PassKind.BLOCK_LOWERING

    def run(self, text: str, context: PassContext) -> PassResult:
        return PassResult(self._lower(text, 0, len(text), context))

    def _lower(self, text: str, start: int, end: int, context: PassContext) -> str:
        out: list[str] = []
        pos = start

        for m in iter_code_matches(_UNSAFE_RE, text, start, end):
            if m.start() < pos:
                continue
            line, col = context.locate(text, m.start())

            brace = skip_ws(text, m.end())
            if brace >= end or text[brace] != "{":
                raise StructuralLoweringError(
                    "@unsafe must be followed by a block", line, col, self.name,
                )
            close = find_matching(text, brace)
            if close == -1 or close >= end:
                raise StructuralLoweringError(
                    "unterminated @unsafe block", line, col, self.name,
                )

            inner = self._lower(text, brace + 1, close, context)
            out.append(text[pos:m.start()])
            out.append(pad_newlines(text[m.start():brace], "{ CS_UNSAFE_BEGIN;"))
            out.append(inner)
            out.append(" CS_UNSAFE_END; }")
            pos = close + 1

        out.append(text[pos:end])
        return "".join(out)


def create_block_pass() -> UnsafeBlockPass:
    return UnsafeBlockPass()
