"""
Pattern Lowering — `match` statements to `switch`.

    match (expr) {
        A | B => stmt;
        C     => { block }
        _     => other();
    }

becomes

    switch (expr) {
        case A: case B: { stmt; } break;
        case C: { block } break;
        default: { other(); } break;
    }

Arm bodies are captured verbatim with the balanced scanner; a `match`
nested inside an arm body is lowered recursively. `match(...)` not
followed by `{` is an ordinary call and is left alone.
"""

import re
from dataclasses import dataclass

from cscript.diagnostics import StructuralLoweringError
from cscript.vocabulary import PassKind
from cscript.compiler.context import PassContext
from cscript.compiler.passes.base import Pass, PassResult
from cscript.compiler.scan import (
    find_matching,
    find_top_level,
    iter_code_matches,
    pad_newlines,
    skip_ws,
    split_top_level,
    strip_comments,
)


_MATCH_RE = re.compile(r"(?<![.>])\bmatch\s*\(")

WILDCARD = "_"


@dataclass
class MatchArm:
    patterns: list[str]
    body_start: int
    body_end: int
    braced: bool

    @property
    def is_default(self) -> bool:
        return self.patterns == [WILDCARD]


class PatternLoweringPass(Pass):
    """Rewrites `match` statements into `switch` statements."""
    name = "pattern-lowering"
    kind = PassKind.PATTERN_LOWERING

    def run(self, text: str, context: PassContext) -> PassResult:
        return PassResult(self._lower(text, 0, len(text), context))

    def _lower(self, text: str, start: int, end: int, context: PassContext) -> str:
        out: list[str] = []
        pos = start

        for m in iter_code_matches(_MATCH_RE, text, start, end):
            if m.start() < pos:
                continue
            paren = m.end() - 1
            close_paren = find_matching(text, paren)
            if close_paren == -1 or close_paren >= end:
                line, col = context.locate(text, m.start())
                raise StructuralLoweringError(
                    "unterminated match scrutinee", line, col, self.name,
                )

            brace = skip_ws(text, close_paren + 1)
            if brace >= end or text[brace] != "{":
                continue
            close = find_matching(text, brace)
            if close == -1 or close >= end:
                line, col = context.locate(text, m.start())
                raise StructuralLoweringError(
                    "unterminated match block", line, col, self.name,
                )

            out.append(text[pos:m.start()])
            out.append(pad_newlines(
                text[m.start():paren], "switch "
            ))
            out.append(text[paren:close_paren + 1])
            out.append(pad_newlines(text[close_paren + 1:brace + 1], " {"))
            out.append(self._lower_arms(text, brace + 1, close, context))
            out.append("}")
            pos = close + 1

        out.append(text[pos:end])
        return "".join(out)

    def _lower_arms(self, text: str, start: int, end: int, context: PassContext) -> str:
        out: list[str] = []
        seen_default = False
        pos = start

        while True:
            if not strip_comments(text[pos:end]).strip():
                out.append(_newlines(text[pos:end]))
                break

            arm_at = skip_ws(text, pos)
            line, col = context.locate(text, arm_at)
            arm = self._parse_arm(text, pos, end, line, col)

            if arm.is_default:
                if seen_default:
                    raise StructuralLoweringError(
                        "match has more than one '_' arm", line, col, self.name,
                    )
                seen_default = True
                labels = "default:"
            else:
                labels = " ".join(f"case {p}:" for p in arm.patterns)

            out.append(_newlines(text[pos:arm_at]) + " ")
            out.append(pad_newlines(text[arm_at:arm.body_start], labels + " "))
            body = self._lower(text, arm.body_start, arm.body_end, context)
            if arm.braced:
                out.append(body)
            else:
                out.append("{ " + body + " }")
            out.append(" break;")

            pos = arm.body_end
            after = skip_ws(text, pos)
            if after < end and text[after] in ",;":
                out.append(_newlines(text[pos:after]))
                pos = after + 1

        return "".join(out)

    def _parse_arm(self, text: str, pos: int, end: int, line: int, col: int) -> MatchArm:
        arrow = find_top_level(text, "=>", pos, end)
        if arrow == -1:
            raise StructuralLoweringError(
                "match arm without '=>'", line, col, self.name,
            )

        patterns = [p.strip() for p in split_top_level(strip_comments(text[pos:arrow]), "|")]
        if not patterns or any(not p for p in patterns):
            raise StructuralLoweringError(
                "match arm has an empty pattern", line, col, self.name,
            )
        if WILDCARD in patterns and len(patterns) > 1:
            raise StructuralLoweringError(
                "'_' cannot be combined with other patterns", line, col, self.name,
            )

        body_start = skip_ws(text, arrow + 2)
        if body_start < end and text[body_start] == "{":
            close = find_matching(text, body_start)
            if close == -1 or close >= end:
                raise StructuralLoweringError(
                    "unterminated match arm block", line, col, self.name,
                )
            return MatchArm(patterns, body_start, close + 1, braced=True)

        nested = self._nested_match_end(text, body_start, end, line, col)
        if nested != -1:
            return MatchArm(patterns, body_start, nested, braced=False)

        semi = find_top_level(text, ";", body_start, end)
        if semi == -1:
            raise StructuralLoweringError(
                "unterminated match arm statement", line, col, self.name,
            )
        if find_top_level(text, "=>", body_start, semi) != -1:
            raise StructuralLoweringError(
                "match arm statement runs into the next arm", line, col, self.name,
            )
        return MatchArm(patterns, body_start, semi + 1, braced=False)

    def _nested_match_end(self, text: str, pos: int, end: int, line: int, col: int) -> int:
        """End of a `match (...) { ... }` arm body starting at pos, or -1."""
        m = _MATCH_RE.match(text, pos)
        if m is None:
            return -1
        close_paren = find_matching(text, m.end() - 1)
        if close_paren == -1 or close_paren >= end:
            return -1
        brace = skip_ws(text, close_paren + 1)
        if brace >= end or text[brace] != "{":
            return -1
        close = find_matching(text, brace)
        if close == -1 or close >= end:
            raise StructuralLoweringError(
                "unterminated match block", line, col, self.name,
            )
        return close + 1


def _newlines(s: str) -> str:
    return "\n" * s.count("\n")


def create_match_pass() -> PatternLoweringPass:
    return PatternLoweringPass()
