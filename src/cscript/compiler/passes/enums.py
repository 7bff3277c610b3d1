"""
Enum Lowering — `enum!` and `enum_flags!` declarations to C.

Each declaration becomes a typedef, a validity predicate over the full
member set and, for STANDARD enums, a runtime assertion helper that the
exhaustive-switch macros call for values no case label handled. The
declaration is recorded in the context's enum registry.

Output stays on the declaration's lines so later source locations hold.
"""

import re

from cscript.diagnostics import StructuralLoweringError
from cscript.observability import get_logger
from cscript.vocabulary import EnumKind, PassKind
from cscript.compiler.context import PassContext
from cscript.compiler.registry import EnumDeclaration
from cscript.compiler.passes.base import Pass, PassResult
from cscript.compiler.scan import (
    find_matching,
    iter_code_matches,
    pad_newlines,
    skip_ws,
    split_top_level,
    strip_comments,
)


logger = get_logger("compiler.enums")

_DECL_RE = re.compile(r"\b(enum_flags|enum)!")
_NAME_RE = re.compile(r"[A-Za-z_]\w*")
_IDENT_RE = re.compile(r"^[A-Za-z_]\w*$")

_KINDS = {
    "enum": EnumKind.STANDARD,
    "enum_flags": EnumKind.FLAGS,
}


def parse_members(body: str) -> list[str]:
    """
    Member identifiers of an enum body, in declaration order.

    `A = 4` contributes `A`; empty items (a trailing comma) are skipped.

    Raises:
        ValueError: An item does not start with a valid identifier
    """
    members = []
    for item in split_top_level(strip_comments(body), ","):
        item = item.strip()
        if not item:
            continue
        ident = item.split("=", 1)[0].strip()
        if not _IDENT_RE.match(ident):
            raise ValueError(f"invalid enum member '{item}'")
        members.append(ident)
    return members


def emit_standard(name: str, body: str, members: list[str], hardline: bool) -> str:
    """Typedef, validity predicate and assertion helper for a closed enum."""
    cases = " ".join(f"case {m}:" for m in members)
    on_invalid = (
        f'fprintf(stderr, "[C-Script hardline] Non-exhaustive switch for enum {name} (value %d)\\n", v); abort();'
        if hardline else
        f'fprintf(stderr, "[C-Script relaxed] Unhandled value %d for enum {name}\\n", v);'
    )
    return (
        f"typedef enum {name} {{{body}}} {name}; "
        f"static inline int cs__enum_is_valid_{name}(int v){{ switch(({name})v){{ {cases} return 1; default: return 0; }} }} "
        f"static inline void cs__enum_assert_{name}(int v){{ if(!cs__enum_is_valid_{name}(v)){{ {on_invalid} }} }}"
    )


def emit_flags(name: str, body: str, members: list[str]) -> str:
    """Typedef, bitmask validity predicate and combine/test helpers."""
    mask = " | ".join(f"(int){m}" for m in members)
    return (
        f"typedef enum {name} {{{body}}} {name}; "
        f"static inline int cs__enum_is_valid_{name}(int v){{ return (v & ~({mask})) == 0; }} "
        f"static inline void cs__enum_assert_{name}(int v){{ (void)v; }} "
        f"static inline {name} {name}_combine({name} a, {name} b){{ return ({name})(a | b); }} "
        f"static inline int {name}_has({name} flags, {name} flag){{ return (flags & flag) == flag; }}"
    )


class EnumLoweringPass(Pass):
    """Lowers enum declarations and populates the registry."""
    name = "enum-lowering"
    kind = PassKind.ENUM_LOWERING

    def run(self, text: str, context: PassContext) -> PassResult:
        out: list[str] = []
        pos = 0

        for m in iter_code_matches(_DECL_RE, text):
            if m.start() < pos:
                continue
            kind = _KINDS[m.group(1)]
            keyword = m.group(0)
            line, col = context.locate(text, m.start())

            name_at = skip_ws(text, m.end())
            name_match = _NAME_RE.match(text, name_at)
            if name_match is None:
                raise StructuralLoweringError(
                    f"malformed {keyword} declaration: expected a type name",
                    line, col, self.name,
                )
            name = name_match.group(0)

            brace = skip_ws(text, name_match.end())
            if brace >= len(text) or text[brace] != "{":
                raise StructuralLoweringError(
                    f"malformed {keyword} declaration '{name}': expected '{{'",
                    line, col, self.name,
                )
            close = find_matching(text, brace)
            if close == -1:
                raise StructuralLoweringError(
                    f"unterminated {keyword} declaration '{name}'",
                    line, col, self.name,
                )

            body = text[brace + 1:close]
            try:
                members = parse_members(body)
            except ValueError as e:
                raise StructuralLoweringError(
                    f"{keyword} {name}: {e}", line, col, self.name,
                ) from e
            if not members:
                raise StructuralLoweringError(
                    f"{keyword} {name} declares no members", line, col, self.name,
                )
            duplicates = sorted({x for x in members if members.count(x) > 1})
            if duplicates:
                raise StructuralLoweringError(
                    f"{keyword} {name} repeats members: {' '.join(duplicates)}",
                    line, col, self.name,
                )

            end = close + 1
            semi = skip_ws(text, end)
            if semi < len(text) and text[semi] == ";":
                end = semi + 1

            declaration = EnumDeclaration(name, tuple(members), kind, line)
            try:
                context.registry.declare(declaration)
            except ValueError as e:
                raise StructuralLoweringError(str(e), line, col, self.name) from e

            if kind is EnumKind.FLAGS:
                lowered = emit_flags(name, body, members)
            else:
                lowered = emit_standard(name, body, members, context.hardline)

            out.append(text[pos:m.start()])
            out.append(pad_newlines(text[m.start():end], lowered))
            pos = end
            logger.debug(f"lowered {kind.value} enum {name} ({len(members)} members)")

        out.append(text[pos:])
        return PassResult("".join(out))


def create_enum_pass() -> EnumLoweringPass:
    return EnumLoweringPass()
