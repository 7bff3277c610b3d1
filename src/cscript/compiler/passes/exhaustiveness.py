"""
Exhaustiveness Check — Static coverage of exhaustive switch sites.

Scans the directive-free body (before any pass could rewrite a marker)
for `CS_SWITCH_EXHAUSTIVE(Type, expr)` … `CS_SWITCH_END(Type, expr)` sites
and compares the `CS_CASE(Ident)` labels against the registry.

Sites are matched with an explicit stack, so adjacent sites and sites over
different types nested inside each other are handled. Nesting a site
inside another site over the same type is rejected as a structural error.
The text passes through unchanged.
"""

import re
from dataclasses import dataclass, field

from cscript.diagnostics import Diagnostic, ExhaustivenessError, StructuralLoweringError
from cscript.observability import get_logger
from cscript.vocabulary import DiagnosticCode, PassKind
from cscript.compiler.context import PassContext
from cscript.compiler.passes.base import Pass, PassResult
from cscript.compiler.scan import iter_code_matches


logger = get_logger("compiler.exhaustiveness")

_MARKER_RE = re.compile(
    r"\b(?P<marker>CS_SWITCH_EXHAUSTIVE|CS_SWITCH_END|CS_CASE)\s*\(\s*(?P<ident>[A-Za-z_]\w*)"
)


@dataclass
class SwitchSite:
    """One open…close region; transient, used only while checking."""
    enum_name: str
    line: int
    col: int
    covered_cases: set[str] = field(default_factory=set)


def find_switch_sites(text: str, context: PassContext) -> list[SwitchSite]:
    """
    Pair every open marker with its close marker.

    Returns completed sites in closing order.

    Raises:
        StructuralLoweringError: Unbalanced, mismatched or same-type nested sites
    """
    stack: list[SwitchSite] = []
    done: list[SwitchSite] = []

    for m in iter_code_matches(_MARKER_RE, text):
        marker = m.group("marker")
        ident = m.group("ident")
        line, col = context.locate(text, m.start())

        if marker == "CS_SWITCH_EXHAUSTIVE":
            if any(site.enum_name == ident for site in stack):
                raise StructuralLoweringError(
                    f"nested exhaustive switches over '{ident}' are not supported",
                    line, col, ExhaustivenessCheckPass.name,
                )
            stack.append(SwitchSite(ident, line, col))
        elif marker == "CS_SWITCH_END":
            if not stack:
                raise StructuralLoweringError(
                    f"CS_SWITCH_END for '{ident}' without a matching CS_SWITCH_EXHAUSTIVE",
                    line, col, ExhaustivenessCheckPass.name,
                )
            site = stack[-1]
            if site.enum_name != ident:
                raise StructuralLoweringError(
                    f"CS_SWITCH_END for '{ident}' closes the switch over '{site.enum_name}' "
                    f"opened at {site.line}:{site.col}",
                    line, col, ExhaustivenessCheckPass.name,
                )
            done.append(stack.pop())
        elif stack:
            stack[-1].covered_cases.add(ident)

    if stack:
        site = stack[-1]
        raise StructuralLoweringError(
            f"Unmatched CS_SWITCH_EXHAUSTIVE for '{site.enum_name}'",
            site.line, site.col, ExhaustivenessCheckPass.name,
        )
    return done


class ExhaustivenessCheckPass(Pass):
    """Validates switch sites against the enum registry."""
    name = "exhaustiveness-check"
    kind = PassKind.EXHAUSTIVENESS_CHECK

    def run(self, text: str, context: PassContext) -> PassResult:
        diagnostics: list[Diagnostic] = []
        sites = find_switch_sites(context.source.body, context)

        for site in sites:
            declaration = context.registry.get(site.enum_name)
            if declaration is None:
                message = (
                    f"switch over '{site.enum_name}' has no enum! declaration; "
                    "exhaustiveness not checked"
                )
                logger.warning(message)
                diagnostics.append(Diagnostic.warning(
                    DiagnosticCode.UNCHECKED_SWITCH, message, self.name, site.line, site.col,
                ))
                continue

            if not declaration.kind.requires_exhaustive:
                continue

            missing = declaration.missing_from(site.covered_cases)
            if missing:
                raise ExhaustivenessError(
                    site.enum_name, missing, site.line, site.col, self.name,
                )

        logger.debug(f"checked {len(sites)} switch sites")
        return PassResult(text, diagnostics)


def create_exhaustiveness_pass() -> ExhaustivenessCheckPass:
    return ExhaustivenessCheckPass()
