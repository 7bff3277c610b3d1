"""
Directives — `@name args` lines at the top level of a source document.

Directive lines are removed from the body and folded into the
`CompileConfig`. Block syntax that also starts with `@` (`@unsafe { ... }`)
is left in the body for the lowering passes.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError

from cscript.config.models import CompileConfig
from cscript.diagnostics import Diagnostic
from cscript.observability import get_logger
from cscript.vocabulary import DiagnosticCode, OptLevel


logger = get_logger("config.directives")

BLOCK_KEYWORDS = frozenset({"unsafe"})

_NAME_RE = re.compile(r"@([A-Za-z_]\w*)")
_ARG_RE = re.compile(r'"((?:\\.|[^"\\])*)"|(\S+)')

_TRUE = {"", "on", "true", "yes", "1"}
_FALSE = {"off", "false", "no", "0"}


@dataclass(frozen=True)
class Directive:
    """One parsed directive line."""
    name: str
    args: tuple[str, ...]
    line: int

    @property
    def value(self) -> str:
        return self.args[0] if self.args else ""


def parse_directive_line(text: str, line: int) -> Directive | None:
    """
    Parse a stripped line. Returns None when the line is not a directive.
    """
    match = _NAME_RE.match(text)
    if match is None:
        return None
    name = match.group(1)
    if name in BLOCK_KEYWORDS:
        return None

    args = []
    for m in _ARG_RE.finditer(text[match.end():]):
        if m.group(1) is not None:
            args.append(re.sub(r"\\(.)", r"\1", m.group(1)))
        else:
            args.append(m.group(2))
    return Directive(name=name, args=tuple(args), line=line)


def split_directives(text: str) -> tuple[list[Directive], list[str], list[int]]:
    """
    Separate directive lines from body lines.

    Returns:
        (directives, body_lines, line_map) where line_map[i] is the
        1-based line number of body_lines[i] in the original text
    """
    directives: list[Directive] = []
    body: list[str] = []
    line_map: list[int] = []

    for number, raw in enumerate(text.split("\n"), start=1):
        stripped = raw.strip()
        if stripped.startswith("@"):
            directive = parse_directive_line(stripped, number)
            if directive is not None:
                directives.append(directive)
                continue
        body.append(raw)
        line_map.append(number)

    return directives, body, line_map


# =============================================================================
# APPLICATION
# =============================================================================

def _parse_bool(value: str) -> bool:
    v = value.lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"expected on/off, got '{value}'")


def _parse_opt(value: str) -> OptLevel:
    return OptLevel(value)


def _parse_count(value: str) -> int:
    n = int(value)
    if n < 0:
        raise ValueError("must be non-negative")
    return n


def _parse_text(value: str) -> str:
    if not value:
        raise ValueError("missing value")
    return value


# name -> (config field, parser, appends to list)
_SETTERS: dict[str, tuple[str, Callable[[str], Any], bool]] = {
    "hardline": ("hardline", _parse_bool, False),
    "softline": ("softline", _parse_bool, False),
    "lto": ("lto", _parse_bool, False),
    "profile": ("profile", _parse_bool, False),
    "debug": ("debug", _parse_bool, False),
    "adaptive": ("adaptive", _parse_bool, False),
    "fastmath": ("fast_math", _parse_bool, False),
    "opt": ("opt", _parse_opt, False),
    "hotset": ("hot_set_size", _parse_count, False),
    "out": ("out", _parse_text, False),
    "abi": ("abi", _parse_text, False),
    "target": ("target", _parse_text, False),
    "define": ("defines", _parse_text, True),
    "inc": ("incs", _parse_text, True),
    "libpath": ("libpaths", _parse_text, True),
    "link": ("links", _parse_text, True),
}


def apply_directives(
    config: CompileConfig,
    directives: list[Directive],
) -> tuple[CompileConfig, list[Diagnostic]]:
    """
    Fold directives into a new config.

    Unknown directives and values that fail to parse or validate are
    warnings; the setting keeps its previous value.
    """
    data = config.model_dump()
    diagnostics: list[Diagnostic] = []

    def reject(directive: Directive, code: DiagnosticCode, message: str) -> None:
        logger.warning(message)
        diagnostics.append(Diagnostic.warning(code, message, line=directive.line, col=1))

    for directive in directives:
        setter = _SETTERS.get(directive.name)
        if setter is None:
            reject(directive, DiagnosticCode.UNKNOWN_DIRECTIVE, f"unknown directive @{directive.name}")
            continue

        field_name, parse, appends = setter
        try:
            value = parse(directive.value)
            if appends:
                value = [*data[field_name], value]
            candidate = {**data, field_name: value}
            CompileConfig.model_validate(candidate)
        except ValidationError as e:
            reason = "; ".join(err["msg"] for err in e.errors())
            reject(directive, DiagnosticCode.BAD_DIRECTIVE_VALUE, f"bad value for @{directive.name}: {reason}")
            continue
        except ValueError as e:
            reject(directive, DiagnosticCode.BAD_DIRECTIVE_VALUE, f"bad value for @{directive.name}: {e}")
            continue

        data = candidate

    return CompileConfig.model_validate(data), diagnostics
