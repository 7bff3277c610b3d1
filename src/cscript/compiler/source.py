"""
Source Unit — One input document split into directives and body.

Created once per compile and never mutated. Keeps a line map so that
positions in the body (and in any line-preserving lowering of it) can be
reported against the original document.
"""

from dataclasses import dataclass

from cscript.config import Directive, split_directives


@dataclass(frozen=True)
class SourceUnit:
    """Raw text plus its directive-free body."""
    raw: str
    body: str
    directives: tuple[Directive, ...] = ()
    line_map: tuple[int, ...] = ()
    name: str = "<input>"

    @classmethod
    def from_text(cls, text: str, name: str = "<input>") -> "SourceUnit":
        directives, body_lines, line_map = split_directives(text)
        return cls(
            raw=text,
            body="\n".join(body_lines),
            directives=tuple(directives),
            line_map=tuple(line_map),
            name=name,
        )

    def original_line(self, body_line: int) -> int:
        """Map a 1-based body line to its 1-based line in `raw`."""
        if 1 <= body_line <= len(self.line_map):
            return self.line_map[body_line - 1]
        return body_line

    def location(self, text: str, pos: int) -> tuple[int, int]:
        """
        (line, col) in the original document for offset `pos` of `text`,
        where `text` is the body or a line-preserving lowering of it.
        """
        pos = max(0, min(pos, len(text)))
        body_line = text.count("\n", 0, pos) + 1
        col = pos - (text.rfind("\n", 0, pos) + 1) + 1
        return self.original_line(body_line), col
