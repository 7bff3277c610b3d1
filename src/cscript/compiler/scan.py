"""
Scanner — Delimiter-balanced, literal-aware helpers for text lowering.

Every pass that consumes a brace- or paren-delimited region goes through
these helpers, so string literals, character literals and comments never
open or close a block and never produce a keyword match.
"""

import bisect
import re
from typing import Iterator


OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {v: k for k, v in OPENERS.items()}


def skip_literal(text: str, i: int) -> int | None:
    """
    If a string/char literal or comment starts at `i`, return the index
    just past it. Otherwise return None.

    Unterminated string and char literals end at the line break.
    """
    c = text[i]
    if c == '"' or c == "'":
        j = i + 1
        n = len(text)
        while j < n:
            ch = text[j]
            if ch == "\\":
                j += 2
                continue
            if ch == c:
                return j + 1
            if ch == "\n":
                return j
            j += 1
        return n
    if c == "/" and i + 1 < len(text):
        nxt = text[i + 1]
        if nxt == "/":
            end = text.find("\n", i)
            return len(text) if end == -1 else end
        if nxt == "*":
            end = text.find("*/", i + 2)
            return len(text) if end == -1 else end + 2
    return None


def literal_spans(text: str) -> list[tuple[int, int]]:
    """Return sorted (start, end) spans of every literal and comment."""
    spans = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c in "\"'/":
            j = skip_literal(text, i)
            if j is not None:
                spans.append((i, j))
                i = j
                continue
        i += 1
    return spans


class LiteralIndex:
    """Answers "is this offset inside a literal or comment?" in O(log n)."""

    def __init__(self, text: str):
        self._spans = literal_spans(text)
        self._starts = [s for s, _ in self._spans]

    def contains(self, pos: int) -> bool:
        k = bisect.bisect_right(self._starts, pos) - 1
        if k < 0:
            return False
        start, end = self._spans[k]
        return start <= pos < end


def iter_code_matches(
    pattern: re.Pattern, text: str, start: int = 0, end: int | None = None
) -> Iterator[re.Match]:
    """Yield regex matches that begin outside literals and comments."""
    index = LiteralIndex(text)
    end = len(text) if end is None else end
    for m in pattern.finditer(text, start, end):
        if not index.contains(m.start()):
            yield m


def search_code(pattern: re.Pattern, text: str, start: int = 0) -> re.Match | None:
    """First match at or after `start` that begins outside literals."""
    return next(iter_code_matches(pattern, text, start), None)


def find_matching(text: str, open_index: int) -> int:
    """
    Return the index of the delimiter closing the one at `open_index`,
    or -1 if the region is unterminated.

    Nesting depth is tracked for the delimiter kind at `open_index`.
    """
    open_ch = text[open_index]
    close_ch = OPENERS[open_ch]
    depth = 0
    i = open_index
    n = len(text)
    while i < n:
        c = text[i]
        if c in "\"'/":
            j = skip_literal(text, i)
            if j is not None:
                i = j
                continue
        if c == open_ch:
            depth += 1
        elif c == close_ch:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def find_top_level(text: str, token: str, start: int = 0, end: int | None = None) -> int:
    """
    Find `token` at bracket depth zero between `start` and `end`,
    skipping literals. Returns -1 when absent.
    """
    end = len(text) if end is None else end
    depth = 0
    i = start
    while i < end:
        c = text[i]
        if c in "\"'/":
            j = skip_literal(text, i)
            if j is not None:
                i = j
                continue
        if depth == 0 and text.startswith(token, i):
            return i
        if c in OPENERS:
            depth += 1
        elif c in CLOSERS:
            depth = max(0, depth - 1)
        i += 1
    return -1


def split_top_level(text: str, sep: str) -> list[str]:
    """Split on `sep` occurring at bracket depth zero."""
    parts = []
    pos = 0
    while True:
        k = find_top_level(text, sep, pos)
        if k == -1:
            parts.append(text[pos:])
            return parts
        parts.append(text[pos:k])
        pos = k + len(sep)


def strip_comments(text: str) -> str:
    """Remove comments, keeping their line breaks."""
    out = []
    pos = 0
    for start, end in literal_spans(text):
        if text.startswith("//", start) or text.startswith("/*", start):
            out.append(text[pos:start])
            out.append("\n" * text.count("\n", start, end))
            pos = end
    out.append(text[pos:])
    return "".join(out)


def pad_newlines(original: str, replacement: str) -> str:
    """
    Append line breaks so `replacement` spans as many lines as `original`.

    Lowering is line-preserving: source locations stay valid in every
    intermediate text.
    """
    missing = original.count("\n") - replacement.count("\n")
    if missing > 0:
        return replacement + "\n" * missing
    return replacement


def skip_ws(text: str, i: int) -> int:
    n = len(text)
    while i < n and text[i].isspace():
        i += 1
    return i
