"""
Profile Collection — Parse the count table an instrumented run flushes.

Format: one `<symbol> <count>` pair per line. Parsing is permissive:
blank and malformed lines are skipped, duplicate symbols are summed, and
a missing file is an empty profile.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from cscript.observability import get_logger


logger = get_logger("pgo.profile")


@dataclass
class ProfileSample:
    """Symbol → non-negative call count."""
    counts: dict[str, int] = field(default_factory=dict)
    skipped_lines: int = 0

    def add(self, symbol: str, count: int) -> None:
        if count < 0:
            raise ValueError(f"negative count for {symbol!r}: {count}")
        self.counts[symbol] = self.counts.get(symbol, 0) + count

    def get(self, symbol: str) -> int:
        return self.counts.get(symbol, 0)

    def items(self) -> Iterator[tuple[str, int]]:
        return iter(self.counts.items())

    def __len__(self) -> int:
        return len(self.counts)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.counts


def parse_profile_counts(text: str) -> ProfileSample:
    """Parse count-file text."""
    sample = ProfileSample()
    for lineno, raw in enumerate(text.splitlines(), start=1):
        parts = raw.split()
        if not parts:
            continue
        if len(parts) != 2:
            sample.skipped_lines += 1
            logger.debug(f"profile line {lineno}: expected '<symbol> <count>', skipped")
            continue
        symbol, count_text = parts
        try:
            count = int(count_text)
        except ValueError:
            sample.skipped_lines += 1
            logger.debug(f"profile line {lineno}: bad count {count_text!r}, skipped")
            continue
        if count < 0:
            sample.skipped_lines += 1
            continue
        sample.add(symbol, count)
    return sample


def read_profile_counts(path: str | Path) -> ProfileSample:
    """
    Read a count file. Missing or unreadable files yield an empty sample.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.info(f"no profile written at {path}")
        return ProfileSample()
    except OSError as e:
        logger.warning(f"could not read profile {path}: {e}")
        return ProfileSample()

    sample = parse_profile_counts(text)
    if sample.skipped_lines:
        logger.info(f"profile {path}: skipped {sample.skipped_lines} malformed lines")
    return sample
