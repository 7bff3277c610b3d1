"""
Hot-Set Selection — Deterministic top-N over a profile sample.

Symbols are ordered by descending count, ties by ascending name; only
symbols with a positive count qualify. The result never depends on the
iteration order of the input mapping.
"""

from dataclasses import dataclass
from typing import Iterator, Mapping

from cscript.config import DEFAULT_HOT_SET_SIZE
from cscript.pgo.profile import ProfileSample


@dataclass(frozen=True)
class HotSet:
    """Selected hot functions, hottest first."""
    symbols: tuple[str, ...] = ()

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.symbols

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)

    def as_set(self) -> frozenset[str]:
        return frozenset(self.symbols)


def select_hot_set(
    sample: ProfileSample | Mapping[str, int],
    size: int = DEFAULT_HOT_SET_SIZE,
) -> HotSet:
    """Top `size` symbols by count."""
    counts = sample.counts if isinstance(sample, ProfileSample) else sample
    if size <= 0:
        return HotSet()
    ranked = sorted(
        ((name, count) for name, count in counts.items() if count > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return HotSet(tuple(name for name, _ in ranked[:size]))
