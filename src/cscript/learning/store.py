"""
Learning Store — Durable arm-key → statistic map.

File format, one arm per line:

    <armKey> <trials> <cumulativeReward> <ema> <lastReward>

The file store loads lazily on first access and rewrites the whole file
after every mutation. Each load-mutate-persist sequence runs under a
lock, and the write goes to a temporary file that atomically replaces
the old one, so a crash never leaves a half-written store.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from cscript.config import DEFAULT_LEARNING_STORE
from cscript.diagnostics import LearningStoreError
from cscript.observability import get_logger
from cscript.learning.statistics import ArmStatistic, update_statistic


logger = get_logger("learning.store")


@runtime_checkable
class LearningStore(Protocol):
    """
    Protocol for learning store backends.
    """

    def snapshot(self) -> dict[str, ArmStatistic]:
        """Copy of every stored statistic."""
        ...

    def get(self, key: str) -> ArmStatistic | None:
        """Statistic for one arm, or None if never tried."""
        ...

    def record(self, key: str, reward: float) -> ArmStatistic:
        """Apply the update rule for `key` and persist. Returns the new value."""
        ...


class InMemoryLearningStore:
    """
    In-memory learning store for testing.

    Statistics are lost when process terminates.
    """

    def __init__(self, initial: dict[str, ArmStatistic] | None = None):
        self._stats: dict[str, ArmStatistic] = dict(initial or {})
        self._lock = threading.Lock()

    def snapshot(self) -> dict[str, ArmStatistic]:
        with self._lock:
            return dict(self._stats)

    def get(self, key: str) -> ArmStatistic | None:
        with self._lock:
            return self._stats.get(key)

    def record(self, key: str, reward: float) -> ArmStatistic:
        with self._lock:
            updated = update_statistic(self._stats.get(key, ArmStatistic()), reward)
            self._stats[key] = updated
            return updated

    def clear(self) -> None:
        """Clear all statistics (testing helper)."""
        with self._lock:
            self._stats.clear()


def format_line(key: str, stat: ArmStatistic) -> str:
    return f"{key} {stat.trials} {stat.cumulative_reward!r} {stat.ema!r} {stat.last_reward!r}"


def parse_line(line: str) -> tuple[str, ArmStatistic] | None:
    """One store line, or None if it is blank or malformed."""
    parts = line.split()
    if len(parts) != 5:
        return None
    key, trials, cumulative, ema, last = parts
    try:
        stat = ArmStatistic(
            trials=int(trials),
            cumulative_reward=float(cumulative),
            ema=float(ema),
            last_reward=float(last),
        )
    except ValueError:
        return None
    if stat.trials < 0:
        return None
    return key, stat


class FileLearningStore:
    """
    Plain-text learning store.

    At most one in-memory copy per instance; it is loaded on first use.
    Read errors other than a missing file, and all write errors, raise
    `LearningStoreError`.
    """

    def __init__(self, path: str | Path = DEFAULT_LEARNING_STORE):
        self.path = Path(path)
        self._stats: dict[str, ArmStatistic] | None = None
        self._lock = threading.Lock()

    def _ensure_loaded(self) -> dict[str, ArmStatistic]:
        if self._stats is None:
            self._stats = self._read()
        return self._stats

    def _read(self) -> dict[str, ArmStatistic]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            raise LearningStoreError(f"cannot read learning store {self.path}: {e}") from e

        stats: dict[str, ArmStatistic] = {}
        skipped = 0
        for line in text.splitlines():
            if not line.strip():
                continue
            parsed = parse_line(line)
            if parsed is None:
                skipped += 1
                continue
            key, stat = parsed
            stats[key] = stat
        if skipped:
            logger.info(f"learning store {self.path}: skipped {skipped} malformed lines")
        logger.debug(f"loaded {len(stats)} arms from {self.path}")
        return stats

    def _write(self, stats: dict[str, ArmStatistic]) -> None:
        data = "".join(format_line(k, stats[k]) + "\n" for k in sorted(stats))
        tmp: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            if tmp is not None and os.path.exists(tmp):
                os.unlink(tmp)
            raise LearningStoreError(f"cannot write learning store {self.path}: {e}") from e

    def snapshot(self) -> dict[str, ArmStatistic]:
        with self._lock:
            return dict(self._ensure_loaded())

    def get(self, key: str) -> ArmStatistic | None:
        with self._lock:
            return self._ensure_loaded().get(key)

    def record(self, key: str, reward: float) -> ArmStatistic:
        with self._lock:
            current = self._ensure_loaded()
            updated = update_statistic(current.get(key, ArmStatistic()), reward)
            staged = dict(current)
            staged[key] = updated
            self._write(staged)
            self._stats = staged
            return updated

    def reload(self) -> None:
        """Drop the in-memory copy; the next access reads the file again."""
        with self._lock:
            self._stats = None


def create_learning_store(path: str | Path | None = None) -> FileLearningStore:
    """File store at `path`, or the per-user default location."""
    return FileLearningStore(path if path is not None else DEFAULT_LEARNING_STORE)


def create_memory_store() -> InMemoryLearningStore:
    return InMemoryLearningStore()
