"""Tests for learning stores."""

import threading

import pytest

from cscript.config import DEFAULT_LEARNING_STORE
from cscript.diagnostics import LearningStoreError
from cscript.learning import (
    ArmStatistic,
    FileLearningStore,
    InMemoryLearningStore,
    LearningStore,
    create_learning_store,
    create_memory_store,
)
from cscript.learning.store import format_line, parse_line


KEY = "opt=O2;lto=1;ffm=0"


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "learn" / "arms.txt"


class TestLineFormat:
    """Tests for the one-line-per-arm format."""

    def test_format(self):
        """Fields are space separated in a fixed order."""
        line = format_line(KEY, ArmStatistic(3, 2.5, 0.75, 1.0))
        assert line == f"{KEY} 3 2.5 0.75 1.0"

    def test_parse(self):
        """A formatted line parses back."""
        stat = ArmStatistic(7, -0.25, 0.125, -1.0)
        assert parse_line(format_line(KEY, stat)) == (KEY, stat)

    @pytest.mark.parametrize("line", [
        "",
        "only three fields",
        f"{KEY} x 1.0 1.0 1.0",
        f"{KEY} 1 1.0 nan? 1.0",
        f"{KEY} -1 1.0 1.0 1.0",
        f"{KEY} 1 1.0 1.0 1.0 extra",
    ])
    def test_parse_malformed(self, line):
        """Malformed lines yield None."""
        assert parse_line(line) is None


class TestFileLearningStore:
    """Tests for the file-backed store."""

    def test_protocol(self, store_path):
        """Both stores satisfy the protocol."""
        assert isinstance(FileLearningStore(store_path), LearningStore)
        assert isinstance(InMemoryLearningStore(), LearningStore)

    def test_missing_file_is_empty(self, store_path):
        """A fresh store has no statistics and creates no file."""
        store = FileLearningStore(store_path)
        assert store.snapshot() == {}
        assert store.get(KEY) is None
        assert not store_path.exists()

    def test_record_persists(self, store_path):
        """Recorded outcomes survive a new store instance."""
        FileLearningStore(store_path).record(KEY, 1.0)
        FileLearningStore(store_path).record(KEY, -1.0)

        stat = FileLearningStore(store_path).get(KEY)
        assert stat.trials == 2
        assert stat.ema == pytest.approx(0.6)
        assert store_path.read_text(encoding="utf-8").count("\n") == 1

    def test_malformed_lines_skipped(self, store_path):
        """Good lines load even when neighbours are corrupt."""
        store_path.parent.mkdir(parents=True)
        store_path.write_text(
            f"{KEY} 3 2.5 0.8 1.0\nbroken line\nopt=O3;lto=0;ffm=0 1 1.0 1.0 1.0\n",
            encoding="utf-8",
        )
        stats = FileLearningStore(store_path).snapshot()
        assert set(stats) == {KEY, "opt=O3;lto=0;ffm=0"}
        assert stats[KEY].trials == 3

    def test_loaded_lazily(self, store_path):
        """The file is read on first access, not at construction."""
        store = FileLearningStore(store_path)
        store_path.parent.mkdir(parents=True)
        store_path.write_text(f"{KEY} 5 5.0 1.0 1.0\n", encoding="utf-8")
        assert store.get(KEY).trials == 5

    def test_reload(self, store_path):
        """reload() picks up changes made by another writer."""
        store = FileLearningStore(store_path)
        store.record(KEY, 1.0)
        FileLearningStore(store_path).record(KEY, 1.0)
        assert store.get(KEY).trials == 1
        store.reload()
        assert store.get(KEY).trials == 2

    def test_unreadable_path_raises(self, tmp_path):
        """A directory in place of the file is a store error."""
        store = FileLearningStore(tmp_path)
        with pytest.raises(LearningStoreError):
            store.snapshot()
        with pytest.raises(LearningStoreError):
            store.record(KEY, 1.0)

    def test_unwritable_location_raises(self, tmp_path):
        """A file in place of the parent directory is a store error."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = FileLearningStore(blocker / "arms.txt")
        with pytest.raises(LearningStoreError):
            store.record(KEY, 1.0)

    def test_no_temporary_files_left(self, store_path):
        """Atomic replacement leaves only the store file."""
        store = FileLearningStore(store_path)
        for reward in (1.0, 0.5, -1.0):
            store.record(KEY, reward)
        assert [p.name for p in store_path.parent.iterdir()] == ["arms.txt"]

    def test_concurrent_records(self, store_path):
        """Parallel records on one store lose no updates."""
        store = FileLearningStore(store_path)

        def worker():
            for _ in range(10):
                store.record(KEY, 1.0)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get(KEY).trials == 80
        assert FileLearningStore(store_path).get(KEY).trials == 80


class TestInMemoryLearningStore:
    """Tests for the in-memory store."""

    def test_record_and_clear(self):
        """Records accumulate until cleared."""
        store = create_memory_store()
        store.record(KEY, 1.0)
        store.record(KEY, 1.0)
        assert store.get(KEY).trials == 2
        store.clear()
        assert store.snapshot() == {}

    def test_initial_statistics(self):
        """Seeded statistics are visible and copied."""
        seed = {KEY: ArmStatistic(trials=4, ema=0.5)}
        store = InMemoryLearningStore(seed)
        seed.clear()
        assert store.get(KEY).trials == 4

    def test_snapshot_is_a_copy(self):
        """Mutating a snapshot does not touch the store."""
        store = create_memory_store()
        store.record(KEY, 1.0)
        snap = store.snapshot()
        snap.clear()
        assert store.get(KEY) is not None


class TestFactory:
    """Tests for create_learning_store."""

    def test_default_location(self):
        """Without a path the per-user default is used."""
        assert create_learning_store().path == DEFAULT_LEARNING_STORE

    def test_explicit_path(self, store_path):
        """An explicit path is honoured."""
        assert create_learning_store(store_path).path == store_path
