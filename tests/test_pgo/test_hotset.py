"""Tests for hot-set selection."""

from cscript.pgo import HotSet, parse_profile_counts, select_hot_set


class TestSelectHotSet:
    """Tests for select_hot_set."""

    def test_ties_broken_by_name(self):
        """Equal counts order by name; zero counts never qualify."""
        hot = select_hot_set({"f": 10, "g": 10, "h": 1, "i": 0}, size=2)
        assert hot.symbols == ("f", "g")

    def test_input_order_irrelevant(self):
        """The same counts in any order give the same set."""
        forward = select_hot_set({"f": 10, "g": 10, "h": 1, "i": 0}, size=2)
        backward = select_hot_set({"i": 0, "h": 1, "g": 10, "f": 10}, size=2)
        assert forward == backward

    def test_descending_count(self):
        """Hottest symbols come first."""
        hot = select_hot_set({"a": 1, "b": 50, "c": 7}, size=16)
        assert hot.symbols == ("b", "c", "a")

    def test_zero_counts_excluded(self):
        """Symbols never hit are not hot even when there is room."""
        hot = select_hot_set({"a": 0, "b": 0}, size=4)
        assert len(hot) == 0

    def test_size_zero(self):
        """A zero-size hot set is empty."""
        assert select_hot_set({"a": 5}, size=0) == HotSet()

    def test_accepts_profile_sample(self):
        """A parsed sample works as input."""
        hot = select_hot_set(parse_profile_counts("sq 9\nmain 1\n"), size=1)
        assert "sq" in hot
        assert "main" not in hot
        assert hot.as_set() == frozenset({"sq"})
