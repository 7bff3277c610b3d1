"""Tests for build arms."""

import pytest

from cscript.config import create_config
from cscript.learning import BuildArm, default_arms, prior
from cscript.vocabulary import OptLevel


class TestBuildArm:
    """Tests for arm keys and construction."""

    def test_key_format(self):
        """Keys name every knob."""
        arm = BuildArm(OptLevel.O3, lto=False, fast_math=True)
        assert arm.key == "opt=O3;lto=0;ffm=1"
        assert str(arm) == arm.key

    def test_from_key(self):
        """A key parses back to the same arm."""
        arm = BuildArm(OptLevel.SIZE, lto=True, fast_math=False)
        assert BuildArm.from_key(arm.key) == arm

    @pytest.mark.parametrize("key", [
        "",
        "opt=O2;lto=1",
        "opt=O9;lto=1;ffm=0",
        "opt=O2;lto=yes;ffm=0",
        "opt=O2 lto=1 ffm=0",
    ])
    def test_from_key_rejects_malformed(self, key):
        """Malformed keys raise ValueError."""
        with pytest.raises(ValueError):
            BuildArm.from_key(key)

    def test_from_config(self):
        """The baseline arm mirrors the config knobs."""
        config = create_config(opt=OptLevel.O1, lto=False, fast_math=True)
        assert BuildArm.from_config(config) == BuildArm(OptLevel.O1, False, True)

    def test_hashable(self):
        """Arms can key dicts and sets."""
        assert len({BuildArm(), BuildArm()}) == 1


class TestDefaultArms:
    """Tests for the default catalogue."""

    def test_sixteen_distinct_arms(self):
        """Four opt levels times LTO times fast-math."""
        arms = default_arms()
        assert len(arms) == 16
        assert len({a.key for a in arms}) == 16

    def test_sorted_by_key(self):
        """The catalogue is in key order."""
        keys = [a.key for a in default_arms()]
        assert keys == sorted(keys)

    def test_excludes_extremes(self):
        """O0 and max are not learned over."""
        opts = {a.opt for a in default_arms()}
        assert opts == {OptLevel.O1, OptLevel.O2, OptLevel.O3, OptLevel.SIZE}


class TestPrior:
    """Tests for the per-arm prior."""

    def test_deterministic_and_small(self):
        """The prior is stable and within [0, 0.01)."""
        for arm in default_arms():
            value = prior(arm)
            assert value == prior(BuildArm.from_key(arm.key))
            assert 0.0 <= value < 0.01

    def test_distinguishes_arms(self):
        """Different arms get different priors."""
        assert len({prior(a) for a in default_arms()}) == 16
