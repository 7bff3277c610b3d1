"""Tests for CompileConfig."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cscript.config import (
    DEFAULT_HOT_SET_SIZE,
    DEFAULT_LEARNING_STORE,
    CompileConfig,
    create_config,
)
from cscript.vocabulary import OptLevel


class TestDefaults:
    """Tests for default settings."""

    def test_defaults(self):
        """Defaults match the compiler's documented behaviour."""
        config = create_config()
        assert config.hardline is True
        assert config.softline is True
        assert config.opt is OptLevel.O2
        assert config.lto is True
        assert config.profile is False
        assert config.adaptive is False
        assert config.hot_set_size == DEFAULT_HOT_SET_SIZE == 16
        assert config.out == "a.out"

    def test_learning_store_default_path(self):
        """Unset store path resolves to the per-user default."""
        assert create_config().resolved_learning_store_path() == DEFAULT_LEARNING_STORE

    def test_learning_store_override(self, tmp_path):
        """Explicit store path wins."""
        path = tmp_path / "arms.txt"
        assert create_config(learning_store_path=path).resolved_learning_store_path() == path


class TestPolicy:
    """Tests for hardline/strict/relaxed interplay."""

    def test_relaxed_disables_hardline_mode(self):
        """relaxed turns runtime assertions into warnings."""
        assert create_config(relaxed=True).hardline_mode is False

    def test_strict_forces_hardline(self):
        """strict re-enables hardline."""
        config = create_config(hardline=False, strict=True)
        assert config.hardline is True
        assert config.hardline_mode is True

    def test_strict_and_relaxed_conflict(self):
        """strict together with relaxed is rejected."""
        with pytest.raises(ValidationError):
            create_config(strict=True, relaxed=True)


class TestValidation:
    """Tests for field validation."""

    def test_negative_hot_set_rejected(self):
        """hot_set_size must be non-negative."""
        with pytest.raises(ValidationError):
            create_config(hot_set_size=-1)

    def test_zero_timeout_rejected(self):
        """Profile timeout must be positive."""
        with pytest.raises(ValidationError):
            create_config(profile_timeout_seconds=0)

    def test_empty_out_rejected(self):
        """Output path cannot be blank."""
        with pytest.raises(ValidationError):
            create_config(out="  ")

    def test_unknown_field_rejected(self):
        """Typos in option names are errors."""
        with pytest.raises(ValidationError):
            CompileConfig(optimisation="O3")

    def test_opt_from_string(self):
        """opt accepts the directive spelling."""
        assert create_config(opt="size").opt is OptLevel.SIZE
