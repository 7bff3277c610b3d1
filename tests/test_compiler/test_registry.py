"""Tests for the source unit and enum registry."""

import pytest

from cscript.compiler import (
    EnumDeclaration,
    RegistryFrozenError,
    SourceUnit,
    create_registry,
)
from cscript.vocabulary import EnumKind


class TestSourceUnit:
    """Tests for SourceUnit."""

    def test_body_excludes_directives(self):
        """Directive lines are removed from the body."""
        unit = SourceUnit.from_text("@opt O3\nint x;\n@lto on\nint y;")
        assert unit.body == "int x;\nint y;"
        assert [d.name for d in unit.directives] == ["opt", "lto"]
        assert unit.raw.startswith("@opt")

    def test_location_maps_to_original_line(self):
        """Body offsets report original line and column."""
        unit = SourceUnit.from_text("@opt O3\nint x;\n  y = 1;")
        pos = unit.body.index("y")
        assert unit.location(unit.body, pos) == (3, 3)

    def test_immutable(self):
        """SourceUnit is frozen."""
        unit = SourceUnit.from_text("int x;")
        with pytest.raises(Exception):
            unit.body = "changed"


class TestEnumRegistry:
    """Tests for EnumRegistry."""

    @pytest.fixture
    def registry(self):
        return create_registry()

    @pytest.fixture
    def color(self):
        return EnumDeclaration("Color", ("Red", "Green", "Blue"))

    def test_declare_and_get(self, registry, color):
        """Declared enums can be looked up."""
        registry.declare(color)
        assert registry.get("Color") is color
        assert "Color" in registry
        assert len(registry) == 1

    def test_duplicate_rejected(self, registry, color):
        """Declaring a name twice is an error."""
        registry.declare(color)
        with pytest.raises(ValueError):
            registry.declare(color)

    def test_frozen_rejects_declare(self, registry, color):
        """A frozen registry is read-only."""
        registry.freeze()
        with pytest.raises(RegistryFrozenError):
            registry.declare(color)

    def test_missing_from_keeps_declaration_order(self, color):
        """Missing members are reported in declaration order."""
        assert color.missing_from({"Green"}) == ("Red", "Blue")
        assert color.missing_from({"Red", "Green", "Blue"}) == ()

    def test_default_kind_is_standard(self, color):
        """Declarations default to STANDARD."""
        assert color.kind is EnumKind.STANDARD
