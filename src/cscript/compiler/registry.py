"""
Enum Registry — Symbol table of `enum!` / `enum_flags!` declarations.

Filled by the enum-lowering pass during its left-to-right scan and frozen
once that pass completes; the exhaustiveness checker only reads it.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator

from cscript.vocabulary import EnumKind


@dataclass(frozen=True)
class EnumDeclaration:
    """A declared enum: ordered unique members and a domain kind."""
    name: str
    members: tuple[str, ...]
    kind: EnumKind = EnumKind.STANDARD
    line: int | None = None

    def missing_from(self, covered: Iterable[str]) -> tuple[str, ...]:
        """Members not present in `covered`, in declaration order."""
        seen = set(covered)
        return tuple(m for m in self.members if m not in seen)


class RegistryFrozenError(RuntimeError):
    """Raised when declaring into a registry after enum lowering finished."""
    pass


class EnumRegistry:
    """Name → declaration map with insertion order preserved."""

    def __init__(self):
        self._enums: dict[str, EnumDeclaration] = {}
        self._frozen = False

    def declare(self, declaration: EnumDeclaration) -> None:
        """
        Add a declaration.

        Raises:
            RegistryFrozenError: Registry is read-only
            ValueError: Name already declared
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"cannot declare '{declaration.name}': registry is frozen"
            )
        if declaration.name in self._enums:
            raise ValueError(f"enum '{declaration.name}' already declared")
        self._enums[declaration.name] = declaration

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> EnumDeclaration | None:
        return self._enums.get(name)

    def names(self) -> list[str]:
        return list(self._enums)

    def __contains__(self, name: object) -> bool:
        return name in self._enums

    def __len__(self) -> int:
        return len(self._enums)

    def __iter__(self) -> Iterator[EnumDeclaration]:
        return iter(self._enums.values())


def create_registry() -> EnumRegistry:
    """Factory for an empty registry."""
    return EnumRegistry()
