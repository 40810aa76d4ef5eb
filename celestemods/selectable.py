"""Items that can be picked from the editor's palettes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, eq=False)
class TileSelectable:
    """A tile type; two tiles are equal when their ids are."""

    id: str = "0"
    name: str = "Empty"
    texture: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileSelectable):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class EntitySelectable:
    entity: str = "does not exist"
    template: int = 0


@dataclass(frozen=True)
class TriggerSelectable:
    trigger: str = "does not exist"
    template: int = 0


@dataclass(frozen=True)
class DecalSelectable:
    name: str = "does not exist"