import dataclasses

import pytest

from celestemods.selectable import (
    DecalSelectable,
    EntitySelectable,
    TileSelectable,
    TriggerSelectable,
)


def test_tile_default_is_empty_tile():
    tile = TileSelectable()
    assert (tile.id, tile.name, tile.texture) == ("0", "Empty", None)


def test_tile_equality_uses_id_only():
    a = TileSelectable("a", "Dirt", "tilesets/dirt")
    b = TileSelectable("a", "Other", None)
    c = TileSelectable("b", "Dirt", "tilesets/dirt")
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_entity_and_trigger_defaults():
    assert EntitySelectable() == EntitySelectable("does not exist", 0)
    assert TriggerSelectable() == TriggerSelectable("does not exist", 0)
    assert DecalSelectable().name == "does not exist"


def test_entity_equality_uses_all_fields():
    assert EntitySelectable("spring", 1) != EntitySelectable("spring", 0)
    assert TriggerSelectable("wind", 2) == TriggerSelectable("wind", 2)
    assert DecalSelectable("x") == DecalSelectable("x")


def test_selectables_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        EntitySelectable().template = 3