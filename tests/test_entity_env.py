from dataclasses import dataclass, field

from celestemods.entity_env import make_entity_env, make_node_env


@dataclass
class FakeEntity:
    x: int = 10
    y: int = 20
    width: int = 8
    height: int = 16
    attributes: dict = field(default_factory=dict)
    nodes: list = field(default_factory=list)


def test_entity_env_basic_fields():
    env = make_entity_env(FakeEntity())
    assert env == {"x": 10.0, "y": 20.0, "width": 8.0, "height": 16.0}


def test_entity_env_attributes_converted():
    entity = FakeEntity(attributes={"flag": True, "off": False, "n": 3, "s": "text"})
    env = make_entity_env(entity)
    assert env["flag"] == 1.0
    assert env["off"] == 0.0
    assert env["n"] == 3.0
    assert env["s"] == "text"


def test_entity_env_attribute_overrides_position():
    env = make_entity_env(FakeEntity(attributes={"width": "wide"}))
    assert env["width"] == "wide"


def test_entity_env_first_and_last_nodes():
    entity = FakeEntity(nodes=[(1, 2), (3, 4), (5, 6)])
    env = make_entity_env(entity)
    assert (env["firstnodex"], env["firstnodey"]) == (1.0, 2.0)
    assert (env["lastnodex"], env["lastnodey"]) == (5.0, 6.0)


def test_entity_env_without_nodes_has_no_node_names():
    env = make_entity_env(FakeEntity())
    assert "firstnodex" not in env and "lastnodey" not in env


def test_node_env_first_node():
    entity = FakeEntity(nodes=[(1, 2), (3, 4)])
    base = make_entity_env(entity)
    env = make_node_env(entity, base, 0)
    assert env["nodeidx"] == 0.0
    assert (env["nodex"], env["nodey"]) == (1.0, 2.0)
    assert (env["nextnodex"], env["nextnodey"]) == (3.0, 4.0)
    assert (env["nextnodexorbase"], env["nextnodeyorbase"]) == (3.0, 4.0)
    assert "prevnodex" not in env
    assert (env["prevnodexorbase"], env["prevnodeyorbase"]) == (10.0, 20.0)
    assert env["width"] == base["width"]


def test_node_env_last_node_falls_back_to_base():
    entity = FakeEntity(nodes=[(1, 2), (3, 4)])
    env = make_node_env(entity, {}, 1)
    assert (env["nodex"], env["nodey"]) == (3.0, 4.0)
    assert "nextnodex" not in env
    assert (env["nextnodexorbase"], env["nextnodeyorbase"]) == (10.0, 20.0)
    assert (env["prevnodex"], env["prevnodey"]) == (1.0, 2.0)
    assert (env["prevnodexorbase"], env["prevnodeyorbase"]) == (1.0, 2.0)


def test_node_env_out_of_range_index():
    entity = FakeEntity(nodes=[(1, 2)])
    env = make_node_env(entity, {}, 5)
    assert "nodex" not in env
    assert "prevnodex" not in env
    assert env["nextnodexorbase"] == 10.0
    assert env["prevnodeyorbase"] == 20.0


def test_node_env_does_not_change_input():
    entity = FakeEntity(nodes=[(1, 2)])
    base = make_entity_env(entity)
    snapshot = dict(base)
    make_node_env(entity, base, 0)
    assert base == snapshot