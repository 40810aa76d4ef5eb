import pytest

from celestemods.config import AttributeType, PencilBehavior
from celestemods.expression import Atom
from celestemods.object_config import (
    ConfigError,
    EntityConfig,
    StylegroundConfig,
    TriggerConfig,
)

ENTITY_YAML = """
entity_name: spring
hitboxes:
  initial_rects:
    - topleft: {x: "x", y: "y"}
      size: {x: "16", y: "8"}
resizable_x: false
resizable_y: true
pencil: Node
attribute_info:
  speed:
    ty: Float
    default: 1.5
templates:
  - name: Spring
    attributes: {speed: 2.0}
"""


def test_entity_from_yaml():
    config = EntityConfig.from_yaml(ENTITY_YAML)
    assert config.entity_name == "spring"
    assert config.minimum_size_x == 8
    assert config.pencil is PencilBehavior.NODE
    assert config.attribute_info["speed"].ty is AttributeType.FLOAT
    assert config.hitboxes.initial_rects[0].evaluate_int({"x": 1.0, "y": 2.0}) == (1, 2, 16, 8)


def test_entity_yaml_round_trip():
    config = EntityConfig.from_yaml(ENTITY_YAML)
    assert EntityConfig.from_yaml(config.to_yaml()) == config


def test_entity_new_and_template():
    config = EntityConfig.new("bumper")
    assert config.minimum_size_x == 0
    tpl = config.default_template()
    assert tpl.name == "bumper" and tpl.attributes == {}


def test_entity_missing_field():
    with pytest.raises(ConfigError, match="hitboxes"):
        EntityConfig.from_data({"entity_name": "a", "resizable_x": True, "resizable_y": True})


def test_bad_yaml():
    with pytest.raises(ConfigError):
        EntityConfig.from_yaml("entity_name: [")


def test_trigger_round_trip():
    config = TriggerConfig.from_yaml("trigger_name: music\nnodes: true\n")
    assert config.nodes is True
    assert config.default_template().name == "music"
    assert TriggerConfig.from_data(config.to_data()) == config


def test_styleground_preview():
    config = StylegroundConfig.from_yaml("styleground_name: stars\npreview: tex\n")
    assert config.preview == Atom("tex")
    assert StylegroundConfig.from_yaml(config.to_yaml()) == config
    assert StylegroundConfig.new("x").preview is None


def test_styleground_bad_expression():
    with pytest.raises(ConfigError):
        StylegroundConfig.from_data({"styleground_name": "s", "preview": "1 +"})