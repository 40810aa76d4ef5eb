"""Entity, trigger and styleground configuration files."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from .config import AttributeInfo, EntityRects, EntityTemplate, PencilBehavior, parse_expr_data
from .drawing import EntityDraw
from .expression import Expression


class ConfigError(ValueError):
    """Raised when a configuration document is invalid."""


def _load_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise ConfigError(str(err)) from err


def _dump_yaml(data: dict) -> str:
    return yaml.safe_dump(data, sort_keys=False)


def _checked(cls: type, data: Any, build) -> Any:
    if not isinstance(data, Mapping):
        raise ConfigError(f"{cls.__name__}: expected a mapping")
    try:
        return build(data)
    except ConfigError:
        raise
    except KeyError as err:
        raise ConfigError(f"missing field `{err.args[0]}`") from None
    except (ValueError, TypeError) as err:
        raise ConfigError(str(err)) from err


def _attribute_info(data: Mapping) -> dict[str, AttributeInfo]:
    raw = data.get("attribute_info") or {}
    return {str(k): AttributeInfo.from_data(v) for k, v in raw.items()}


def _templates(data: Mapping) -> list[EntityTemplate]:
    return [EntityTemplate.from_data(t) for t in data.get("templates") or []]


def _bool(data: Mapping, key: str, required: bool = False) -> bool:
    value = data[key] if required else data.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"`{key}`: expected a boolean")
    return value


def _u32(data: Mapping, key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 2**32:
        raise ConfigError(f"`{key}`: expected an unsigned integer")
    return value


@dataclass
class EntityConfig:
    entity_name: str = ""
    hitboxes: EntityRects = field(default_factory=EntityRects)
    standard_draw: EntityDraw = field(default_factory=EntityDraw)
    selected_draw: EntityDraw = field(default_factory=EntityDraw)
    minimum_size_x: int = 0
    minimum_size_y: int = 0
    resizable_x: bool = False
    resizable_y: bool = False
    nodes: bool = False
    pencil: PencilBehavior = PencilBehavior.LINE
    solid: bool = False
    attribute_info: dict[str, AttributeInfo] = field(default_factory=dict)
    keywords: list[str] = field(default_factory=list)
    templates: list[EntityTemplate] = field(default_factory=list)

    @classmethod
    def new(cls, name: str) -> EntityConfig:
        return cls(entity_name=name)

    @classmethod
    def from_data(cls, data: Any) -> EntityConfig:
        def build(d: Mapping) -> EntityConfig:
            return cls(
                entity_name=str(d["entity_name"]),
                hitboxes=EntityRects.from_data(d["hitboxes"]),
                standard_draw=EntityDraw.from_data(d.get("standard_draw") or {}),
                selected_draw=EntityDraw.from_data(d.get("selected_draw") or {}),
                minimum_size_x=_u32(d, "minimum_size_x", 8),
                minimum_size_y=_u32(d, "minimum_size_y", 8),
                resizable_x=_bool(d, "resizable_x", required=True),
                resizable_y=_bool(d, "resizable_y", required=True),
                nodes=_bool(d, "nodes"),
                pencil=PencilBehavior(d.get("pencil", "Line")),
                solid=_bool(d, "solid"),
                attribute_info=_attribute_info(d),
                keywords=[str(k) for k in d.get("keywords") or []],
                templates=_templates(d),
            )

        return _checked(cls, data, build)

    def to_data(self) -> dict:
        return {
            "entity_name": self.entity_name,
            "hitboxes": self.hitboxes.to_data(),
            "standard_draw": self.standard_draw.to_data(),
            "selected_draw": self.selected_draw.to_data(),
            "minimum_size_x": self.minimum_size_x,
            "minimum_size_y": self.minimum_size_y,
            "resizable_x": self.resizable_x,
            "resizable_y": self.resizable_y,
            "nodes": self.nodes,
            "pencil": self.pencil.value,
            "solid": self.solid,
            "attribute_info": {k: v.to_data() for k, v in self.attribute_info.items()},
            "keywords": list(self.keywords),
            "templates": [t.to_data() for t in self.templates],
        }

    @classmethod
    def from_yaml(cls, text: str) -> EntityConfig:
        return cls.from_data(_load_yaml(text))

    def to_yaml(self) -> str:
        return _dump_yaml(self.to_data())

    def __str__(self) -> str:
        return self.to_yaml()

    def default_template(self) -> EntityTemplate:
        return EntityTemplate(name=self.entity_name)


@dataclass
class TriggerConfig:
    trigger_name: str = ""
    nodes: bool = False
    attribute_info: dict[str, AttributeInfo] = field(default_factory=dict)
    keywords: list[str] = field(default_factory=list)
    templates: list[EntityTemplate] = field(default_factory=list)

    @classmethod
    def new(cls, name: str) -> TriggerConfig:
        return cls(trigger_name=name)

    @classmethod
    def from_data(cls, data: Any) -> TriggerConfig:
        def build(d: Mapping) -> TriggerConfig:
            return cls(
                trigger_name=str(d["trigger_name"]),
                nodes=_bool(d, "nodes"),
                attribute_info=_attribute_info(d),
                keywords=[str(k) for k in d.get("keywords") or []],
                templates=_templates(d),
            )

        return _checked(cls, data, build)

    def to_data(self) -> dict:
        return {
            "trigger_name": self.trigger_name,
            "nodes": self.nodes,
            "attribute_info": {k: v.to_data() for k, v in self.attribute_info.items()},
            "keywords": list(self.keywords),
            "templates": [t.to_data() for t in self.templates],
        }

    @classmethod
    def from_yaml(cls, text: str) -> TriggerConfig:
        return cls.from_data(_load_yaml(text))

    def to_yaml(self) -> str:
        return _dump_yaml(self.to_data())

    def __str__(self) -> str:
        return self.to_yaml()

    def default_template(self) -> EntityTemplate:
        return EntityTemplate(name=self.trigger_name)


@dataclass
class StylegroundConfig:
    styleground_name: str = ""
    preview: Optional[Expression] = None
    attribute_info: dict[str, AttributeInfo] = field(default_factory=dict)

    @classmethod
    def new(cls, name: str) -> StylegroundConfig:
        return cls(styleground_name=name)

    @classmethod
    def from_data(cls, data: Any) -> StylegroundConfig:
        def build(d: Mapping) -> StylegroundConfig:
            preview = d.get("preview")
            return cls(
                styleground_name=str(d["styleground_name"]),
                preview=None if preview is None else parse_expr_data(preview),
                attribute_info=_attribute_info(d),
            )

        return _checked(cls, data, build)

    def to_data(self) -> dict:
        return {
            "styleground_name": self.styleground_name,
            "preview": None if self.preview is None else str(self.preview),
            "attribute_info": {k: v.to_data() for k, v in self.attribute_info.items()},
        }

    @classmethod
    def from_yaml(cls, text: str) -> StylegroundConfig:
        return cls.from_data(_load_yaml(text))

    def to_yaml(self) -> str:
        return _dump_yaml(self.to_data())

    def __str__(self) -> str:
        return self.to_yaml()