"""Shared building blocks of object configuration: attributes, templates, shapes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .expression import Env, Expression, as_number, parse_expression, to_float, to_int

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


def _mapping(data: Any, what: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what}: expected a mapping, got {type(data).__name__}")
    return data


def _field(data: Mapping, key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


def parse_expr_data(data: Any) -> Expression:
    """Read an expression stored as a string."""
    if not isinstance(data, str):
        raise ValueError(f"expected an expression string, got {type(data).__name__}")
    return parse_expression(data)


class PencilBehavior(Enum):
    LINE = "Line"
    NODE = "Node"
    RECT = "Rect"


class AttributeType(Enum):
    STRING = "String"
    FLOAT = "Float"
    INT = "Int"
    BOOL = "Bool"


AttributeData = Union[str, float, int, bool]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class AttributeValue:
    """A typed attribute value."""

    ty: AttributeType
    value: AttributeData

    @classmethod
    def from_data(cls, data: Any) -> AttributeValue:
        if isinstance(data, bool):
            return cls(AttributeType.BOOL, data)
        if isinstance(data, int):
            if _I32_MIN <= data <= _I32_MAX:
                return cls(AttributeType.INT, data)
            return cls(AttributeType.FLOAT, to_float(float(data)))
        if isinstance(data, float):
            return cls(AttributeType.FLOAT, to_float(data))
        if isinstance(data, str):
            return cls(AttributeType.STRING, data)
        if isinstance(data, Mapping) and len(data) == 1:
            ((tag, inner),) = data.items()
            try:
                ty = AttributeType(tag)
            except ValueError:
                raise ValueError(f"unknown attribute type {tag!r}") from None
            return cls._typed(ty, inner)
        raise ValueError("expected a String, Float, Int, or Bool")

    @classmethod
    def _typed(cls, ty: AttributeType, inner: Any) -> AttributeValue:
        if ty is AttributeType.BOOL and isinstance(inner, bool):
            return cls(ty, inner)
        if ty is AttributeType.INT and isinstance(inner, int) and not isinstance(inner, bool):
            if _I32_MIN <= inner <= _I32_MAX:
                return cls(ty, inner)
        if ty is AttributeType.FLOAT and _is_number(inner):
            return cls(ty, to_float(float(inner)))
        if ty is AttributeType.STRING and isinstance(inner, str):
            return cls(ty, inner)
        raise ValueError(f"invalid value {inner!r} for attribute type {ty.value}")

    def to_data(self) -> AttributeData:
        return self.value


@dataclass
class AttributeOption:
    name: str
    value: AttributeValue

    @classmethod
    def from_data(cls, data: Any) -> AttributeOption:
        data = _mapping(data, "attribute option")
        return cls(str(_field(data, "name")), AttributeValue.from_data(_field(data, "value")))

    def to_data(self) -> dict:
        return {"name": self.name, "value": self.value.to_data()}


@dataclass
class AttributeInfo:
    ty: AttributeType
    default: AttributeValue
    display_name: Optional[str] = None
    options: list[AttributeOption] = field(default_factory=list)
    ignore: bool = False

    @classmethod
    def from_data(cls, data: Any) -> AttributeInfo:
        data = _mapping(data, "attribute info")
        try:
            ty = AttributeType(_field(data, "ty"))
        except ValueError as err:
            raise ValueError(f"invalid attribute type: {err}") from None
        return cls(
            ty=ty,
            default=AttributeValue.from_data(_field(data, "default")),
            display_name=data.get("display_name"),
            options=[AttributeOption.from_data(o) for o in data.get("options") or []],
            ignore=bool(data.get("ignore", False)),
        )

    def to_data(self) -> dict:
        out: dict = {}
        if self.display_name is not None:
            out["display_name"] = self.display_name
        out["ty"] = self.ty.value
        out["default"] = self.default.to_data()
        if self.options:
            out["options"] = [o.to_data() for o in self.options]
        if self.ignore:
            out["ignore"] = True
        return out


@dataclass
class EntityTemplate:
    name: str
    attributes: dict[str, AttributeValue] = field(default_factory=dict)
    keywords: list[str] = field(default_factory=list)

    @classmethod
    def from_data(cls, data: Any) -> EntityTemplate:
        data = _mapping(data, "template")
        attrs = _mapping(_field(data, "attributes"), "attributes")
        return cls(
            name=str(_field(data, "name")),
            attributes={str(k): AttributeValue.from_data(v) for k, v in attrs.items()},
            keywords=[str(k) for k in data.get("keywords") or []],
        )

    def to_data(self) -> dict:
        out: dict = {"name": self.name}
        if self.keywords:
            out["keywords"] = list(self.keywords)
        out["attributes"] = {k: v.to_data() for k, v in self.attributes.items()}
        return out


@dataclass
class Vec2:
    x: Expression
    y: Expression

    @classmethod
    def from_data(cls, data: Any) -> Vec2:
        data = _mapping(data, "vector")
        return cls(parse_expr_data(_field(data, "x")), parse_expr_data(_field(data, "y")))

    def to_data(self) -> dict:
        return {"x": str(self.x), "y": str(self.y)}

    def evaluate_int(self, env: Env) -> tuple[int, int]:
        return (
            to_int(as_number(self.x.evaluate(env))),
            to_int(as_number(self.y.evaluate(env))),
        )

    def evaluate_float(self, env: Env) -> tuple[float, float]:
        return (
            to_float(as_number(self.x.evaluate(env))),
            to_float(as_number(self.y.evaluate(env))),
        )


@dataclass
class Rect:
    topleft: Vec2
    size: Vec2

    @classmethod
    def from_data(cls, data: Any) -> Rect:
        data = _mapping(data, "rect")
        return cls(Vec2.from_data(_field(data, "topleft")), Vec2.from_data(_field(data, "size")))

    def to_data(self) -> dict:
        return {"topleft": self.topleft.to_data(), "size": self.size.to_data()}

    def evaluate_int(self, env: Env) -> tuple[int, int, int, int]:
        """Return (x, y, width, height)."""
        return self.topleft.evaluate_int(env) + self.size.evaluate_int(env)

    def evaluate_float(self, env: Env) -> tuple[float, float, float, float]:
        """Return (x, y, width, height)."""
        return self.topleft.evaluate_float(env) + self.size.evaluate_float(env)


@dataclass
class EntityRects:
    initial_rects: list[Rect] = field(default_factory=list)
    node_rects: list[Rect] = field(default_factory=list)

    @classmethod
    def from_data(cls, data: Any) -> EntityRects:
        data = _mapping(data, "hitboxes")
        return cls(
            [Rect.from_data(r) for r in data.get("initial_rects") or []],
            [Rect.from_data(r) for r in data.get("node_rects") or []],
        )

    def to_data(self) -> dict:
        return {
            "initial_rects": [r.to_data() for r in self.initial_rects],
            "node_rects": [r.to_data() for r in self.node_rects],
        }