"""Drawing instructions for entities in configuration files."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .config import Rect, Vec2, parse_expr_data
from .expression import Env, Expression, Literal, as_number, to_float, to_int


def _const(value: float) -> Expression:
    return Literal(value)


@dataclass
class Color:
    r: Expression = field(default_factory=lambda: _const(255))
    g: Expression = field(default_factory=lambda: _const(255))
    b: Expression = field(default_factory=lambda: _const(255))
    a: Expression = field(default_factory=lambda: _const(255))

    @classmethod
    def clear(cls) -> Color:
        return cls(_const(0), _const(0), _const(0), _const(0))

    @classmethod
    def from_data(cls, data: Any) -> Color:
        if not isinstance(data, Mapping):
            raise ValueError("color: expected a mapping")
        try:
            return cls(*(parse_expr_data(data[k]) for k in "rgba"))
        except KeyError as err:
            raise ValueError(f"missing field `{err.args[0]}`") from None

    def to_data(self) -> dict:
        return {"r": str(self.r), "g": str(self.g), "b": str(self.b), "a": str(self.a)}

    def evaluate(self, env: Env) -> tuple[int, int, int, int]:
        """Evaluate to an (r, g, b, a) tuple of bytes."""
        r, g, b, a = (
            to_int(as_number(c.evaluate(env))) & 0xFF for c in (self.r, self.g, self.b, self.a)
        )
        return r, g, b, a


def _u32(data: Any) -> int:
    if isinstance(data, bool) or not isinstance(data, int) or not 0 <= data < 2**32:
        raise ValueError(f"expected an unsigned integer, got {data!r}")
    return data


def _f32(data: Any) -> float:
    if isinstance(data, bool) or not isinstance(data, (int, float)):
        raise ValueError(f"expected a number, got {data!r}")
    return to_float(float(data))


def _bool(data: Any) -> bool:
    if not isinstance(data, bool):
        raise ValueError(f"expected a boolean, got {data!r}")
    return data


def _one_one() -> Vec2:
    return Vec2(_const(1), _const(1))


def _empty_rect() -> Rect:
    return Rect(Vec2(_const(0), _const(0)), Vec2(_const(0), _const(0)))


def _kind(name: str) -> dict:
    return {"kind": name}


class DrawElement:
    """Base of the drawing instructions; stored as {"Variant": {fields}}."""

    _variants: ClassVar[dict[str, type]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        DrawElement._variants[cls.__name__] = cls

    @classmethod
    def from_data(cls, data: Any) -> DrawElement:
        if not isinstance(data, Mapping) or len(data) != 1:
            raise ValueError("draw element: expected a mapping with one variant key")
        ((name, body),) = data.items()
        variant = cls._variants.get(name)
        if variant is None:
            raise ValueError(f"unknown draw element {name!r}")
        if not isinstance(body, Mapping):
            raise ValueError(f"{name}: expected a mapping")
        kwargs = {}
        for f in dataclasses.fields(variant):
            if f.name in body:
                kwargs[f.name] = _LOADERS[f.metadata["kind"]](body[f.name])
            elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                raise ValueError(f"{name}: missing field `{f.name}`")
        return variant(**kwargs)

    def to_data(self) -> dict:
        body = {
            f.name: _DUMPERS[f.metadata["kind"]](getattr(self, f.name))
            for f in dataclasses.fields(self)
        }
        return {type(self).__name__: body}


@dataclass(kw_only=True)
class DrawRect(DrawElement):
    rect: Rect = field(metadata=_kind("rect"))
    color: Color = field(default_factory=Color.clear, metadata=_kind("color"))
    border_color: Color = field(default_factory=Color.clear, metadata=_kind("color"))
    border_thickness: int = field(default=1, metadata=_kind("u32"))


@dataclass(kw_only=True)
class DrawEllipse(DrawElement):
    rect: Rect = field(metadata=_kind("rect"))
    color: Color = field(default_factory=Color.clear, metadata=_kind("color"))
    border_color: Color = field(default_factory=Color.clear, metadata=_kind("color"))
    border_thickness: int = field(default=1, metadata=_kind("u32"))


@dataclass(kw_only=True)
class DrawLine(DrawElement):
    start: Vec2 = field(metadata=_kind("vec2"))
    end: Vec2 = field(metadata=_kind("vec2"))
    color: Color = field(metadata=_kind("color"))
    arrowhead: bool = field(default=False, metadata=_kind("bool"))
    thickness: int = field(default=1, metadata=_kind("u32"))


@dataclass(kw_only=True)
class DrawCurve(DrawElement):
    start: Vec2 = field(metadata=_kind("vec2"))
    end: Vec2 = field(metadata=_kind("vec2"))
    middle: Vec2 = field(metadata=_kind("vec2"))
    color: Color = field(metadata=_kind("color"))
    thickness: int = field(default=1, metadata=_kind("u32"))


@dataclass(kw_only=True)
class DrawRectImage(DrawElement):
    texture: Expression = field(metadata=_kind("expr"))
    tiler: Expression = field(default_factory=lambda: Literal("repeat"), metadata=_kind("expr"))
    bounds: Rect = field(metadata=_kind("rect"))
    slice: Rect = field(default_factory=_empty_rect, metadata=_kind("rect"))
    scale: Vec2 = field(default_factory=_one_one, metadata=_kind("vec2"))
    color: Color = field(default_factory=Color, metadata=_kind("color"))


@dataclass(kw_only=True)
class DrawPointImage(DrawElement):
    texture: Expression = field(metadata=_kind("expr"))
    point: Vec2 = field(metadata=_kind("vec2"))
    justify_x: float = field(default=0.5, metadata=_kind("f32"))
    justify_y: float = field(default=0.5, metadata=_kind("f32"))
    scale: Vec2 = field(default_factory=_one_one, metadata=_kind("vec2"))
    color: Color = field(default_factory=Color, metadata=_kind("color"))
    rot: Expression = field(default_factory=lambda: _const(0), metadata=_kind("expr"))


@dataclass(kw_only=True)
class DrawRectCustom(DrawElement):
    interval: float = field(metadata=_kind("f32"))
    rect: Rect = field(metadata=_kind("rect"))
    draw: list[DrawElement] = field(metadata=_kind("draw"))


def _load_draw_list(data: Any) -> list[DrawElement]:
    if not isinstance(data, list):
        raise ValueError("expected a list of draw elements")
    return [DrawElement.from_data(item) for item in data]


_LOADERS = {
    "expr": parse_expr_data,
    "vec2": Vec2.from_data,
    "rect": Rect.from_data,
    "color": Color.from_data,
    "u32": _u32,
    "f32": _f32,
    "bool": _bool,
    "draw": _load_draw_list,
}

_DUMPERS = {
    "expr": str,
    "vec2": Vec2.to_data,
    "rect": Rect.to_data,
    "color": Color.to_data,
    "u32": int,
    "f32": float,
    "bool": bool,
    "draw": lambda items: [item.to_data() for item in items],
}


@dataclass
class EntityDraw:
    initial_draw: list[DrawElement] = field(default_factory=list)
    node_draw: list[DrawElement] = field(default_factory=list)

    @classmethod
    def from_data(cls, data: Any) -> EntityDraw:
        if not isinstance(data, Mapping):
            raise ValueError("entity draw: expected a mapping")
        return cls(
            _load_draw_list(data.get("initial_draw") or []),
            _load_draw_list(data.get("node_draw") or []),
        )

    def to_data(self) -> dict:
        return {
            "initial_draw": [e.to_data() for e in self.initial_draw],
            "node_draw": [e.to_data() for e in self.node_draw],
        }