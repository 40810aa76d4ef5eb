"""Expression environments built from a placed entity.

The entity is any object with numeric ``x``, ``y``, ``width`` and ``height``,
an ``attributes`` mapping of name to bool/int/float/str, and ``nodes``, a
sequence of ``(x, y)`` pairs.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .expression import Const, const_from_attribute, constant


def _node(entity: Any, idx: int) -> Optional[tuple[float, float]]:
    nodes = entity.nodes
    if 0 <= idx < len(nodes):
        x, y = nodes[idx]
        return x, y
    return None


def make_entity_env(entity: Any) -> dict[str, Const]:
    """Names available when drawing an entity."""
    env: dict[str, Const] = {
        "x": constant(entity.x),
        "y": constant(entity.y),
        "width": constant(entity.width),
        "height": constant(entity.height),
    }
    for key, value in entity.attributes.items():
        env[key] = const_from_attribute(value)
    if entity.nodes:
        first_x, first_y = entity.nodes[0]
        env["firstnodex"] = constant(first_x)
        env["firstnodey"] = constant(first_y)
        last_x, last_y = entity.nodes[-1]
        env["lastnodex"] = constant(last_x)
        env["lastnodey"] = constant(last_y)
    return env


def make_node_env(entity: Any, env: Mapping[str, Const], node_idx: int) -> dict[str, Const]:
    """Extend ``env`` with the names describing node ``node_idx``."""
    out = dict(env)
    out["nodeidx"] = constant(node_idx)
    base = (constant(entity.x), constant(entity.y))

    current = _node(entity, node_idx)
    if current is not None:
        out["nodex"], out["nodey"] = constant(current[0]), constant(current[1])

    following = _node(entity, node_idx + 1)
    if following is not None:
        fx, fy = constant(following[0]), constant(following[1])
        out["nextnodex"], out["nextnodey"] = fx, fy
        out["nextnodexorbase"], out["nextnodeyorbase"] = fx, fy
    else:
        out["nextnodexorbase"], out["nextnodeyorbase"] = base

    previous = _node(entity, node_idx - 1) if node_idx >= 1 else None
    if previous is not None:
        px, py = constant(previous[0]), constant(previous[1])
        out["prevnodex"], out["prevnodey"] = px, py
        out["prevnodexorbase"], out["prevnodeyorbase"] = px, py
    else:
        out["prevnodexorbase"], out["prevnodeyorbase"] = base
    return out