"""Host entity model consumed by the adapter.

A ``Token`` is the adapter's view of a creature on the map: a pixel
footprint, an elevation, and the handful of tags that feed the target and
observer states. Everything richer (senses, lighting, walls) stays behind
the collaborator protocols in ``collaborators.py``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    elevation: float = 0.0

    @staticmethod
    def from_dict(d: dict) -> Point:
        return Point(
            x=float(d["x"]),
            y=float(d["y"]),
            elevation=float(d.get("elevation", 0.0) or 0.0),
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "elevation": self.elevation}


def _finite(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _strings(value: object) -> list[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [v for v in value if isinstance(v, str)]


@dataclass
class Token:
    id: str
    x: float
    y: float
    width: float = 100.0
    height: float = 100.0
    elevation: float = 0.0
    name: str = ""
    movement_action: str | int = 0
    traits: list[str] = field(default_factory=list)
    conditions: list[str] = field(default_factory=list)
    feats: list[str] = field(default_factory=list)
    flags: dict = field(default_factory=dict)

    @staticmethod
    def from_dict(d: object) -> Token | None:
        """Build a token, or None if the id or position is missing."""
        if not isinstance(d, dict):
            return None
        token_id = d.get("id")
        x = _finite(d.get("x"))
        y = _finite(d.get("y"))
        if not isinstance(token_id, str) or not token_id or x is None or y is None:
            return None
        movement = d.get("movementAction", 0)
        if isinstance(movement, bool) or not isinstance(movement, (str, int)):
            movement = 0
        flags = d.get("flags")
        return Token(
            id=token_id,
            x=x,
            y=y,
            width=_finite(d.get("width")) or 100.0,
            height=_finite(d.get("height")) or 100.0,
            elevation=_finite(d.get("elevation")) or 0.0,
            name=d.get("name") if isinstance(d.get("name"), str) else "",
            movement_action=movement,
            traits=_strings(d.get("traits")),
            conditions=_strings(d.get("conditions")),
            feats=_strings(d.get("feats")),
            flags=dict(flags) if isinstance(flags, dict) else {},
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "elevation": self.elevation,
            "movementAction": self.movement_action,
            "traits": list(self.traits),
            "conditions": list(self.conditions),
            "feats": list(self.feats),
            "flags": dict(self.flags),
        }

    @property
    def center(self) -> Point:
        return Point(
            self.x + self.width / 2, self.y + self.height / 2, self.elevation
        )

    def has_condition(self, slug: str) -> bool:
        return slug in self.conditions


def coerce_token(value: object) -> Token | None:
    """Accept a ``Token`` or its dict form; anything else is invalid."""
    if isinstance(value, Token):
        if not value.id:
            return None
        if _finite(value.x) is None or _finite(value.y) is None:
            return None
        return value
    return Token.from_dict(value)
