"""Data types matching the visibility calculation JSON schema.

Fields are snake_case in Python and camelCase on the wire. Every
``from_dict`` is total: missing, ``None`` or wrongly typed values fall back
to the safe defaults, so partial input never raises.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

# Detection states, best to worst.
OBSERVED = "observed"
CONCEALED = "concealed"
HIDDEN = "hidden"
UNDETECTED = "undetected"
VISIBILITY_STATES = (OBSERVED, CONCEALED, HIDDEN, UNDETECTED)

# Lighting tiers, least to most restrictive.
BRIGHT = "bright"
DIM = "dim"
DARKNESS = "darkness"
MAGICAL_DARKNESS = "magicalDarkness"
GREATER_MAGICAL_DARKNESS = "greaterMagicalDarkness"
LIGHTING_LEVELS = (
    BRIGHT,
    DIM,
    DARKNESS,
    MAGICAL_DARKNESS,
    GREATER_MAGICAL_DARKNESS,
)

# Movement marker that lifts a creature off the ground.
FLY = "fly"

INFINITE_RANGE = math.inf
_INFINITE_WORDS = {"infinity", "+infinity", "infinite", "inf", "+inf"}


def state_rank(state: str) -> int:
    """1 for observed through 4 for undetected; unknown states rank last."""
    try:
        return VISIBILITY_STATES.index(state) + 1
    except ValueError:
        return 999


def parse_range(value: object) -> float:
    """Coerce a sense range to a float. Disabled or unreadable ranges are 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _INFINITE_WORDS:
            return INFINITE_RANGE
        try:
            value = float(text)
        except ValueError:
            return 0.0
    if not isinstance(value, (int, float)):
        return 0.0
    value = float(value)
    if math.isnan(value) or value <= 0:
        return 0.0
    return value


def range_to_wire(value: float) -> float | str:
    return "Infinity" if math.isinf(value) else value


def normalize_lighting(value: object, default: str = BRIGHT) -> str:
    """Missing values take ``default``; an unrecognised name counts as darkness."""
    if value in LIGHTING_LEVELS:
        return value
    if isinstance(value, str) and value:
        return DARKNESS
    return default


def _string_list(value: object) -> list[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [v for v in value if isinstance(v, str)]


def _movement_action(value: object) -> str | int:
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return value
    return 0


def _as_dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


@dataclass
class SenseRange:
    range: float = 0.0

    @staticmethod
    def from_dict(d: object) -> SenseRange:
        # Accept {"range": 30}, a bare range, or a presence marker.
        if isinstance(d, dict):
            return SenseRange(range=parse_range(d.get("range")))
        return SenseRange(range=parse_range(d))

    def to_dict(self) -> dict:
        return {"range": range_to_wire(self.range)}

    @property
    def active(self) -> bool:
        return self.range > 0


def _sense_map(value: object) -> dict[str, SenseRange]:
    senses: dict[str, SenseRange] = {}
    for name, data in _as_dict(value).items():
        if isinstance(name, str) and data is not None and data is not False:
            senses[name] = SenseRange.from_dict(data)
    return senses


@dataclass
class Conditions:
    blinded: bool = False
    deafened: bool = False
    dazzled: bool = False

    @staticmethod
    def from_dict(d: object) -> Conditions:
        d = _as_dict(d)
        return Conditions(
            blinded=bool(d.get("blinded", False)),
            deafened=bool(d.get("deafened", False)),
            dazzled=bool(d.get("dazzled", False)),
        )

    def to_dict(self) -> dict:
        return {
            "blinded": self.blinded,
            "deafened": self.deafened,
            "dazzled": self.dazzled,
        }


@dataclass
class TargetState:
    lighting_level: str = BRIGHT
    concealment: bool = False
    auxiliary: list[str] = field(default_factory=list)
    traits: list[str] = field(default_factory=list)
    movement_action: str | int = 0

    @staticmethod
    def from_dict(d: object) -> TargetState:
        d = _as_dict(d)
        return TargetState(
            lighting_level=normalize_lighting(d.get("lightingLevel")),
            concealment=bool(d.get("concealment", False)),
            auxiliary=_string_list(d.get("auxiliary")),
            traits=_string_list(d.get("traits")),
            movement_action=_movement_action(d.get("movementAction")),
        )

    def to_dict(self) -> dict:
        return {
            "lightingLevel": self.lighting_level,
            "concealment": self.concealment,
            "auxiliary": list(self.auxiliary),
            "traits": list(self.traits),
            "movementAction": self.movement_action,
        }

    @property
    def is_invisible(self) -> bool:
        return "invisible" in self.auxiliary


@dataclass
class ObserverState:
    precise: dict[str, SenseRange] = field(default_factory=dict)
    imprecise: dict[str, SenseRange] = field(default_factory=dict)
    conditions: Conditions = field(default_factory=Conditions)
    lighting_level: str = BRIGHT
    movement_action: str | int = 0

    @staticmethod
    def from_dict(d: object) -> ObserverState:
        d = _as_dict(d)
        return ObserverState(
            precise=_sense_map(d.get("precise")),
            imprecise=_sense_map(d.get("imprecise")),
            conditions=Conditions.from_dict(d.get("conditions")),
            lighting_level=normalize_lighting(d.get("lightingLevel")),
            movement_action=_movement_action(d.get("movementAction")),
        )

    def to_dict(self) -> dict:
        return {
            "precise": {k: v.to_dict() for k, v in self.precise.items()},
            "imprecise": {k: v.to_dict() for k, v in self.imprecise.items()},
            "conditions": self.conditions.to_dict(),
            "lightingLevel": self.lighting_level,
            "movementAction": self.movement_action,
        }


@dataclass
class RayDarkness:
    passes_through_darkness: bool = False
    rank: int = 0
    lighting_level: str = DARKNESS

    @staticmethod
    def from_dict(d: object) -> RayDarkness | None:
        if not isinstance(d, dict):
            return None
        rank = d.get("rank", 0)
        if not isinstance(rank, (int, float)) or not math.isfinite(rank):
            rank = 0
        return RayDarkness(
            passes_through_darkness=bool(d.get("passesThroughDarkness", False)),
            rank=int(rank),
            lighting_level=normalize_lighting(d.get("lightingLevel"), DARKNESS),
        )

    def to_dict(self) -> dict:
        return {
            "passesThroughDarkness": self.passes_through_darkness,
            "rank": self.rank,
            "lightingLevel": self.lighting_level,
        }


@dataclass
class CalculationInput:
    target: TargetState = field(default_factory=TargetState)
    observer: ObserverState = field(default_factory=ObserverState)
    ray_darkness: RayDarkness | None = None
    sound_blocked: bool = False
    # None means unknown; only an explicit False blocks vision.
    has_line_of_sight: bool | None = None

    @staticmethod
    def from_dict(d: object) -> CalculationInput:
        d = _as_dict(d)
        los = d.get("hasLineOfSight")
        return CalculationInput(
            target=TargetState.from_dict(d.get("target")),
            observer=ObserverState.from_dict(d.get("observer")),
            ray_darkness=RayDarkness.from_dict(d.get("rayDarkness")),
            sound_blocked=bool(d.get("soundBlocked", False)),
            has_line_of_sight=los if isinstance(los, bool) else None,
        )

    def to_dict(self) -> dict:
        return {
            "target": self.target.to_dict(),
            "observer": self.observer.to_dict(),
            "rayDarkness": (
                self.ray_darkness.to_dict() if self.ray_darkness else None
            ),
            "soundBlocked": self.sound_blocked,
            "hasLineOfSight": self.has_line_of_sight,
        }


@dataclass
class Detection:
    is_precise: bool
    sense: str

    @staticmethod
    def from_dict(d: object) -> Detection | None:
        if not isinstance(d, dict) or not isinstance(d.get("sense"), str):
            return None
        return Detection(is_precise=bool(d.get("isPrecise")), sense=d["sense"])

    def to_dict(self) -> dict:
        return {"isPrecise": self.is_precise, "sense": self.sense}


@dataclass
class DetectionResult:
    state: str = UNDETECTED
    detection: Detection | None = None

    @staticmethod
    def from_dict(d: object) -> DetectionResult:
        d = _as_dict(d)
        state = d.get("state")
        if state not in VISIBILITY_STATES:
            state = UNDETECTED
        return DetectionResult(
            state=state, detection=Detection.from_dict(d.get("detection"))
        )

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "detection": self.detection.to_dict() if self.detection else None,
        }

    @property
    def rank(self) -> int:
        return state_rank(self.state)
