"""Interfaces to the host application.

The adapter never touches host objects directly. Everything it needs to
know about the scene comes through one of the protocols below, bundled
into an ``AdapterDependencies`` instance per call. Every collaborator is
optional; a missing one behaves like its permissive default.

Methods may be plain or ``async``: the adapter awaits any awaitable they
return.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Protocol, Union

from visibility.types import SenseRange, parse_range

from .entities import Point, Token

# Plain or awaitable return value.
MaybeAwaitable = Union[Any, Awaitable[Any]]


@dataclass
class LightSample:
    """Raw light reading at a point, before mapping onto a lighting tier."""

    level: str = "bright"
    darkness_rank: int = 0
    is_darkness_source: bool = False

    @staticmethod
    def from_dict(d: object) -> LightSample:
        if isinstance(d, LightSample):
            return d
        if not isinstance(d, dict):
            return LightSample()
        rank = parse_range(d.get("darknessRank", 0))
        return LightSample(
            level=d.get("level") if isinstance(d.get("level"), str) else "bright",
            darkness_rank=0 if math.isinf(rank) else int(rank),
            is_darkness_source=bool(d.get("isDarknessSource", False)),
        )

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "darknessRank": self.darkness_rank,
            "isDarknessSource": self.is_darkness_source,
        }


def _sense_entries(value: object) -> dict[str, SenseRange]:
    """Read ``{name: {"range": r}}`` or ``[{"type": name, "range": r}]``."""
    senses: dict[str, SenseRange] = {}
    if isinstance(value, dict):
        for name, data in value.items():
            if isinstance(name, str):
                senses[name] = SenseRange.from_dict(data)
    elif isinstance(value, (list, tuple)):
        for entry in value:
            if isinstance(entry, dict) and isinstance(entry.get("type"), str):
                senses[entry["type"]] = SenseRange.from_dict(entry)
    return senses


@dataclass
class SenseCapabilities:
    """Every sense an entity has, before range filtering."""

    precise: dict[str, SenseRange] = field(default_factory=dict)
    imprecise: dict[str, SenseRange] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: object) -> SenseCapabilities:
        if isinstance(d, SenseCapabilities):
            return d
        if not isinstance(d, dict):
            return SenseCapabilities()
        return SenseCapabilities(
            precise=_sense_entries(d.get("precise")),
            imprecise=_sense_entries(d.get("imprecise")),
        )

    def to_dict(self) -> dict:
        return {
            "precise": {k: v.to_dict() for k, v in self.precise.items()},
            "imprecise": {k: v.to_dict() for k, v in self.imprecise.items()},
        }


class LightingSampler(Protocol):
    def sample_at(self, position: Point, token: Token) -> MaybeAwaitable:
        """Light at ``position``: a ``LightSample`` or its dict form."""
        ...


class VisionCapabilityProvider(Protocol):
    def get_senses(self, token: Token) -> MaybeAwaitable:
        """A ``SenseCapabilities`` or its dict form."""
        ...


class ConditionProvider(Protocol):
    def get(self, token: Token) -> MaybeAwaitable:
        """Mapping with ``blinded``, ``deafened`` and ``dazzled`` flags."""
        ...


class LineOfSightChecker(Protocol):
    def has_line_of_sight(self, observer: Token, target: Token) -> MaybeAwaitable:
        """True, False, or None when unknown."""
        ...


class SoundBlockChecker(Protocol):
    def is_blocked(self, observer: Token, target: Token) -> MaybeAwaitable:
        ...


class DarknessRayChecker(Protocol):
    def get_ray_darkness_info(
        self, observer: Token, target: Token, a: Point, b: Point
    ) -> MaybeAwaitable:
        """Fast query along the ray from ``a`` to ``b``.

        Returns ``{"passesThroughDarkness": bool, "maxDarknessRank": int}``,
        or None when the answer is not available.
        """
        ...


class DarknessSourceProvider(Protocol):
    def get_darkness_sources(self) -> MaybeAwaitable:
        """``DarknessSource`` objects (or dicts) for the precise detector."""
        ...


class DistanceProvider(Protocol):
    def total_distance(self, a: Token, b: Token) -> MaybeAwaitable:
        """Level-aware distance in grid squares; ``inf`` when unavailable."""
        ...


class ConcealmentRegionChecker(Protocol):
    def ray_has_concealment(self, a: Point, b: Point) -> MaybeAwaitable:
        ...


@dataclass
class AdapterDependencies:
    lighting: LightingSampler | None = None
    senses: VisionCapabilityProvider | None = None
    conditions: ConditionProvider | None = None
    line_of_sight: LineOfSightChecker | None = None
    sound: SoundBlockChecker | None = None
    darkness_ray: DarknessRayChecker | None = None
    darkness_sources: DarknessSourceProvider | None = None
    distance: DistanceProvider | None = None
    concealment_regions: ConcealmentRegionChecker | None = None
