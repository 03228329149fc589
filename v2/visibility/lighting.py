"""Lighting tiers and the effective-lighting computation.

Plain darkness is local: an observer standing in ordinary darkness still
sees clearly into a lit area. Magical darkness is different: it wraps the
observer's own eyes, so an observer inside it (or a sightline crossing it)
drags the effective tier up to the magical level. Greater magical darkness
(rank 4+) always wins over the lesser tier.
"""

from __future__ import annotations

from .types import (
    BRIGHT,
    DARKNESS,
    DIM,
    GREATER_MAGICAL_DARKNESS,
    LIGHTING_LEVELS,
    MAGICAL_DARKNESS,
    ObserverState,
    RayDarkness,
    TargetState,
)

GREATER_DARKNESS_RANK = 4

_MAGICAL_TIERS = (MAGICAL_DARKNESS, GREATER_MAGICAL_DARKNESS)


def lighting_index(level: str) -> int:
    try:
        return LIGHTING_LEVELS.index(level)
    except ValueError:
        return 0


def is_any_darkness(level: str) -> bool:
    return lighting_index(level) >= lighting_index(DARKNESS)


def _escalate(current: str, magical: str) -> str:
    """Raise ``current`` to ``magical`` if that tier is magical and worse."""
    if magical not in _MAGICAL_TIERS:
        return current
    if lighting_index(magical) > lighting_index(current):
        return magical
    return current


def effective_lighting_level(
    target: TargetState,
    observer: ObserverState,
    ray_darkness: RayDarkness | None = None,
) -> str:
    level = _escalate(target.lighting_level, observer.lighting_level)
    if ray_darkness is not None and ray_darkness.passes_through_darkness:
        level = _escalate(level, ray_darkness.lighting_level)
    return level


def lighting_from_sample(
    level: str | None,
    darkness_rank: float = 0,
    is_darkness_source: bool = False,
) -> str:
    """Map a raw light sample onto a lighting tier."""
    rank = darkness_rank or 0
    if rank >= GREATER_DARKNESS_RANK and is_darkness_source:
        return GREATER_MAGICAL_DARKNESS
    if rank >= 1 and is_darkness_source:
        return MAGICAL_DARKNESS
    if rank >= 1 or level == DARKNESS:
        return DARKNESS
    if level == DIM:
        return DIM
    return BRIGHT


def lighting_from_rank(rank: float) -> str:
    """Tier for darkness crossed by a sightline, by its spell rank."""
    if rank >= GREATER_DARKNESS_RANK:
        return GREATER_MAGICAL_DARKNESS
    if rank >= 1:
        return MAGICAL_DARKNESS
    return DARKNESS
