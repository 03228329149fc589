"""Sense vocabulary shared by the calculator and the adapter.

Sense maps are keyed by free-form names coming from character sheets, so
several senses have two spellings (kebab-case from the rules data,
camelCase from older configuration). Visual names are a closed set; every
other precise sense is treated as non-visual, with explicit rules only for
the handful that have special conditions (echolocation, lifesense).
"""

from __future__ import annotations

from .types import SenseRange, TargetState

VISION = "vision"
DARKVISION = "darkvision"
GREATER_DARKVISION = "greaterDarkvision"
LOW_LIGHT_VISION = "lowLightVision"
LIGHT_PERCEPTION = "light-perception"
SEE_INVISIBILITY = "see-invisibility"

ECHOLOCATION = "echolocation"
LIFESENSE = "lifesense"
TREMORSENSE = "tremorsense"
SCENT = "scent"
HEARING = "hearing"

# Canonical name -> every accepted spelling.
VISUAL_SENSE_ALIASES: dict[str, tuple[str, ...]] = {
    VISION: (VISION,),
    DARKVISION: (DARKVISION,),
    GREATER_DARKVISION: (GREATER_DARKVISION, "greater-darkvision"),
    LOW_LIGHT_VISION: (LOW_LIGHT_VISION, "low-light-vision"),
    LIGHT_PERCEPTION: (LIGHT_PERCEPTION,),
    SEE_INVISIBILITY: (SEE_INVISIBILITY, "seeInvisibility"),
}

VISUAL_SENSES = frozenset(
    name for names in VISUAL_SENSE_ALIASES.values() for name in names
)

# Precise non-visual senses found in the rules data. Anything else that is
# not visual still takes the generic path.
KNOWN_NON_VISUAL_PRECISE = frozenset(
    {
        ECHOLOCATION,
        LIFESENSE,
        TREMORSENSE,
        SCENT,
        HEARING,
        "blindsense",
        "thoughtsense",
        "wavesense",
        "spiritsense",
        "motion-sense",
    }
)

# Lower is better when several imprecise senses succeed.
IMPRECISE_PRIORITY: dict[str, int] = {
    TREMORSENSE: 1,
    LIFESENSE: 2,
    SCENT: 3,
    HEARING: 4,
}


def is_visual_sense(name: str) -> bool:
    return name in VISUAL_SENSES


def find_sense(
    senses: dict[str, SenseRange], canonical: str
) -> SenseRange | None:
    """Look up a visual sense under any of its spellings."""
    for name in VISUAL_SENSE_ALIASES.get(canonical, (canonical,)):
        if name in senses:
            return senses[name]
    return None


def has_sense(senses: dict[str, SenseRange], canonical: str) -> bool:
    return find_sense(senses, canonical) is not None


def lifesense_can_detect(target: TargetState) -> bool:
    """Lifesense feels living and undead creatures, never pure constructs."""
    is_undead = "undead" in target.traits
    is_construct = "construct" in target.traits
    return is_undead or not is_construct
