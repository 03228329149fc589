"""Visibility decision engine.

Given what an observer can sense and what state a target is in, decide how
well the observer detects the target: observed, concealed, hidden or
undetected, plus which sense did the detecting.

The calculation gathers candidates from three independent paths and then
arbitrates between them, rather than returning the first sense that works.
Short-circuiting lets a weaker sense mask a stronger one (hearing winning
over tremorsense, say), so every applicable path is evaluated:

  1. **Precise non-visual senses** (echolocation, lifesense, blindsense,
     ...). These ignore lighting and invisibility and yield ``observed``.
  2. **Vision**. The strongest visual sense the observer has is resolved
     against the effective lighting tier (target, observer-side magical
     darkness, and darkness crossed by the sightline), then modified by
     invisibility, the dazzled condition and target concealment.
  3. **Imprecise senses** (tremorsense, lifesense, scent, hearing). All are
     evaluated and the best by fixed priority is kept; they yield
     ``hidden`` at best.

Arbitration picks the best state; on equal states a visual sense wins
because vision is the primary sense.

The engine is pure: no I/O, no logging, no shared state. Every input is
normalized through ``CalculationInput.from_dict`` so malformed or partial
data degrades to defaults instead of raising.

The public API is ``calculate(inp)`` returning a ``DetectionResult``, and
``calculate_json(dict)`` for the JSON wire shape.
"""

from __future__ import annotations

from dataclasses import dataclass

from .lighting import effective_lighting_level
from .senses import (
    DARKVISION,
    ECHOLOCATION,
    GREATER_DARKVISION,
    HEARING,
    IMPRECISE_PRIORITY,
    LIFESENSE,
    LIGHT_PERCEPTION,
    LOW_LIGHT_VISION,
    SCENT,
    SEE_INVISIBILITY,
    TREMORSENSE,
    VISION,
    has_sense,
    is_visual_sense,
    lifesense_can_detect,
)
from .types import (
    BRIGHT,
    CONCEALED,
    DIM,
    FLY,
    GREATER_MAGICAL_DARKNESS,
    HIDDEN,
    OBSERVED,
    UNDETECTED,
    CalculationInput,
    Detection,
    DetectionResult,
    ObserverState,
    RayDarkness,
    TargetState,
    state_rank,
)


@dataclass
class VisualDetection:
    can_detect: bool
    sense: str | None = None
    is_precise: bool = False
    base_state: str | None = None


_NO_VISUAL = VisualDetection(can_detect=False)


def _undetected() -> DetectionResult:
    return DetectionResult(state=UNDETECTED, detection=None)


def _detected(state: str, sense: str, is_precise: bool) -> DetectionResult:
    return DetectionResult(
        state=state, detection=Detection(is_precise=is_precise, sense=sense)
    )


# -- Precise non-visual senses --


def has_precise_non_visual_sense(observer: ObserverState) -> bool:
    """True if any precise non-visual sense is active, whatever the target.

    Used for the dazzled gate: dazzled only matters when vision is the
    observer's sole precise sense.
    """
    return any(
        not is_visual_sense(name) and sense.active
        for name, sense in observer.precise.items()
    )


def check_precise_non_visual_senses(
    observer: ObserverState,
    target: TargetState,
    sound_blocked: bool = False,
) -> DetectionResult | None:
    for name, sense in observer.precise.items():
        if is_visual_sense(name) or not sense.active:
            continue
        if name == ECHOLOCATION:
            # Echolocation is precise but still sound-based.
            if observer.conditions.deafened or sound_blocked:
                continue
        elif name == LIFESENSE:
            if not lifesense_can_detect(target):
                continue
        return _detected(OBSERVED, name, is_precise=True)
    return None


# -- Vision --


def _dazzle(state: str, dazzled_applies: bool) -> str:
    return CONCEALED if dazzled_applies and state == OBSERVED else state


def determine_visual_detection(
    observer: ObserverState,
    target: TargetState,
    ray_darkness: RayDarkness | None = None,
    has_line_of_sight: bool | None = None,
) -> VisualDetection:
    if observer.conditions.blinded or has_line_of_sight is False:
        return _NO_VISUAL

    precise = observer.precise
    has_see_invisibility = has_sense(precise, SEE_INVISIBILITY)

    # Invisibility blocks every visual path except see-invisibility, which
    # only manages concealed.
    if target.is_invisible:
        if not has_see_invisibility:
            return _NO_VISUAL
        return VisualDetection(
            can_detect=True,
            sense=SEE_INVISIBILITY,
            is_precise=True,
            base_state=CONCEALED,
        )

    lighting = effective_lighting_level(target, observer, ray_darkness)
    dazzled_applies = (
        observer.conditions.dazzled
        and not has_precise_non_visual_sense(observer)
    )

    def seen(sense: str, state: str = OBSERVED) -> VisualDetection:
        return VisualDetection(
            can_detect=True,
            sense=sense,
            is_precise=True,
            base_state=_dazzle(state, dazzled_applies),
        )

    if has_sense(precise, GREATER_DARKVISION):
        return seen(GREATER_DARKVISION)

    if has_sense(precise, DARKVISION):
        if lighting == GREATER_MAGICAL_DARKNESS:
            return seen(DARKVISION, CONCEALED)
        return seen(DARKVISION)

    if has_sense(precise, LOW_LIGHT_VISION):
        if lighting in (BRIGHT, DIM):
            return seen(LOW_LIGHT_VISION)
        return _NO_VISUAL

    if has_sense(precise, LIGHT_PERCEPTION) or has_sense(precise, VISION):
        sense = LIGHT_PERCEPTION if has_sense(precise, LIGHT_PERCEPTION) else VISION
        if lighting == BRIGHT:
            return seen(sense)
        if lighting == DIM:
            return seen(sense, CONCEALED)
        return _NO_VISUAL

    return _NO_VISUAL


def apply_visual_modifiers(
    visual: VisualDetection, target: TargetState
) -> DetectionResult:
    if target.is_invisible and visual.sense != SEE_INVISIBILITY:
        return _undetected()

    state = visual.base_state or OBSERVED
    # Concealment does not stack past concealed. Cover never changes state.
    if target.concealment and state == OBSERVED:
        state = CONCEALED
    return _detected(state, visual.sense or VISION, visual.is_precise)


# -- Imprecise senses --


def _is_elevated(observer: ObserverState, target: TargetState) -> bool:
    return observer.movement_action == FLY or target.movement_action == FLY


def check_imprecise_senses(
    observer: ObserverState,
    target: TargetState,
    sound_blocked: bool = False,
) -> DetectionResult | None:
    imprecise = observer.imprecise
    working: list[tuple[int, DetectionResult]] = []

    if TREMORSENSE in imprecise:
        if not _is_elevated(observer, target) and (
            "petal-step" not in target.auxiliary
        ):
            working.append(
                (
                    IMPRECISE_PRIORITY[TREMORSENSE],
                    _detected(HIDDEN, TREMORSENSE, is_precise=False),
                )
            )

    if LIFESENSE in imprecise and lifesense_can_detect(target):
        working.append(
            (
                IMPRECISE_PRIORITY[LIFESENSE],
                _detected(HIDDEN, LIFESENSE, is_precise=False),
            )
        )

    if SCENT in imprecise:
        working.append(
            (
                IMPRECISE_PRIORITY[SCENT],
                _detected(HIDDEN, SCENT, is_precise=False),
            )
        )

    if (
        HEARING in imprecise
        and not observer.conditions.deafened
        and not sound_blocked
    ):
        # Hearing is the one imprecise sense that invisibility defeats.
        heard = (
            _undetected()
            if target.is_invisible
            else _detected(HIDDEN, HEARING, is_precise=False)
        )
        working.append((IMPRECISE_PRIORITY[HEARING], heard))

    if not working:
        return None
    return min(working, key=lambda entry: entry[0])[1]


# -- Arbitration --


def _is_visual_result(result: DetectionResult) -> bool:
    return result.detection is not None and is_visual_sense(
        result.detection.sense
    )


def select_best_detection(
    results: list[DetectionResult],
) -> DetectionResult | None:
    """Best state wins; on a tie a visual sense beats a non-visual one.

    ``min`` keeps the earliest of equal keys, so candidate order is the
    final tie-breaker.
    """
    if not results:
        return None
    return min(
        results,
        key=lambda r: (state_rank(r.state), 0 if _is_visual_result(r) else 1),
    )


def calculate(inp: CalculationInput) -> DetectionResult:
    target = inp.target
    observer = inp.observer
    candidates: list[DetectionResult] = []

    precise = check_precise_non_visual_senses(
        observer, target, inp.sound_blocked
    )
    if precise is not None:
        candidates.append(precise)

    visual = determine_visual_detection(
        observer, target, inp.ray_darkness, inp.has_line_of_sight
    )
    if visual.can_detect:
        candidates.append(apply_visual_modifiers(visual, target))

    imprecise = check_imprecise_senses(observer, target, inp.sound_blocked)
    if imprecise is not None:
        candidates.append(imprecise)

    best = select_best_detection(candidates)
    return best if best is not None else _undetected()


def calculate_json(input_dict: dict) -> dict:
    """JSON-dict in, JSON-dict out wrapper."""
    return calculate(CalculationInput.from_dict(input_dict)).to_dict()
