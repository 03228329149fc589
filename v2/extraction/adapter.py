"""Build engine inputs from host tokens.

The adapter is the only layer that talks to the host. For one observer and
one target it asks the collaborators in ``AdapterDependencies`` for
lighting, senses, conditions, line of sight, sound and darkness, translates
the answers into a ``CalculationInput`` and hands it to
``visibility.calculator.calculate``. It adds no visibility rules of its
own beyond range filtering and mapping raw samples onto lighting tiers.

Failure semantics: every collaborator call is guarded. An exception is
logged with its traceback and replaced by the permissive default for that
query (bright light, no senses, no conditions, unknown line of sight, sound
not blocked, no darkness). Only a structurally invalid token (missing id or
position) short-circuits, and ``calculate_from_tokens`` reports it as
undetected.

Collaborators may be synchronous or ``async``; results are awaited when
they are awaitable.
"""

from __future__ import annotations

import inspect
import logging
import math
from typing import Any, Callable

from visibility.calculator import calculate
from visibility.lighting import lighting_from_sample
from visibility.senses import HEARING
from visibility.types import (
    CalculationInput,
    Conditions,
    DetectionResult,
    ObserverState,
    RayDarkness,
    SenseRange,
    TargetState,
)

from .collaborators import AdapterDependencies, LightSample, SenseCapabilities
from .darkness import (
    DarknessDetector,
    DarknessSource,
    darkness_from_rank,
    read_fast_result,
    resolve_ray_darkness,
)
from .distance import distance_from_squares, grid_distance_feet
from .entities import Token, coerce_token
from .options import AdapterSettings, CalculationOptions

logger = logging.getLogger(__name__)

_CONDITION_SLUGS = ("blinded", "deafened", "dazzled")


async def _query(
    what: str, fn: Callable[..., Any] | None, *args: Any, default: Any = None
) -> Any:
    """Call a collaborator method, awaiting if needed; default on failure."""
    if fn is None:
        return default
    try:
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception:
        logger.warning("%s query failed; using default", what, exc_info=True)
        return default
    return result


# -- Lighting --


async def _light_sample(
    token: Token, deps: AdapterDependencies, options: CalculationOptions
) -> LightSample:
    precomputed = options.light_for(token.id)
    if precomputed is not None:
        return precomputed
    sampler = deps.lighting
    raw = await _query(
        "lighting", sampler and sampler.sample_at, token.center, token
    )
    return LightSample.from_dict(raw)


def lighting_level(sample: LightSample) -> str:
    return lighting_from_sample(
        sample.level, sample.darkness_rank, sample.is_darkness_source
    )


# -- Senses --


def _in_range(sense: SenseRange, distance: float) -> bool:
    return sense.range > 0 and (
        math.isinf(sense.range) or sense.range >= distance
    )


def filter_senses(
    capabilities: SenseCapabilities,
    distance: float,
    deafened: bool = False,
    default_hearing: bool = True,
) -> tuple[dict[str, SenseRange], dict[str, SenseRange]]:
    """Keep the senses that reach ``distance`` feet.

    An entity with no hearing entry hears at any range unless deafened.
    """
    precise = {
        name: sense
        for name, sense in capabilities.precise.items()
        if _in_range(sense, distance)
    }
    imprecise = {
        name: sense
        for name, sense in capabilities.imprecise.items()
        if _in_range(sense, distance)
    }
    if (
        default_hearing
        and HEARING not in capabilities.imprecise
        and not deafened
    ):
        imprecise[HEARING] = SenseRange(range=math.inf)
    return precise, imprecise


async def _capabilities(
    token: Token, deps: AdapterDependencies, options: CalculationOptions
) -> SenseCapabilities:
    precomputed = options.senses_for(token.id)
    if precomputed is not None:
        return precomputed
    provider = deps.senses
    raw = await _query("senses", provider and provider.get_senses, token)
    return SenseCapabilities.from_dict(raw)


async def _conditions(token: Token, deps: AdapterDependencies) -> Conditions:
    provider = deps.conditions
    if provider is None:
        return Conditions(
            **{slug: token.has_condition(slug) for slug in _CONDITION_SLUGS}
        )
    raw = await _query("conditions", provider.get, token)
    return Conditions.from_dict(raw)


async def _distance_feet(
    observer: Token,
    target: Token,
    deps: AdapterDependencies,
    settings: AdapterSettings,
) -> float:
    provider = deps.distance
    squares = await _query(
        "distance", provider and provider.total_distance, observer, target
    )
    feet = distance_from_squares(squares, settings)
    if feet is not None:
        return feet
    return grid_distance_feet(observer, target, settings)


# -- Sightline --


async def _line_of_sight(
    observer: Token,
    target: Token,
    deps: AdapterDependencies,
    options: CalculationOptions,
) -> bool | None:
    if options.skip_los:
        return None
    key = (observer.id, target.id)
    if key in options.precomputed_los:
        return bool(options.precomputed_los[key])
    checker = deps.line_of_sight
    result = await _query(
        "line of sight",
        checker and checker.has_line_of_sight,
        observer,
        target,
    )
    return result if isinstance(result, bool) else None


async def _sound_blocked(
    observer: Token, target: Token, deps: AdapterDependencies
) -> bool:
    checker = deps.sound
    result = await _query(
        "sound",
        checker and checker.is_blocked,
        observer,
        target,
        default=False,
    )
    return bool(result)


async def _darkness_detector(
    deps: AdapterDependencies, settings: AdapterSettings
) -> DarknessDetector:
    provider = deps.darkness_sources
    raw = await _query(
        "darkness sources",
        provider and provider.get_darkness_sources,
        default=[],
    )
    sources = []
    if not isinstance(raw, (list, tuple)):
        raw = []
    for entry in raw:
        try:
            source = DarknessSource.from_dict(entry)
        except (TypeError, ValueError, IndexError, KeyError):
            logger.warning("Skipping malformed darkness source %r", entry)
            continue
        if source is not None:
            sources.append(source)
    return DarknessDetector(sources, settings)


async def _ray_darkness(
    observer: Token,
    target: Token,
    observer_light: LightSample,
    target_light: LightSample,
    deps: AdapterDependencies,
    options: CalculationOptions,
) -> RayDarkness | None:
    # A precomputed endpoint inside ranked darkness means the sightline
    # passes through it.
    endpoint_ranks = [
        light.darkness_rank
        for token, light in ((observer, observer_light), (target, target_light))
        if token.id in options.precomputed_lights
    ]
    if endpoint_ranks and max(endpoint_ranks) > 0:
        return darkness_from_rank(max(endpoint_ranks))

    checker = deps.darkness_ray
    raw = await _query(
        "ray darkness",
        checker and checker.get_ray_darkness_info,
        observer,
        target,
        observer.center,
        target.center,
    )
    fast = read_fast_result(raw)
    detector = await _darkness_detector(deps, options.settings)
    try:
        return resolve_ray_darkness(fast, detector, observer, target)
    except Exception:
        logger.warning(
            "Darkness detection failed for %s -> %s; assuming none",
            observer.id,
            target.id,
            exc_info=True,
        )
        return None


# -- Target --


async def _target_concealment(
    target: Token, observer: Token, deps: AdapterDependencies
) -> bool:
    flag = target.flags.get("concealment")
    if flag is not None:
        return bool(flag)
    if target.has_condition("concealed"):
        return True
    checker = deps.concealment_regions
    result = await _query(
        "concealment region",
        checker and checker.ray_has_concealment,
        observer.center,
        target.center,
        default=False,
    )
    return bool(result)


def target_auxiliary(target: Token) -> list[str]:
    auxiliary = []
    if target.has_condition("invisible") or target.flags.get("invisible"):
        auxiliary.append("invisible")
    if "petal-step" in target.feats:
        auxiliary.append("petal-step")
    return auxiliary


# -- Public API --


async def build_input(
    observer: object,
    target: object,
    deps: AdapterDependencies | None = None,
    options: CalculationOptions | None = None,
) -> CalculationInput | None:
    """Assemble the engine input for one pair, or None for invalid tokens."""
    observer_token = coerce_token(observer)
    target_token = coerce_token(target)
    if observer_token is None or target_token is None:
        logger.debug("Invalid token reference; no input built")
        return None
    deps = deps or AdapterDependencies()
    options = options or CalculationOptions()
    settings = options.settings

    observer_light = await _light_sample(observer_token, deps, options)
    target_light = await _light_sample(target_token, deps, options)
    conditions = await _conditions(observer_token, deps)
    distance = await _distance_feet(
        observer_token, target_token, deps, settings
    )
    precise, imprecise = filter_senses(
        await _capabilities(observer_token, deps, options),
        distance,
        deafened=conditions.deafened,
        default_hearing=settings.default_hearing,
    )

    inp = CalculationInput(
        target=TargetState(
            lighting_level=lighting_level(target_light),
            concealment=await _target_concealment(
                target_token, observer_token, deps
            ),
            auxiliary=target_auxiliary(target_token),
            traits=list(target_token.traits),
            movement_action=target_token.movement_action,
        ),
        observer=ObserverState(
            precise=precise,
            imprecise=imprecise,
            conditions=conditions,
            lighting_level=lighting_level(observer_light),
            movement_action=observer_token.movement_action,
        ),
        ray_darkness=await _ray_darkness(
            observer_token,
            target_token,
            observer_light,
            target_light,
            deps,
            options,
        ),
        sound_blocked=await _sound_blocked(observer_token, target_token, deps),
        has_line_of_sight=await _line_of_sight(
            observer_token, target_token, deps, options
        ),
    )
    logger.debug(
        "Built input %s -> %s at %.0f ft",
        observer_token.id,
        target_token.id,
        distance,
    )
    return inp


async def calculate_from_tokens(
    observer: object,
    target: object,
    deps: AdapterDependencies | None = None,
    options: CalculationOptions | None = None,
) -> DetectionResult:
    inp = await build_input(observer, target, deps, options)
    if inp is None:
        return DetectionResult()
    return calculate(inp)


async def calculate_state_from_tokens(
    observer: object,
    target: object,
    deps: AdapterDependencies | None = None,
    options: CalculationOptions | None = None,
) -> str:
    """Older callers only want the state string."""
    result = await calculate_from_tokens(observer, target, deps, options)
    return result.state
