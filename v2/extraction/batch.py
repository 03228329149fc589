"""Evaluate many observer/target pairs at once.

Pairs are independent, so they run concurrently on the event loop; the
collaborators' own awaits interleave. A pair that fails outright is logged
and reported as undetected without affecting the rest.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from visibility.types import DetectionResult

from .adapter import calculate_from_tokens
from .collaborators import AdapterDependencies
from .entities import Token, coerce_token
from .options import CalculationOptions

logger = logging.getLogger(__name__)

PairKey = tuple[str, str]


def _valid_tokens(values: Iterable[object]) -> list[Token]:
    tokens = []
    for value in values:
        token = coerce_token(value)
        if token is None:
            logger.debug("Skipping invalid token %r", value)
            continue
        tokens.append(token)
    return tokens


async def calculate_pairwise(
    observers: Iterable[object],
    targets: Iterable[object],
    deps: AdapterDependencies | None = None,
    options: CalculationOptions | None = None,
) -> dict[PairKey, DetectionResult]:
    """Results keyed by ``(observer_id, target_id)``; self pairs are skipped."""
    target_tokens = _valid_tokens(targets)
    pairs = [
        (observer, target)
        for observer in _valid_tokens(observers)
        for target in target_tokens
        if observer.id != target.id
    ]
    outcomes = await asyncio.gather(
        *(calculate_from_tokens(o, t, deps, options) for o, t in pairs),
        return_exceptions=True,
    )
    results: dict[PairKey, DetectionResult] = {}
    for (observer, target), outcome in zip(pairs, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, Exception):
            logger.warning(
                "Visibility for %s -> %s failed",
                observer.id,
                target.id,
                exc_info=outcome,
            )
            outcome = DetectionResult()
        results[(observer.id, target.id)] = outcome
    return results
