"""Adapter configuration.

``AdapterSettings`` holds scene-wide constants that rarely change.
``CalculationOptions`` carries per-call data: lookups the caller already
computed for a batch, so the adapter can skip the matching collaborator
queries.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .collaborators import LightSample, SenseCapabilities


@dataclass
class AdapterSettings:
    feet_per_square: float = 5.0
    grid_size: float = 100.0  # pixels per square
    # Assume infinite hearing when the capability provider lists none.
    default_hearing: bool = True
    # Inset (pixels) of the target sample points from its footprint edge.
    sample_inset: float = 2.0
    # Rank assumed for a darkness source that reports none, when recovering
    # the rank of a fast-path hit.
    unknown_source_rank: int = 2
    # Rank an unranked source counts as inside the precise detector.
    unranked_detector_rank: int = 4


@dataclass
class CalculationOptions:
    # Token id -> light sample at that token.
    precomputed_lights: dict[str, LightSample | dict] = field(
        default_factory=dict
    )
    # (observer id, target id) -> line of sight.
    precomputed_los: dict[tuple[str, str], bool] = field(default_factory=dict)
    # Token id -> sense capabilities.
    precomputed_senses: dict[str, SenseCapabilities | dict] = field(
        default_factory=dict
    )
    # Diagnostic mode: leave line of sight unknown.
    skip_los: bool = False
    settings: AdapterSettings = field(default_factory=AdapterSettings)

    def light_for(self, token_id: str) -> LightSample | None:
        if token_id not in self.precomputed_lights:
            return None
        return LightSample.from_dict(self.precomputed_lights[token_id])

    def senses_for(self, token_id: str) -> SenseCapabilities | None:
        if token_id not in self.precomputed_senses:
            return None
        return SenseCapabilities.from_dict(self.precomputed_senses[token_id])
