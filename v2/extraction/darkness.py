"""Darkness along the observer-to-target sightline.

Two detectors feed the ``rayDarkness`` input:

  * A **fast** host checker (``DarknessRayChecker``), typically backed by a
    cached lighting raster. Cheap but coarse: it can miss small darkness
    areas, and sometimes reports a hit without knowing the rank.
  * The **precise** geometric detector in this module, which tests the
    sightline against every known darkness source. Circles are tested in
    one vectorized numpy pass; polygons go through shapely.

``resolve_ray_darkness`` combines them:

  1. Fast result unavailable (missing checker, error, None): use the
     precise detector.
  2. Fast result reports no darkness: run the precise detector anyway and
     trust it if it finds darkness.
  3. Fast result reports darkness without a rank: recover the rank from the
     sources the centre ray crosses, defaulting unranked ones to
     ``AdapterSettings.unknown_source_rank``.

The precise detector checks the centre-to-centre ray first and then rays
from the observer centre to each of the target's nine sample points,
stopping at the first ray that crosses darkness. Within the detector an
unranked source counts as ``unranked_detector_rank`` (greater darkness).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from visibility.lighting import lighting_from_rank
from visibility.types import RayDarkness

from .entities import Point, Token
from .geometry import (
    Vertices,
    point_to_segment_distance_squared,
    segment_hits_circles,
    segment_hits_polygon,
    token_sample_points,
)
from .options import AdapterSettings

logger = logging.getLogger(__name__)


@dataclass
class DarknessSource:
    id: str
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    rank: int | None = None
    vertices: Vertices | None = None

    @staticmethod
    def from_dict(d: object) -> DarknessSource | None:
        if isinstance(d, DarknessSource):
            return d
        if not isinstance(d, dict):
            return None
        rank = d.get("rank")
        if isinstance(rank, bool) or not isinstance(rank, (int, float)):
            rank = None
        vertices = d.get("vertices")
        if isinstance(vertices, list):
            vertices = [(float(p[0]), float(p[1])) for p in vertices]
        else:
            vertices = None
        return DarknessSource(
            id=str(d.get("id", "")),
            x=float(d.get("x", 0.0)),
            y=float(d.get("y", 0.0)),
            radius=float(d.get("radius", 0.0)),
            rank=int(rank) if rank is not None else None,
            vertices=vertices,
        )

    @property
    def is_polygon(self) -> bool:
        return self.vertices is not None and len(self.vertices) >= 3

    def crosses(self, a: Point, b: Point) -> bool:
        """Single-source test; the detector batches circles instead."""
        if self.is_polygon:
            return segment_hits_polygon(a, b, self.vertices)
        d2 = point_to_segment_distance_squared(
            self.x, self.y, a.x, a.y, b.x, b.y
        )
        return d2 <= self.radius * self.radius


def darkness_from_rank(rank: int) -> RayDarkness:
    return RayDarkness(
        passes_through_darkness=True,
        rank=rank,
        lighting_level=lighting_from_rank(rank),
    )


def read_fast_result(raw: object) -> RayDarkness | None:
    """Read a fast checker answer, ``{passesThroughDarkness, maxDarknessRank}``.

    A bare ``rank`` key is accepted too. A hit with no usable rank keeps
    rank 0 so ``resolve_ray_darkness`` recovers it from the sources.
    """
    if isinstance(raw, RayDarkness):
        return raw
    if not isinstance(raw, dict):
        return None
    if not raw.get("passesThroughDarkness"):
        return RayDarkness()
    rank = raw.get("maxDarknessRank", raw.get("rank"))
    if (
        isinstance(rank, bool)
        or not isinstance(rank, (int, float))
        or not math.isfinite(rank)
        or rank <= 0
    ):
        return RayDarkness(passes_through_darkness=True)
    return darkness_from_rank(int(rank))


class DarknessDetector:
    def __init__(
        self,
        sources: list[DarknessSource],
        settings: AdapterSettings | None = None,
    ):
        self.settings = settings or AdapterSettings()
        self._circles = [s for s in sources if not s.is_polygon]
        self._polygons = [s for s in sources if s.is_polygon]
        self._centers = np.array(
            [(s.x, s.y) for s in self._circles], dtype=np.float64
        ).reshape(-1, 2)
        self._radii = np.array(
            [s.radius for s in self._circles], dtype=np.float64
        )

    def crossed_sources(self, a: Point, b: Point) -> list[DarknessSource]:
        hits = segment_hits_circles(a, b, self._centers, self._radii)
        crossed = [s for s, hit in zip(self._circles, hits) if hit]
        crossed.extend(
            s for s in self._polygons if segment_hits_polygon(a, b, s.vertices)
        )
        return crossed

    def _ray_rank(self, a: Point, b: Point) -> int | None:
        crossed = self.crossed_sources(a, b)
        if not crossed:
            return None
        default = self.settings.unranked_detector_rank
        return max(s.rank if s.rank is not None else default for s in crossed)

    def detect(self, origin: Point, target: Token) -> RayDarkness | None:
        """Darkness crossed by the first sightline that meets any, or None."""
        # The centre is also the first sample point; test it separately so
        # the common case stops after one ray.
        rank = self._ray_rank(origin, target.center)
        if rank is not None:
            return darkness_from_rank(rank)
        for point in token_sample_points(target, self.settings.sample_inset)[1:]:
            rank = self._ray_rank(origin, point)
            if rank is not None:
                return darkness_from_rank(rank)
        return None

    def recover_rank(self, a: Point, b: Point) -> int:
        default = self.settings.unknown_source_rank
        crossed = self.crossed_sources(a, b)
        if not crossed:
            return default
        return max(s.rank if s.rank is not None else default for s in crossed)


def resolve_ray_darkness(
    fast: RayDarkness | None,
    detector: DarknessDetector,
    observer: Token,
    target: Token,
) -> RayDarkness | None:
    origin = observer.center
    if fast is None:
        return detector.detect(origin, target)

    if not fast.passes_through_darkness:
        precise = detector.detect(origin, target)
        if precise is not None:
            logger.debug(
                "Fast ray check missed darkness between %s and %s (rank %d)",
                observer.id,
                target.id,
                precise.rank,
            )
        return precise

    if fast.rank <= 0:
        return darkness_from_rank(detector.recover_rank(origin, target.center))
    return darkness_from_rank(fast.rank)
