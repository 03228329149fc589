"""Grid distance between tokens, in feet.

Movement on the grid alternates diagonal costs: the first diagonal costs
one square, the second two, the third one again, and so on (5-10-5 feet on
a 5-foot grid). Elevation is folded in as a third axis with the same rule,
applied between the horizontal distance and the height difference.
"""

from __future__ import annotations

import math

from .entities import Token
from .options import AdapterSettings


def alternating_diagonal_squares(dx: int, dy: int) -> int:
    """Squares moved for a ``dx`` by ``dy`` offset with alternating diagonals."""
    dx, dy = abs(dx), abs(dy)
    diagonal = min(dx, dy)
    straight = max(dx, dy) - diagonal
    return straight + diagonal + diagonal // 2


def grid_distance_feet(
    a: Token, b: Token, settings: AdapterSettings | None = None
) -> float:
    settings = settings or AdapterSettings()
    ca, cb = a.center, b.center
    dx = round(abs(ca.x - cb.x) / settings.grid_size)
    dy = round(abs(ca.y - cb.y) / settings.grid_size)
    horizontal = alternating_diagonal_squares(dx, dy)
    dz = round(abs(ca.elevation - cb.elevation) / settings.feet_per_square)
    squares = alternating_diagonal_squares(horizontal, dz)
    return squares * settings.feet_per_square


def distance_from_squares(
    squares: object, settings: AdapterSettings | None = None
) -> float | None:
    """Feet for a provider-reported square count; None if unusable."""
    settings = settings or AdapterSettings()
    if isinstance(squares, bool) or not isinstance(squares, (int, float)):
        return None
    if not math.isfinite(squares) or squares < 0:
        return None
    return float(squares) * settings.feet_per_square
