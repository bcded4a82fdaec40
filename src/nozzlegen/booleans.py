"""
Boolean sequencing with deterministic piece selection.

A difference can leave zero, one or several disjoint solids. The piece kept
is chosen by rank_by_reach: the piece reaching farthest under the hillside
plane's rank metric is the outer one (the pad band outside the shell), the
one reaching least is the inner one. Without a hillside plane pieces are
ranked by rank_by_max_coordinate. An empty result is only acceptable when the
two inputs never touched.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from .errors import AmbiguousBooleanError
from .kernel.base import GeometryKernel
from .parameters import HillsidePlane


def rank_by_max_coordinate(
    kernel: GeometryKernel,
    pieces: Sequence[Any],
    axis: int | None = None,
) -> list[Any]:
    """
    Sort solids by their largest bounding coordinate, greatest first.

    Ties keep their input order.
    """
    coordinates = [kernel.max_coordinate(p, axis) for p in pieces]
    order = sorted(range(len(pieces)), key=lambda i: coordinates[i], reverse=True)
    return [pieces[i] for i in order]


def rank_by_reach(kernel: GeometryKernel, pieces: Sequence[Any], hillside_plane: HillsidePlane) -> list[Any]:
    """
    Sort solids by the farthest bounding-box corner under the plane's rank
    metric, greatest first.

    Ties keep their input order.
    """
    reaches = []
    for piece in pieces:
        lo, hi = kernel.bounding_box(piece)
        corners = list(itertools.product(*zip(lo, hi)))
        reaches.append(float(np.max(hillside_plane.reach(corners))))
    order = sorted(range(len(pieces)), key=lambda i: reaches[i], reverse=True)
    return [pieces[i] for i in order]


@dataclass
class TrimResult:
    """
    Attributes:
        solid: Selected piece (the untouched target when nothing was cut)
        trimmed: False when target and tool were already disjoint
        piece_count: Number of pieces the difference produced
    """

    solid: Any
    trimmed: bool
    piece_count: int = 0


class BooleanCombiner:
    def __init__(self, kernel: GeometryKernel, hillside_plane: HillsidePlane | None = None):
        self.kernel = kernel
        self.hillside_plane = hillside_plane

    def rank(self, pieces: Sequence[Any]) -> list[Any]:
        if self.hillside_plane is None:
            return rank_by_max_coordinate(self.kernel, pieces)
        return rank_by_reach(self.kernel, pieces, self.hillside_plane)

    def difference(self, target: Any, tool: Any, want_outer: bool = True) -> TrimResult:
        """
        Remove tool from target and keep one piece.

        Args:
            target: Solid being trimmed
            tool: Solid removed from it
            want_outer: Keep the piece reaching farthest (True) or least
                (False)

        Raises:
            AmbiguousBooleanError: If nothing is left while the inputs intersect
        """
        kernel = self.kernel
        pieces = kernel.boolean_difference(target, tool)
        if not pieces:
            if kernel.boolean_intersects(target, tool):
                raise AmbiguousBooleanError("Boolean difference removed everything from an intersecting target")
            return TrimResult(target, trimmed=False)

        ranked = self.rank(pieces)
        solid = ranked[0] if want_outer else ranked[-1]
        return TrimResult(solid, trimmed=True, piece_count=len(pieces))

    def extrude_remove(self, solid: Any, region: Any, direction: Sequence[float], length: float) -> Any:
        """Punch region through solid along direction; keep the largest piece."""
        kernel = self.kernel
        cutter = kernel.extrude_to_solid(region, tuple(direction), length)
        pieces = kernel.boolean_difference(solid, cutter)
        if not pieces:
            raise AmbiguousBooleanError("Cutting the neck hole removed the whole solid")
        return max(pieces, key=kernel.volume)
