"""
Offset shell tools for trimming the pad.

The shell is a solid of revolution about world Z, so an offset copy of one of
its walls is rebuilt from a profile: the wall is sectioned with the world XZ
plane, the profile curve is offset within that plane and closed against the
Z axis, and the closed profile is revolved a full turn.

The revolved tool is the material behind the offset wall (toward the axis
for an outer wall, away from it for an inner one). Asking for the flipped
side gives its complement inside a bounding cylinder, which is what trims
everything beyond the wall.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

import numpy as np

from .errors import DegenerateIntersectionError
from .intersection import outer_inner_surfaces
from .kernel.base import GeometryKernel
from .parameters import CaseParameters
from .planes import DerivedPlane

OFFSET_TOLERANCE = 1e-4
FLAT_TOLERANCE = 1e-3

PROFILE_PLANE = DerivedPlane.make((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))  # world XZ
AXIS = (0.0, 0.0, 1.0)


def _distance(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def is_flat(kernel: GeometryKernel, curve: Any, tolerance: float = FLAT_TOLERANCE) -> bool:
    """True when the curve runs at constant Z (parallel to world XY)."""
    samples = kernel.sample_by_arc_length(curve, max(kernel.curve_length(curve) / 16.0, tolerance))
    return float(np.ptp(samples[:, 2])) < tolerance


def rank_by_radial_distance(kernel: GeometryKernel, curves: Sequence[Any], origin: Sequence[float]) -> list[Any]:
    """
    Sort profile curves by how far their start point lies from origin.

    Farthest first. When every curve is flat the order is reversed (nearest
    first), since a flat profile is measured along the axis rather than
    away from it. Ties keep their input order.
    """
    distances = [_distance(kernel.curve_endpoints(c)[0], origin) for c in curves]
    flat = all(is_flat(kernel, c) for c in curves)
    order = sorted(range(len(curves)), key=lambda i: distances[i], reverse=not flat)
    return [curves[i] for i in order]


class ShellOffsetBuilder:
    def __init__(self, kernel: GeometryKernel, params: CaseParameters, relative_origin: Sequence[float]):
        self.kernel = kernel
        self.params = params
        self.origin = tuple(float(c) for c in relative_origin)

    def profile(self, inner: bool = False) -> Any:
        """Wall profile in the XZ plane, on the side of the axis it starts on."""
        kernel = self.kernel
        outer_face, inner_face = outer_inner_surfaces(kernel, self.params.shell, self.params.hillside_plane, self.origin)
        face = inner_face if inner else outer_face

        curves = kernel.connect_curves(
            kernel.section_solid(face, PROFILE_PLANE, OFFSET_TOLERANCE),
            OFFSET_TOLERANCE,
        )
        if not curves:
            raise DegenerateIntersectionError("Shell wall does not cross the XZ plane")
        curve = rank_by_radial_distance(kernel, curves, self.origin)[0]

        start, end = kernel.curve_endpoints(curve)
        if start[0] * end[0] < 0.0 and min(abs(start[0]), abs(end[0])) > OFFSET_TOLERANCE:
            curve = kernel.clip_curve(curve, 0, keep_positive=start[0] > 0.0)
        return curve

    def offset_profile(self, curve: Any, thickness: float, inner: bool = False) -> Any:
        """
        Offset a profile away from the relative origin (toward it for inner).

        The side is picked by comparing mean sample distances to the origin,
        so the curve's direction does not matter.
        """
        if thickness == 0.0:
            return curve
        kernel = self.kernel

        def mean_distance(c) -> float:
            samples = kernel.sample_by_arc_length(c, max(kernel.curve_length(c) / 32.0, OFFSET_TOLERANCE))
            return float(np.mean(np.linalg.norm(samples - np.asarray(self.origin), axis=1)))

        reference = mean_distance(curve)
        candidate = kernel.offset_planar_curve(curve, thickness, PROFILE_PLANE.normal)
        moved_out = mean_distance(candidate) > reference
        if moved_out == inner:
            candidate = kernel.offset_planar_curve(curve, -thickness, PROFILE_PLANE.normal)
        return candidate

    def close_profile(self, curve: Any) -> Any:
        """Close a profile against the Z axis (flat profiles: the origin's Z level)."""
        kernel = self.kernel
        start, end = kernel.curve_endpoints(curve)
        if is_flat(kernel, curve):
            z = self.origin[2]
            points = [(end[0], 0.0, z), (start[0], 0.0, z)]
        else:
            points = [(0.0, 0.0, end[2]), (0.0, 0.0, start[2])]
        return kernel.join_profile(curve, points, OFFSET_TOLERANCE)

    def build(self, thickness: float, inner: bool = False, flip: bool = False) -> Any:
        """
        Revolved trimming tool for one shell wall offset by thickness.

        Args:
            thickness: Offset distance (0 reproduces the wall itself)
            inner: Use the inner wall instead of the outer one
            flip: Return the complement of the material side

        Returns:
            Tool solid
        """
        kernel = self.kernel
        curve = self.offset_profile(self.profile(inner), thickness, inner)
        region = self.close_profile(curve)
        toward_axis = kernel.revolve_to_solid(region, 0.0, 2.0 * math.pi, AXIS, (0.0, 0.0, 0.0), OFFSET_TOLERANCE)

        # material side: toward the axis for the outer wall, away from it for the inner wall
        if flip == inner:
            return toward_axis
        return self.complement(toward_axis)

    def complement(self, solid: Any) -> Any:
        """Bounding cylinder around the shell minus solid."""
        kernel = self.kernel
        params = self.params
        lo, hi = kernel.bounding_box(params.shell)
        margin = params.extrude_length + params.pad_thickness + params.pad_radius
        radius = max(abs(lo[0]), abs(lo[1]), abs(hi[0]), abs(hi[1])) + margin
        cylinder = kernel.make_bounding_cylinder(radius, lo[2] - margin, hi[2] + margin)

        pieces = kernel.boolean_difference(cylinder, solid)
        if not pieces:
            raise DegenerateIntersectionError("Offset tool fills its bounding cylinder")
        return max(pieces, key=kernel.volume)
