"""
Shell/neck intersection and its disambiguation.

The neck's round faces cut the shell's significant faces along closed loops:
one or two per neck face (outer and inner shell wall). Which loop is which
is decided by named ranking rules rather than inline comparisons:

- rank_loops: loops sorted by how far their samples reach under the hillside
  plane's rank metric (distance from the shell axis for YZ cases, height for
  XY cases). The outer wall loop lies farthest from the shell axis whichever
  way the neck points.
- rank_by_axial_extent: curves sorted by their reach along a fixed direction.

The last-ranked loop is the cut boundary (where the hole starts on the inner
wall), the first-ranked loop orients the pad (where the neck leaves the outer
wall). With a single loop it serves both roles.

Reference centers are the mean of arc-length samples along a loop, rounded
so symmetric cases stay exactly symmetric.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from .errors import DegenerateIntersectionError
from .kernel.base import PLANE, REVOLVED_KINDS, GeometryKernel
from .parameters import CaseParameters, HillsidePlane
from .planes import AttachmentPlanes, derive_attachment_planes

LOOP_TOLERANCE = 1e-4

# Loops are sampled at length / CENTER_DIVISIONS: 70 points with both ends,
# 69 distinct points on a closed loop
CENTER_DIVISIONS = 69
CENTER_DECIMALS = 3


# =============================================================================
# RANKING AND CENTERS
# =============================================================================


def _samples(kernel: GeometryKernel, curve: Any) -> np.ndarray:
    length = kernel.curve_length(curve)
    samples = kernel.sample_by_arc_length(curve, length / CENTER_DIVISIONS)
    # a closed loop ends where it starts; count that point once
    if len(samples) > 1 and kernel.is_closed(curve) and np.allclose(samples[0], samples[-1], atol=LOOP_TOLERANCE):
        samples = samples[:-1]
    return samples


def axial_extent(kernel: GeometryKernel, curve: Any, axis: Sequence[float]) -> float:
    """Greatest projection of the curve's samples onto axis."""
    return float(np.max(_samples(kernel, curve) @ np.asarray(axis, dtype=float)))


def rank_by_axial_extent(kernel: GeometryKernel, curves: Sequence[Any], axis: Sequence[float]) -> list[Any]:
    """
    Sort curves by axial extent, largest first.

    Ties keep their input order.
    """
    extents = [axial_extent(kernel, c, axis) for c in curves]
    order = sorted(range(len(curves)), key=lambda i: extents[i], reverse=True)
    return [curves[i] for i in order]


def loop_reach(kernel: GeometryKernel, curve: Any, hillside_plane: HillsidePlane) -> float:
    """Greatest reach of the loop's samples under the plane's rank metric."""
    return float(np.max(hillside_plane.reach(_samples(kernel, curve))))


def rank_loops(kernel: GeometryKernel, curves: Sequence[Any], hillside_plane: HillsidePlane) -> list[Any]:
    """
    Sort intersection loops by reach, farthest first.

    Ties keep their input order.
    """
    reaches = [loop_reach(kernel, c, hillside_plane) for c in curves]
    order = sorted(range(len(curves)), key=lambda i: reaches[i], reverse=True)
    return [curves[i] for i in order]


def find_center(kernel: GeometryKernel, curve: Any, has_lateral_component: bool = True) -> np.ndarray:
    """
    Reference center of a loop.

    Args:
        kernel: Geometry kernel
        curve: Closed (or open) curve to sample
        has_lateral_component: When False the Y component is forced to 0

    Returns:
        (x, y, z) mean of the samples, rounded to 3 decimals
    """
    center = np.round(np.mean(_samples(kernel, curve), axis=0), CENTER_DECIMALS)
    if not has_lateral_component:
        center[1] = 0.0
    return center + 0.0  # normalizes -0.0


def orient_outward(normal: Sequence[float]) -> np.ndarray:
    """
    Flip an axis-aligned normal that points into the vessel.

    Normals along world Z with a negative sign, or along world X with a
    negative sign, are reversed. Any other normal is returned unchanged.
    """
    n = np.asarray(normal, dtype=float)
    x, y, z = (round(float(c), CENTER_DECIMALS) for c in n)
    if (z < 0 and x == 0 and y == 0) or (x < 0 and z == 0 and y == 0):
        return -n
    return n


# =============================================================================
# SIGNIFICANT SURFACES
# =============================================================================


def significant_surfaces(
    kernel: GeometryKernel,
    solid: Any,
    hillside_plane: HillsidePlane,
    tolerance: float = LOOP_TOLERANCE,
) -> list[Any]:
    """
    Faces of a solid that matter for attachment queries.

    Planar faces are never significant. If the solid has a non-cylindrical
    surface of revolution (sphere, torus, cone, ...), every curved face is
    returned. Otherwise only the curved faces with the largest extent survive
    (Z height for YZ cases, bounding diagonal for XY cases), which drops
    short fragments left by earlier cuts.
    """
    curved = [f for f in kernel.faces(solid) if kernel.surface_kind(f) != PLANE]
    if any(kernel.surface_kind(f) in REVOLVED_KINDS for f in curved):
        return curved
    if not curved:
        return []

    extents = [kernel.surface_extent(f, hillside_plane.extent_metric) for f in curved]
    largest = max(extents)
    return [f for f, e in zip(curved, extents) if abs(e - largest) <= tolerance]


def outer_inner_surfaces(
    kernel: GeometryKernel,
    solid: Any,
    hillside_plane: HillsidePlane,
    origin: Sequence[float],
) -> tuple[Any, Any]:
    """
    (outer, inner) significant faces: farthest from and nearest to origin.
    """
    surfaces = significant_surfaces(kernel, solid, hillside_plane)
    if not surfaces:
        raise DegenerateIntersectionError("Solid has no significant surfaces")
    point = tuple(float(c) for c in origin)
    distances = [kernel.distance_to_point(f, point) for f in surfaces]
    outer = surfaces[int(np.argmax(distances))]
    inner = surfaces[int(np.argmin(distances))]
    return outer, inner


# =============================================================================
# RESOLVER
# =============================================================================


@dataclass
class IntersectionLoops:
    """
    Intersection of shell and neck, ranked.

    Attributes:
        cut: Loop bounding the hole (last in ranking)
        orientation: Loop used to place and orient the pad (first in ranking)
        cut_center: Reference center of the cut loop
        orientation_center: Reference center of the orientation loop
        shell_faces: Shell faces that produced intersection curves
        loops: All loops, ranked
    """

    cut: Any
    orientation: Any
    cut_center: np.ndarray
    orientation_center: np.ndarray
    shell_faces: list[Any] = field(default_factory=list)
    loops: list[Any] = field(default_factory=list)


class IntersectionResolver:
    def __init__(self, kernel: GeometryKernel, params: CaseParameters, planes: AttachmentPlanes | None = None):
        self.kernel = kernel
        self.params = params
        self.planes = planes if planes is not None else derive_attachment_planes(params)

    def resolve(self, shell: Any, neck: Any) -> IntersectionLoops:
        """
        Intersect the shell with the neck and rank the resulting loops.

        Raises:
            DegenerateIntersectionError: If no loop is found
        """
        kernel = self.kernel
        plane = self.params.hillside_plane

        shell_faces = significant_surfaces(kernel, shell, plane)
        neck_faces = [f for f in kernel.faces(neck) if kernel.surface_kind(f) != PLANE]

        fragments = []
        touched = []
        for shell_face in shell_faces:
            found = False
            for neck_face in neck_faces:
                curves = kernel.intersect_surfaces(shell_face, neck_face, LOOP_TOLERANCE)
                if curves:
                    fragments.extend(curves)
                    found = True
            if found:
                touched.append(shell_face)

        loops = kernel.connect_curves(fragments, LOOP_TOLERANCE)
        if not loops:
            raise DegenerateIntersectionError(
                f"Shell and neck do not intersect ({len(shell_faces)} shell faces, {len(neck_faces)} neck faces)"
            )

        ranked = rank_loops(kernel, loops, plane)
        lateral = self.planes.has_lateral_component
        return IntersectionLoops(
            cut=ranked[-1],
            orientation=ranked[0],
            cut_center=find_center(kernel, ranked[-1], lateral),
            orientation_center=find_center(kernel, ranked[0], lateral),
            shell_faces=touched,
            loops=ranked,
        )

    def relative_origin(self, loops: IntersectionLoops) -> np.ndarray:
        """
        Origin the shell offset and pad length are measured from.

        XY cases: the cut center dropped to the lowest point of the cut loop.
        YZ cases: the point on the Z axis at the cut center's height.
        """
        cx, cy, cz = loops.cut_center
        if self.params.hillside_plane is HillsidePlane.XY:
            z_min = float(np.min(_samples(self.kernel, loops.cut)[:, 2]))
            return np.array([cx, cy, z_min])
        return np.array([0.0, 0.0, cz])

    def shell_normal_at(self, loops: IntersectionLoops) -> np.ndarray:
        """Outward shell normal under the orientation loop's center."""
        kernel = self.kernel
        center = tuple(float(c) for c in loops.orientation_center)
        faces = loops.shell_faces or significant_surfaces(kernel, self.params.shell, self.params.hillside_plane)
        nearest = min(faces, key=lambda f: kernel.distance_to_point(f, center))
        normal = np.asarray(kernel.surface_normal_at(nearest, center), dtype=float)
        return orient_outward(normal / np.linalg.norm(normal))
