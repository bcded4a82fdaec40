"""
Geometry kernel capability contract.

The nozzle pipeline never constructs B-rep geometry itself. Everything from
drawing a circle to a Boolean difference goes through a GeometryKernel, so the
orchestration logic can be exercised against any kernel that honours this
contract.

Shapes passed in and out are opaque to the pipeline: curves, regions
(planar faces), surfaces (faces of a solid) and solids are whatever the
concrete kernel uses. Points and vectors are plain (x, y, z) tuples or numpy
arrays.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from ..planes import DerivedPlane

Vec3 = tuple[float, float, float]

DEFAULT_TOLERANCE = 1e-4

# Surface kinds reported by surface_kind()
PLANE = "PLANE"
REVOLVED_KINDS = frozenset({"SPHERE", "TORUS", "CONE", "REVOLUTION"})


@dataclass
class ChamferResult:
    """
    Output of a chamfer between two surface sets.

    Attributes:
        fillets: Chamfer faces bridging the two sets
        leftover_a: Faces of the first set after the chamfer trimmed them
        leftover_b: Faces of the second set after the chamfer trimmed them
    """

    fillets: list[Any] = field(default_factory=list)
    leftover_a: list[Any] = field(default_factory=list)
    leftover_b: list[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.fillets


class GeometryKernel(ABC):
    """Primitive geometry operations consumed by the nozzle pipeline."""

    tolerance: float = DEFAULT_TOLERANCE

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @abstractmethod
    def make_circle(self, plane: DerivedPlane, radius: float) -> Any:
        """Closed circle of radius centered on the plane origin."""

    @abstractmethod
    def make_face(self, curve: Any) -> Any:
        """Planar region bounded by a closed curve."""

    @abstractmethod
    def offset_curve_to_region(self, curve: Any, distance: float, tolerance: float, closed: bool) -> Any:
        """
        Region from a planar curve offset outward by distance.

        closed=True gives the annulus between the curve and its offset;
        closed=False gives the region bounded by the outermost offset contour.
        """

    @abstractmethod
    def offset_planar_curve(self, curve: Any, distance: float, plane_normal: Vec3) -> Any:
        """
        Curve offset within its plane.

        Positive distance moves along tangent x plane_normal.
        """

    @abstractmethod
    def join_profile(self, curve: Any, points: Sequence[Vec3], tolerance: float) -> Any:
        """
        Closed planar region: curve end -> points -> curve start.

        Segments shorter than tolerance are skipped.
        """

    @abstractmethod
    def make_bounding_cylinder(self, radius: float, z_min: float, z_max: float) -> Any:
        """Solid cylinder around world Z spanning z_min..z_max."""

    @abstractmethod
    def translate(self, shape: Any, vector: Vec3) -> Any:
        """Return a translated copy."""

    @abstractmethod
    def copy(self, shape: Any) -> Any:
        """Return an independent copy."""

    @abstractmethod
    def extrude_to_solid(self, region: Any, direction: Vec3, length: float) -> Any:
        """Sweep a planar region along direction by length."""

    @abstractmethod
    def revolve_to_solid(
        self,
        region: Any,
        start_angle: float,
        sweep_angle: float,
        axis: Vec3,
        origin: Vec3,
        tolerance: float,
    ) -> Any:
        """Revolve a planar region about axis through origin (angles in radians)."""

    @abstractmethod
    def loft(self, curves: Sequence[Any]) -> Any | None:
        """Solid lofted through closed curves, or None when the kernel cannot."""

    @abstractmethod
    def make_shell_surface(self, face: Any) -> Any:
        """Wrap a single face as an (open) shell."""

    # -------------------------------------------------------------------------
    # Intersection and sectioning
    # -------------------------------------------------------------------------

    @abstractmethod
    def intersect_surfaces(self, a: Any, b: Any, tolerance: float) -> list[Any]:
        """Curves where two bounded surfaces meet."""

    @abstractmethod
    def section_solid(self, shape: Any, plane: DerivedPlane, tolerance: float) -> list[Any]:
        """Curves where a shape crosses an unbounded plane."""

    @abstractmethod
    def connect_curves(self, curves: Sequence[Any], tolerance: float) -> list[Any]:
        """Merge unordered curve fragments into connected chains."""

    @abstractmethod
    def flatten_curves(self, curves: Sequence[Any], tolerance: float) -> list[Any]:
        """Split composite curves into simple segments, dropping duplicates."""

    @abstractmethod
    def clip_curve(self, curve: Any, axis: int, keep_positive: bool) -> Any:
        """Part of a curve on one side of the plane coordinate[axis] == 0."""

    # -------------------------------------------------------------------------
    # Booleans, fillets, repair
    # -------------------------------------------------------------------------

    @abstractmethod
    def boolean_difference(self, a: Any, b: Any) -> list[Any]:
        """Solids left of a after removing b (possibly several, possibly none)."""

    @abstractmethod
    def boolean_intersects(self, a: Any, b: Any) -> bool:
        """True when the two shapes touch or overlap."""

    @abstractmethod
    def chamfer(
        self,
        solid_a: Any,
        faces_a: Sequence[Any],
        solid_b: Any,
        faces_b: Sequence[Any],
        size: float,
        tolerance: float,
    ) -> ChamferResult:
        """Chamfer the junction between faces_a and faces_b."""

    @abstractmethod
    def repair_topology(self, solid: Any) -> Any | None:
        """Best-effort fix of a defective solid; None when the kernel declines."""

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @abstractmethod
    def sample_by_arc_length(self, curve: Any, step: float) -> np.ndarray:
        """Points every step along the curve, both ends included, shape (N, 3)."""

    @abstractmethod
    def curve_length(self, curve: Any) -> float: ...

    @abstractmethod
    def curve_endpoints(self, curve: Any) -> tuple[Vec3, Vec3]: ...

    @abstractmethod
    def is_closed(self, curve: Any) -> bool: ...

    @abstractmethod
    def face_loops(self, face: Any) -> list[Any]:
        """Boundary loops of a face, without seam edges."""

    @abstractmethod
    def faces(self, shape: Any) -> list[Any]: ...

    @abstractmethod
    def surface_kind(self, face: Any) -> str:
        """Surface type name, e.g. PLANE, CYLINDER, SPHERE."""

    @abstractmethod
    def surface_extent(self, face: Any, metric: str) -> float:
        """Z height ("height") or bounding-box diagonal ("diagonal") of a face."""

    @abstractmethod
    def surface_normal_at(self, face: Any, point: Vec3) -> Vec3:
        """Normal of the face at the projection of point onto it."""

    @abstractmethod
    def distance_to_point(self, shape: Any, point: Vec3) -> float: ...

    @abstractmethod
    def shape_distance(self, a: Any, b: Any) -> float: ...

    @abstractmethod
    def max_coordinate(self, shape: Any, axis: int | None = None) -> float:
        """
        Largest bounding coordinate of the shape.

        axis=None takes the largest of x, y and z; 0, 1 or 2 restricts it to
        that world axis.
        """

    @abstractmethod
    def bounding_box(self, shape: Any) -> tuple[Vec3, Vec3]:
        """(min corner, max corner)."""

    @abstractmethod
    def volume(self, shape: Any) -> float: ...

    @abstractmethod
    def is_valid(self, shape: Any) -> bool: ...
