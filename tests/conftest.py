"""
Shared fixtures: a scripted in-memory geometry kernel.

FakeKernel stands in for CadQueryKernel where a test is about the pipeline's
decisions (ranking, piece selection, fallbacks) rather than about B-rep
geometry. Curves are point arrays, faces and solids are small records whose
query answers are set by the test.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pytest

from nozzlegen.kernel.base import ChamferResult, GeometryKernel


@dataclass(eq=False)
class FakeCurve:
    points: np.ndarray
    closed: bool = True

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=float)


@dataclass(eq=False)
class FakeFace:
    name: str
    kind: str = "CYLINDER"
    extent: float = 1.0
    distance: float = 0.0
    normal: tuple[float, float, float] = (1.0, 0.0, 0.0)
    loops: list[FakeCurve] = field(default_factory=list)


@dataclass(eq=False)
class FakeSolid:
    name: str
    max_coord: float = 0.0
    volume: float = 1.0
    valid: bool = True
    faces: list[FakeFace] = field(default_factory=list)
    bbox: Any = None


def circle_points(center, radius, count=72, axis="z"):
    """Closed polyline approximating a circle around the given world axis."""
    t = np.linspace(0.0, 2.0 * np.pi, count + 1)
    c = np.asarray(center, dtype=float)
    if axis == "z":
        pts = np.column_stack([radius * np.cos(t), radius * np.sin(t), np.zeros_like(t)])
    else:  # around world X
        pts = np.column_stack([np.zeros_like(t), radius * np.cos(t), radius * np.sin(t)])
    return pts + c


class FakeKernel(GeometryKernel):
    """Kernel whose answers are scripted through attributes."""

    def __init__(self):
        self.tolerance = 1e-4
        self.difference_pieces: list[Any] = []
        self.intersects = False
        self.chamfer_result = ChamferResult()
        self.repaired: Any = None
        self.loft_result: Any = "loft"
        self.calls: list[str] = []
        self.chamfer_args = None

    # construction
    def make_circle(self, plane, radius):
        return FakeCurve(circle_points(plane.origin, radius))

    def make_face(self, curve):
        return FakeFace("region", kind="PLANE")

    def offset_curve_to_region(self, curve, distance, tolerance, closed):
        return FakeFace("region", kind="PLANE")

    def offset_planar_curve(self, curve, distance, plane_normal):
        return curve

    def join_profile(self, curve, points, tolerance):
        return FakeFace("profile", kind="PLANE")

    def make_bounding_cylinder(self, radius, z_min, z_max):
        return FakeSolid("cylinder")

    def translate(self, shape, vector):
        return shape

    def copy(self, shape):
        return shape

    def extrude_to_solid(self, region, direction, length):
        self.calls.append("extrude")
        return FakeSolid("extruded")

    def revolve_to_solid(self, region, start_angle, sweep_angle, axis, origin, tolerance):
        return FakeSolid("revolved")

    def loft(self, curves):
        self.calls.append("loft")
        return self.loft_result

    def make_shell_surface(self, face):
        return ("shell", face)

    # intersection
    def intersect_surfaces(self, a, b, tolerance):
        return []

    def section_solid(self, shape, plane, tolerance):
        return []

    def connect_curves(self, curves, tolerance):
        return list(curves)

    def flatten_curves(self, curves, tolerance):
        return list(curves)

    def clip_curve(self, curve, axis, keep_positive):
        return curve

    # booleans
    def boolean_difference(self, a, b):
        self.calls.append("difference")
        return list(self.difference_pieces)

    def boolean_intersects(self, a, b):
        return self.intersects

    def chamfer(self, solid_a, faces_a, solid_b, faces_b, size, tolerance):
        self.calls.append("chamfer")
        self.chamfer_args = (solid_a, list(faces_a), solid_b, list(faces_b), size)
        return self.chamfer_result

    def repair_topology(self, solid):
        return self.repaired

    # queries
    def sample_by_arc_length(self, curve, step):
        return curve.points

    def curve_length(self, curve):
        return float(np.sum(np.linalg.norm(np.diff(curve.points, axis=0), axis=1)))

    def curve_endpoints(self, curve):
        return tuple(curve.points[0]), tuple(curve.points[-1])

    def is_closed(self, curve):
        return curve.closed

    def face_loops(self, face):
        return list(face.loops)

    def faces(self, shape):
        return list(shape.faces)

    def surface_kind(self, face):
        return face.kind

    def surface_extent(self, face, metric):
        return face.extent

    def surface_normal_at(self, face, point):
        return face.normal

    def distance_to_point(self, shape, point):
        return shape.distance

    def shape_distance(self, a, b):
        return 0.0

    def max_coordinate(self, shape, axis=None):
        return shape.max_coord

    def bounding_box(self, shape):
        if getattr(shape, "bbox", None) is not None:
            return shape.bbox
        return (0.0, 0.0, 0.0), (1.0, 1.0, 1.0)

    def volume(self, shape):
        return shape.volume

    def is_valid(self, shape):
        return shape.valid


@pytest.fixture
def fake_kernel() -> FakeKernel:
    return FakeKernel()
