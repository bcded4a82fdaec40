#!/usr/bin/env python3
"""
Tests for the CadQuery/OCP geometry kernel.

Tests cover:
- Curve and region construction
- Extrude, revolve and loft
- Sectioning, connecting and clipping curves
- Profile offsets
- Booleans, chamfers and repair
- Queries
"""

import math

import cadquery as cq
import numpy as np
import pytest

from nozzlegen.cases import make_cylindrical_shell
from nozzlegen.kernel import CadQueryKernel
from nozzlegen.planes import DerivedPlane

XY_PLANE = DerivedPlane.make((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
XZ_PLANE = DerivedPlane.make((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))


@pytest.fixture
def kernel() -> CadQueryKernel:
    return CadQueryKernel()


def line(start, end) -> cq.Wire:
    return cq.Wire.assembleEdges([cq.Edge.makeLine(cq.Vector(*start), cq.Vector(*end))])


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestConstruction:
    """Test curve, region and solid construction."""

    def test_circle(self, kernel):
        circle = kernel.make_circle(XY_PLANE, 2.0)
        assert kernel.is_closed(circle)
        assert kernel.curve_length(circle) == pytest.approx(4.0 * math.pi, rel=1e-6)

    def test_annulus(self, kernel):
        """Closed offset gives the ring between the curve and its offset."""
        region = kernel.offset_curve_to_region(kernel.make_circle(XY_PLANE, 1.0), 0.2, 1e-4, closed=True)
        assert region.Area() == pytest.approx(math.pi * (1.2**2 - 1.0**2), rel=1e-4)

    def test_filled_offset(self, kernel):
        """Open offset gives the disc inside the outer contour."""
        region = kernel.offset_curve_to_region(kernel.make_circle(XY_PLANE, 1.0), 0.2, 1e-4, closed=False)
        assert region.Area() == pytest.approx(math.pi * 1.2**2, rel=1e-4)

    def test_extrude_annulus(self, kernel):
        region = kernel.offset_curve_to_region(kernel.make_circle(XY_PLANE, 1.0), 0.2, 1e-4, closed=True)
        tube = kernel.extrude_to_solid(region, (0.0, 0.0, 1.0), 10.0)
        assert tube.isValid()
        assert tube.Volume() == pytest.approx(math.pi * 0.44 * 10.0, rel=1e-4)
        (_, _, z0), (_, _, z1) = kernel.bounding_box(tube)
        assert z0 == pytest.approx(0.0, abs=1e-3)
        assert z1 == pytest.approx(10.0, abs=1e-3)

    def test_extrude_normalizes_direction(self, kernel):
        disc = kernel.make_face(kernel.make_circle(XY_PLANE, 1.0))
        solid = kernel.extrude_to_solid(disc, (0.0, 0.0, -5.0), 2.0)
        (_, _, z0), _ = kernel.bounding_box(solid)
        assert z0 == pytest.approx(-2.0, abs=1e-3)

    def test_translate_returns_copy(self, kernel):
        disc = kernel.make_face(kernel.make_circle(XY_PLANE, 1.0))
        moved = kernel.translate(disc, (0.0, 0.0, 5.0))
        assert moved.Center().z == pytest.approx(5.0)
        assert disc.Center().z == pytest.approx(0.0)

    def test_revolve_profile(self, kernel):
        """A wall profile closed against the axis revolves into a solid cylinder."""
        profile = kernel.join_profile(line((21, 0, 0), (21, 0, 60)), [(0, 0, 60), (0, 0, 0)], 1e-4)
        solid = kernel.revolve_to_solid(profile, 0.0, 2.0 * math.pi, (0, 0, 1), (0, 0, 0), 1e-4)
        assert solid.isValid()
        assert solid.Volume() == pytest.approx(math.pi * 21.0**2 * 60.0, rel=1e-4)

    def test_loft_frustum(self, kernel):
        bottom = kernel.make_circle(XY_PLANE, 2.0)
        top = kernel.make_circle(XY_PLANE.translated((0, 0, 3)), 1.0)
        solid = kernel.loft([bottom, top])
        assert solid is not None
        expected = math.pi * 3.0 / 3.0 * (2.0**2 + 2.0 * 1.0 + 1.0**2)
        assert solid.Volume() == pytest.approx(expected, rel=1e-3)

    def test_bounding_cylinder(self, kernel):
        cylinder = kernel.make_bounding_cylinder(5.0, -1.0, 4.0)
        (_, _, z0), (x1, _, z1) = kernel.bounding_box(cylinder)
        assert (z0, z1) == pytest.approx((-1.0, 4.0), abs=1e-3)
        assert x1 == pytest.approx(5.0, abs=1e-3)


# =============================================================================
# SECTIONS AND CURVES
# =============================================================================


class TestSections:
    """Test sectioning, connecting and clipping."""

    def test_section_ring_with_xz(self, kernel):
        """The XZ plane cuts a cylindrical ring into two closed rectangles."""
        shell = make_cylindrical_shell(20.0, 1.0, 60.0)
        loops = kernel.connect_curves(kernel.section_solid(shell, XZ_PLANE, 1e-4), 1e-4)
        assert len(loops) == 2
        assert all(kernel.is_closed(loop) for loop in loops)

    def test_section_wall_face(self, kernel):
        """One curved wall gives one line on either side of the axis."""
        shell = make_cylindrical_shell(20.0, 1.0, 60.0)
        outer = max(
            (f for f in kernel.faces(shell) if kernel.surface_kind(f) == "CYLINDER"),
            key=lambda f: kernel.distance_to_point(f, (0, 0, 30)),
        )
        curves = kernel.section_solid(outer, XZ_PLANE, 1e-4)
        assert len(curves) == 2
        xs = sorted(round(kernel.curve_endpoints(c)[0][0], 3) for c in curves)
        assert xs == [-21.0, 21.0]

    def test_sample_count(self, kernel):
        samples = kernel.sample_by_arc_length(line((0, 0, 0), (10, 0, 0)), 1.0)
        assert samples.shape == (11, 3)
        assert np.allclose(samples[0], (0, 0, 0))
        assert np.allclose(samples[-1], (10, 0, 0))

    def test_clip_keeps_positive_half(self, kernel):
        clipped = kernel.clip_curve(line((-5, 0, 0), (5, 0, 0)), 0, keep_positive=True)
        assert kernel.curve_length(clipped) == pytest.approx(5.0, rel=1e-4)
        assert min(p[0] for p in kernel.curve_endpoints(clipped)) == pytest.approx(0.0, abs=1e-4)

    def test_flatten_drops_duplicates(self, kernel):
        a = line((0, 0, 0), (1, 0, 0))
        b = line((1, 0, 0), (0, 0, 0))
        assert len(kernel.flatten_curves([a, b], 1e-3)) == 1

    def test_face_loops_skip_seam(self, kernel):
        """A cylinder's side face is bounded by two circles, not by its seam."""
        cylinder = cq.Solid.makeCylinder(1.0, 5.0)
        side = next(f for f in kernel.faces(cylinder) if kernel.surface_kind(f) == "CYLINDER")
        loops = kernel.face_loops(side)
        assert len(loops) == 2
        assert all(kernel.is_closed(loop) for loop in loops)


class TestPlanarOffset:
    """Test profile offsets within the XZ plane."""

    def test_line(self, kernel):
        """Positive distance moves along tangent x normal."""
        offset = kernel.offset_planar_curve(line((21, 0, 0), (21, 0, 60)), 0.5, (0.0, 1.0, 0.0))
        start, end = kernel.curve_endpoints(offset)
        assert start == pytest.approx((20.5, 0.0, 0.0), abs=1e-6)
        assert end == pytest.approx((20.5, 0.0, 60.0), abs=1e-6)

    def test_arc(self, kernel):
        """Quarter arcs stay concentric."""
        r = 30.0
        arc = cq.Wire.assembleEdges(
            [
                cq.Edge.makeThreePointArc(
                    cq.Vector(r, 0, 0),
                    cq.Vector(r * math.cos(math.pi / 4), 0, r * math.sin(math.pi / 4)),
                    cq.Vector(0, 0, r),
                )
            ]
        )
        offset = kernel.offset_planar_curve(arc, -0.5, (0.0, 1.0, 0.0))
        start, end = kernel.curve_endpoints(offset)
        assert start == pytest.approx((30.5, 0.0, 0.0), abs=1e-6)
        assert end == pytest.approx((0.0, 0.0, 30.5), abs=1e-6)


# =============================================================================
# BOOLEANS AND FILLETS
# =============================================================================


class TestBooleans:
    """Test differences, intersection tests, chamfers and repair."""

    def test_difference_splits(self, kernel):
        bar = cq.Solid.makeBox(10, 1, 1)
        cutter = cq.Solid.makeBox(1, 3, 3, cq.Vector(4.5, -1, -1))
        pieces = kernel.boolean_difference(bar, cutter)
        assert len(pieces) == 2
        assert sorted(kernel.max_coordinate(p, 0) for p in pieces) == pytest.approx([4.5, 10.0])

    def test_intersects(self, kernel):
        a = cq.Solid.makeBox(1, 1, 1)
        assert kernel.boolean_intersects(a, cq.Solid.makeBox(1, 1, 1, cq.Vector(0.5, 0, 0)))
        assert not kernel.boolean_intersects(a, cq.Solid.makeBox(1, 1, 1, cq.Vector(5, 0, 0)))

    def test_max_coordinate(self, kernel):
        box = cq.Solid.makeBox(1, 2, 3)
        assert kernel.max_coordinate(box) == pytest.approx(3.0)
        assert kernel.max_coordinate(box, 0) == pytest.approx(1.0)

    def test_chamfer_junction(self, kernel):
        """A post on a plate gets one chamfer face per junction edge."""
        plate = cq.Solid.makeBox(10, 10, 1)
        post = cq.Solid.makeBox(2, 2, 3, cq.Vector(4, 4, 1))
        top = max(plate.Faces(), key=lambda f: f.Center().z)
        sides = [f for f in post.Faces() if abs(f.normalAt().z) < 1e-6]
        result = kernel.chamfer(plate, [top], post, sides, 0.2, 1e-4)
        assert len(result.fillets) == 4
        assert result.leftover_a
        assert result.leftover_b

    def test_repair_declines_valid_solid(self, kernel):
        assert kernel.repair_topology(cq.Solid.makeBox(1, 1, 1)) is None
