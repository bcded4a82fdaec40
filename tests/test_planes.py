#!/usr/bin/env python3
"""
Tests for attachment plane derivation.

Tests cover:
- Both normal conventions
- In-plane axes from the arbitrary-axis rule
- Plane immutability
- Flush/extrude planes and hillside vectors per case family
- Whether a case moves the neck out of the X-Z plane
"""

import dataclasses
import math

import numpy as np
import pytest

from nozzlegen.parameters import CaseParameters, HillsidePlane, NormalConvention, PadOrientation
from nozzlegen.planes import DerivedPlane, attachment_normal, derive_attachment_planes, pad_angle_normal


def make_params(**overrides) -> CaseParameters:
    values = dict(
        reference_point=(20.0, 0.0, 30.0),
        shell_thickness=1.0,
        theta=0.0,
        beta=math.pi / 2.0,
        hillside=0.0,
        hillside_plane=HillsidePlane.YZ,
        external_length=7.0,
        internal_length=2.0,
        neck_radius=1.0,
        neck_thickness=0.2,
        pad_radius=3.0,
        pad_thickness=0.5,
    )
    values.update(overrides)
    return CaseParameters(**values)


# =============================================================================
# NORMALS
# =============================================================================


class TestAttachmentNormal:
    """Test the two (theta, beta) conventions."""

    def test_polar_radial(self):
        """POLAR with beta = pi/2 points along +X at theta = 0."""
        n = attachment_normal(0.0, math.pi / 2.0, NormalConvention.POLAR)
        assert np.allclose(n, (1.0, 0.0, 0.0))

    def test_polar_vertical(self):
        """POLAR with beta = 0 points straight up."""
        n = attachment_normal(0.0, 0.0, NormalConvention.POLAR)
        assert np.allclose(n, (0.0, 0.0, 1.0))

    def test_elevation_radial(self):
        """ELEVATION with beta = 0 points along +X at theta = 0."""
        n = attachment_normal(0.0, 0.0, NormalConvention.ELEVATION)
        assert np.allclose(n, (1.0, 0.0, 0.0))

    def test_conventions_differ_for_nonzero_beta(self):
        """The two conventions are not interchangeable."""
        polar = attachment_normal(0.3, 0.2, NormalConvention.POLAR)
        elevation = attachment_normal(0.3, 0.2, NormalConvention.ELEVATION)
        assert not np.allclose(polar, elevation)

    @pytest.mark.parametrize("convention", list(NormalConvention))
    @pytest.mark.parametrize("theta,beta", [(0.0, 0.0), (0.7, 0.2), (2.0, 1.3), (-1.0, 0.5)])
    def test_unit_length(self, convention, theta, beta):
        """Normals are always unit vectors."""
        assert np.linalg.norm(attachment_normal(theta, beta, convention)) == pytest.approx(1.0)

    def test_pad_angle_normal(self):
        """Pad normal is radial for YZ cases and vertical for XY cases."""
        assert np.allclose(pad_angle_normal(0.0, HillsidePlane.YZ), (1.0, 0.0, 0.0))
        assert np.allclose(pad_angle_normal(0.0, HillsidePlane.XY), (0.0, 0.0, 1.0))
        assert np.allclose(pad_angle_normal(math.pi / 2.0, HillsidePlane.YZ), (0.0, 1.0, 0.0))


# =============================================================================
# PLANE VALUES
# =============================================================================


class TestDerivedPlane:
    """Test plane axes and value semantics."""

    def test_axes_for_vertical_normal(self):
        """Normals along Z take X from world Y."""
        plane = DerivedPlane.make((0, 0, 0), (0, 0, 1))
        assert np.allclose(plane.x_dir, (1.0, 0.0, 0.0))
        assert np.allclose(plane.y_dir, (0.0, 1.0, 0.0))

    def test_axes_for_radial_normal(self):
        """Other normals take X from world Z."""
        plane = DerivedPlane.make((0, 0, 0), (1, 0, 0))
        assert np.allclose(plane.x_dir, (0.0, 1.0, 0.0))
        assert np.allclose(plane.y_dir, (0.0, 0.0, 1.0))

    def test_axes_orthonormal(self):
        """x_dir, y_dir and normal form an orthonormal frame."""
        plane = DerivedPlane.make((1, 2, 3), (0.3, -0.4, 0.8))
        x, y, n = (np.asarray(v) for v in (plane.x_dir, plane.y_dir, plane.normal))
        assert np.dot(x, y) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(x, n) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(y, n) == pytest.approx(0.0, abs=1e-12)
        assert np.linalg.norm(n) == pytest.approx(1.0)

    def test_make_normalizes(self):
        plane = DerivedPlane.make((0, 0, 0), (0, 0, 5))
        assert plane.normal == (0.0, 0.0, 1.0)

    def test_zero_normal_rejected(self):
        with pytest.raises(ValueError):
            DerivedPlane.make((0, 0, 0), (0, 0, 0))

    def test_frozen(self):
        """Planes cannot be modified in place."""
        plane = DerivedPlane.make((0, 0, 0), (0, 0, 1))
        with pytest.raises(dataclasses.FrozenInstanceError):
            plane.origin = (1.0, 1.0, 1.0)

    def test_translated_returns_new_plane(self):
        plane = DerivedPlane.make((0, 0, 0), (0, 0, 1))
        moved = plane.translated((1, 2, 3))
        assert moved.origin == (1.0, 2.0, 3.0)
        assert plane.origin == (0.0, 0.0, 0.0)
        assert moved.normal == plane.normal

    def test_flipped_returns_new_plane(self):
        plane = DerivedPlane.make((0, 0, 0), (0, 0, 1))
        flipped = plane.flipped()
        assert flipped.normal == (0.0, 0.0, -1.0)
        assert plane.normal == (0.0, 0.0, 1.0)

    def test_unknown_axis(self):
        with pytest.raises(ValueError):
            DerivedPlane.make((0, 0, 0), (0, 0, 1)).axis("z")


# =============================================================================
# PLANE DERIVATION
# =============================================================================


class TestDeriveAttachmentPlanes:
    """Test flush/extrude planes for both families."""

    def test_surface_normal_family(self):
        """Extrude plane sits external + shell thickness off the reference point."""
        planes = derive_attachment_planes(make_params())
        assert np.allclose(planes.flush.origin, (20.0, 0.0, 30.0))
        assert np.allclose(planes.extrude.origin, (28.0, 0.0, 30.0))
        assert np.allclose(planes.extrude.normal, (-1.0, 0.0, 0.0))

    def test_attachment_angle_family(self):
        """Extrude plane sits external off the reference point."""
        params = make_params(
            beta=0.0,
            normal_convention=NormalConvention.ELEVATION,
            pad_orientation=PadOrientation.ATTACHMENT_ANGLE,
        )
        planes = derive_attachment_planes(params)
        assert np.allclose(planes.extrude.origin, (27.0, 0.0, 30.0))
        assert np.allclose(planes.extrude.normal, (-1.0, 0.0, 0.0))

    def test_no_hillside(self):
        planes = derive_attachment_planes(make_params())
        assert np.allclose(planes.hillside_vector, (0.0, 0.0, 0.0))

    def test_hillside_yz_follows_plane_y(self):
        """YZ hillside moves along the flush plane's y axis."""
        planes = derive_attachment_planes(make_params(hillside=4.0))
        assert np.allclose(planes.hillside_vector, np.asarray(planes.flush.y_dir) * 4.0)
        assert np.allclose(planes.hillside_vector, (0.0, 0.0, 4.0))

    def test_hillside_xy_follows_plane_x(self):
        """XY hillside moves along the flush plane's x axis."""
        params = make_params(
            reference_point=(0.0, 0.0, 30.0),
            beta=0.2,
            hillside=4.0,
            hillside_plane=HillsidePlane.XY,
        )
        planes = derive_attachment_planes(params)
        assert np.allclose(planes.hillside_vector, np.asarray(planes.flush.x_dir) * 4.0)
        assert np.allclose(planes.hillside_vector, (0.0, 4.0, 0.0))

    def test_inputs_not_mutated(self):
        """Deriving planes twice gives equal values."""
        params = make_params(hillside=1.5)
        assert derive_attachment_planes(params) == derive_attachment_planes(params)

    @pytest.mark.parametrize(
        "overrides,expected",
        [
            (dict(), False),
            (dict(hillside=4.0), False),
            (dict(theta=math.pi), False),
            (dict(theta=0.3), True),
            (
                dict(
                    reference_point=(0.0, 0.0, 30.0),
                    beta=0.2,
                    hillside=4.0,
                    hillside_plane=HillsidePlane.XY,
                ),
                True,
            ),
            (dict(reference_point=(0.0, 0.0, 30.0), beta=0.0, hillside_plane=HillsidePlane.XY), False),
        ],
    )
    def test_lateral_component(self, overrides, expected):
        """Only a normal or hillside shift with a world Y component is lateral."""
        assert derive_attachment_planes(make_params(**overrides)).has_lateral_component is expected
