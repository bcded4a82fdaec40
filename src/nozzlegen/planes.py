"""
Attachment plane derivation.

Turns the case angles and lengths into the planes the rest of the pipeline
builds on:

- flush plane: at the reference point, normal along the attachment direction
- extrude plane: the flush plane pushed outward and flipped, so the neck is
  extruded inward toward and through the shell

Planes are immutable values. Translating or flipping returns a new plane.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .parameters import CaseParameters, HillsidePlane, NormalConvention, PadOrientation

Vec3 = tuple[float, float, float]

# Threshold of the arbitrary-axis rule: normals this close to world Z take
# their X axis from world Y instead.
ARBITRARY_AXIS_LIMIT = 1.0 / 64.0

# Normal or hillside components below this are treated as zero
LATERAL_TOLERANCE = 1e-9


def _normalize(v) -> np.ndarray:
    """Normalize a 3D vector."""
    v = np.asarray(v, dtype=float)
    magnitude = np.linalg.norm(v)
    if magnitude < 1e-12:
        raise ValueError("Cannot normalize a zero-length vector")
    return v / magnitude


def _as_vec3(v) -> Vec3:
    return (float(v[0]), float(v[1]), float(v[2]))


# =============================================================================
# PLANE VALUE
# =============================================================================


@dataclass(frozen=True)
class DerivedPlane:
    """
    A plane given by origin and unit normal.

    The in-plane axes follow the arbitrary-axis rule so that the same normal
    always produces the same axes:
    - x_dir = world_Y x N when N is (nearly) world Z, else world_Z x N
    - y_dir = N x x_dir
    """

    origin: Vec3
    normal: Vec3

    @classmethod
    def make(cls, origin, normal) -> DerivedPlane:
        return cls(_as_vec3(origin), _as_vec3(_normalize(normal)))

    @property
    def x_dir(self) -> Vec3:
        n = np.asarray(self.normal)
        if abs(n[0]) < ARBITRARY_AXIS_LIMIT and abs(n[1]) < ARBITRARY_AXIS_LIMIT:
            x = np.cross((0.0, 1.0, 0.0), n)
        else:
            x = np.cross((0.0, 0.0, 1.0), n)
        return _as_vec3(_normalize(x))

    @property
    def y_dir(self) -> Vec3:
        return _as_vec3(_normalize(np.cross(self.normal, self.x_dir)))

    def translated(self, vector) -> DerivedPlane:
        """Return a copy moved by vector."""
        return DerivedPlane(_as_vec3(np.asarray(self.origin) + np.asarray(vector, dtype=float)), self.normal)

    def flipped(self) -> DerivedPlane:
        """Return a copy with the normal reversed."""
        return DerivedPlane(self.origin, _as_vec3(-np.asarray(self.normal)))

    def axis(self, name: str) -> Vec3:
        """In-plane axis by name ("x" or "y")."""
        if name == "x":
            return self.x_dir
        if name == "y":
            return self.y_dir
        raise ValueError(f"Unknown plane axis: {name}")


@dataclass(frozen=True)
class AttachmentPlanes:
    """
    Planes and vectors derived from the case angles.

    has_lateral_component is False when the neck axis stays in the world X-Z
    plane (no Y in the normal or the hillside shift). Reference centers then
    drop their Y component so sampling noise cannot tilt the pad.
    """

    normal: Vec3
    flush: DerivedPlane
    extrude: DerivedPlane
    hillside_vector: Vec3
    has_lateral_component: bool = True


# =============================================================================
# NORMALS
# =============================================================================


def attachment_normal(theta: float, beta: float, convention: NormalConvention) -> Vec3:
    """
    Unit attachment normal from spherical-style angles.

    Args:
        theta: Angle around the vessel axis (radians)
        beta: Polar angle (POLAR) or elevation angle (ELEVATION), radians
        convention: Which formula the case family uses

    Returns:
        Normalized (x, y, z) direction
    """
    if convention is NormalConvention.POLAR:
        n = (
            math.cos(theta) * math.sin(beta),
            math.sin(theta) * math.sin(beta),
            math.cos(beta),
        )
    else:
        n = (
            math.cos(theta) * math.cos(beta),
            math.sin(theta) * math.cos(beta),
            math.sin(beta),
        )
    return _as_vec3(_normalize(n))


def pad_angle_normal(theta: float, hillside_plane: HillsidePlane) -> Vec3:
    """
    Pad normal for the attachment-angle family.

    The pad stays orthogonal to the shell wall: horizontal (radial) for
    cylinders attached on the YZ plane, vertical for heads on the XY plane.
    """
    normal_angle = math.pi / 2.0 if hillside_plane is HillsidePlane.XY else 0.0
    n = (
        math.cos(theta) * math.cos(normal_angle),
        math.sin(theta) * math.cos(normal_angle),
        math.sin(normal_angle),
    )
    return _as_vec3(_normalize(n))


# =============================================================================
# PLANE DERIVATION
# =============================================================================


def derive_attachment_planes(params: CaseParameters) -> AttachmentPlanes:
    """
    Compute the flush and extrude planes for a case.

    The extrude plane is the flush plane translated along the normal by the
    external length (plus the shell thickness for the surface-normal family)
    and flipped.
    """
    normal = attachment_normal(params.theta, params.beta, params.normal_convention)
    flush = DerivedPlane.make(params.reference_point, normal)

    offset = params.external_length
    if params.pad_orientation is PadOrientation.SURFACE_NORMAL:
        offset += params.shell_thickness
    extrude = flush.translated(np.asarray(normal) * offset).flipped()

    lateral = np.asarray(flush.axis(params.hillside_plane.lateral_axis))
    hillside_vector = _as_vec3(lateral * params.hillside)
    has_lateral_component = abs(hillside_vector[1]) > LATERAL_TOLERANCE or abs(normal[1]) > LATERAL_TOLERANCE

    return AttachmentPlanes(
        normal=normal,
        flush=flush,
        extrude=extrude,
        hillside_vector=hillside_vector,
        has_lateral_component=has_lateral_component,
    )
