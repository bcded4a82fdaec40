"""
Case parameters for a nozzle attachment.

A case describes one nozzle variant: where the neck meets the shell, at which
angles, how long it runs on either side of the wall, and how the
reinforcement pad and welds are dimensioned. The shell itself arrives
pre-built as a solid.

================================================================================
CASE FAMILIES
================================================================================

Two families of cases exist and differ in a handful of rules:

- SURFACE_NORMAL: the pad is oriented by the shell's surface normal where the
  neck leaves the shell. The extrude plane sits `external + shell thickness`
  off the reference point. Normals use the POLAR convention by default.
- ATTACHMENT_ANGLE: the pad is oriented by the attachment angle (theta) and
  the hillside plane. The extrude plane sits `external` off the reference
  point. Normals use the ELEVATION convention by default.

The two normal conventions are not equivalent for beta != 0, so the family
picks one explicitly instead of assuming either is authoritative.
================================================================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from .errors import InvalidCaseError

# =============================================================================
# SYMMETRY / HILLSIDE PLANE
# =============================================================================


class HillsidePlane(Enum):
    """
    Symmetry plane a hillside (lateral) offset moves along.

    Each member carries everything that depends on the choice:

    - lateral_axis: which in-plane axis of the flush plane the offset follows
    - rank_metric: how far a point reaches when ranking loops and Boolean
      pieces ("radial" = distance from the Z axis, "vertical" = Z)
    - extent_metric: how significant shell surfaces are filtered
      ("height" = Z extent of the face, "diagonal" = bounding-box diagonal)
    """

    YZ = ("y", "radial", "height")
    XY = ("x", "vertical", "diagonal")

    def __init__(self, lateral_axis: str, rank_metric: str, extent_metric: str):
        self.lateral_axis = lateral_axis
        self.rank_metric = rank_metric
        self.extent_metric = extent_metric

    def reach(self, points) -> np.ndarray:
        """Ranking value of each (x, y, z) point."""
        points = np.atleast_2d(np.asarray(points, dtype=float))
        if self.rank_metric == "radial":
            return np.linalg.norm(points[:, :2], axis=1)
        return points[:, 2]

    @classmethod
    def from_name(cls, name: str) -> HillsidePlane:
        try:
            return cls[name.upper()]
        except KeyError:
            raise InvalidCaseError(
                f"Unknown hillside plane: {name}. Valid planes: {[p.name for p in cls]}"
            ) from None


class NormalConvention(Enum):
    """Formula used to turn (theta, beta) into an attachment normal."""

    POLAR = "polar"  # (cos t sin b, sin t sin b, cos b)
    ELEVATION = "elevation"  # (cos t cos b, sin t cos b, sin b)


class PadOrientation(Enum):
    """How the reinforcement pad finds its plane (selects the case family)."""

    SURFACE_NORMAL = "surface_normal"
    ATTACHMENT_ANGLE = "attachment_angle"


# =============================================================================
# CASE PARAMETERS
# =============================================================================


@dataclass
class CaseParameters:
    """
    Parametric description of one nozzle case.

    Attributes:
        reference_point: Point on the shell where the neck axis attaches
        shell_thickness: Wall thickness of the shell
        theta: Attachment angle around the vessel axis (radians)
        beta: Attachment elevation angle (radians, meaning depends on convention)
        hillside: Lateral offset of the neck axis from the reference point
        hillside_plane: Symmetry plane the lateral offset moves along
        external_length: Neck length outside the shell
        internal_length: Neck length projecting into the vessel
        neck_radius: Inner (bore) radius of the neck
        neck_thickness: Neck wall thickness
        pad_radius: Pad radius (constant-radius) or pad width (constant-width)
        pad_thickness: Reinforcement pad thickness
        weld_length: Weld leg size used for fillets and the pad weld toe
        is_pad_offset: True for a constant-width pad tracing the neck outline
        add_fillets: Generate weld solids at the three junctions
        make_solid_fillets: Use the solid-loft weld strategy instead of
            plain chamfer surfaces
        can_clean: Allow a best-effort topology repair pass on built solids
        shell: Pre-built shell solid (closed, manifold)
        normal_convention: Formula for the attachment normal
        pad_orientation: Case family selector
    """

    reference_point: tuple[float, float, float]
    shell_thickness: float
    theta: float
    beta: float
    hillside: float
    hillside_plane: HillsidePlane
    external_length: float
    internal_length: float
    neck_radius: float
    neck_thickness: float
    pad_radius: float
    pad_thickness: float
    shell: Any = None
    weld_length: float = 0.2
    is_pad_offset: bool = False
    add_fillets: bool = False
    make_solid_fillets: bool = False
    can_clean: bool = False
    normal_convention: NormalConvention = NormalConvention.POLAR
    pad_orientation: PadOrientation = PadOrientation.SURFACE_NORMAL

    def __post_init__(self):
        # Convert lists to tuples if needed (from YAML loading)
        if isinstance(self.reference_point, list):
            self.reference_point = (
                float(self.reference_point[0]),
                float(self.reference_point[1]),
                float(self.reference_point[2]),
            )
        if isinstance(self.hillside_plane, str):
            self.hillside_plane = HillsidePlane.from_name(self.hillside_plane)
        if isinstance(self.normal_convention, str):
            self.normal_convention = NormalConvention(self.normal_convention)
        if isinstance(self.pad_orientation, str):
            self.pad_orientation = PadOrientation(self.pad_orientation)

    @property
    def extrude_length(self) -> float:
        """Total neck length: external + internal + through the wall."""
        return self.external_length + self.internal_length + self.shell_thickness

    @property
    def fillet_size(self) -> float:
        return self.weld_length

    def validate(self) -> None:
        """
        Check the parameters describe a buildable case.

        Raises:
            InvalidCaseError: On non-finite values, non-positive radii or
                thicknesses, or a missing shell
        """
        finite = {
            "theta": self.theta,
            "beta": self.beta,
            "hillside": self.hillside,
            "external_length": self.external_length,
            "internal_length": self.internal_length,
            "weld_length": self.weld_length,
        }
        for name, value in finite.items():
            if not math.isfinite(value):
                raise InvalidCaseError(f"{name} must be finite, got {value}")

        if len(self.reference_point) != 3 or not np.all(np.isfinite(self.reference_point)):
            raise InvalidCaseError(f"reference_point must be a finite 3D point, got {self.reference_point}")

        positive = {
            "shell_thickness": self.shell_thickness,
            "neck_radius": self.neck_radius,
            "neck_thickness": self.neck_thickness,
            "pad_radius": self.pad_radius,
            "pad_thickness": self.pad_thickness,
        }
        for name, value in positive.items():
            if not math.isfinite(value) or value <= 0.0:
                raise InvalidCaseError(f"{name} must be positive, got {value}")

        if self.shell is None:
            raise InvalidCaseError("Case has no shell solid")
