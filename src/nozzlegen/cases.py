"""
Preset nozzle cases.

Each preset pairs a shell with a neck/pad arrangement:

- BASE_CASE: radial neck on a cylindrical shell, constant-radius pad
- CONSTANT_WIDTH_CASE: the base case tilted 0.1 rad with a pad tracing the
  neck outline
- SPHERE_CASE: vertical neck on a hemispherical head
- SPHERE_CASE_WITH_BETA: the sphere case tilted and moved off the pole
- FILLETS / SOLID_FILLETS: the base case in the attachment-angle family with
  surface or solid welds

Usage:
    from nozzlegen.cases import Case, case_parameters

    params = case_parameters(Case.SPHERE_CASE)
"""

from __future__ import annotations

import math
from enum import Enum

import cadquery as cq

from .errors import InvalidCaseError
from .parameters import CaseParameters, HillsidePlane, NormalConvention, PadOrientation

# =============================================================================
# SHELLS
# =============================================================================


def make_cylindrical_shell(radius: float, thickness: float, height: float) -> cq.Solid:
    """
    Open-ended cylindrical shell standing on the XY plane.

    Args:
        radius: Inner radius
        thickness: Wall thickness
        height: Height along Z

    Returns:
        Ring solid from z=0 to z=height
    """
    outer = cq.Solid.makeCylinder(radius + thickness, height, cq.Vector(0, 0, 0), cq.Vector(0, 0, 1))
    inner = cq.Solid.makeCylinder(radius, height, cq.Vector(0, 0, 0), cq.Vector(0, 0, 1))
    return outer.cut(inner).Solids()[0]


def make_spherical_shell(radius: float, thickness: float) -> cq.Solid:
    """
    Hemispherical head above the XY plane.

    The quarter annulus between radius and radius + thickness in the XZ
    plane, revolved a full turn about Z.
    """
    outer = cq.Solid.makeSphere(radius + thickness, cq.Vector(0, 0, 0), cq.Vector(0, 0, 1), 0, 90, 360)
    inner = cq.Solid.makeSphere(radius, cq.Vector(0, 0, 0), cq.Vector(0, 0, 1), 0, 90, 360)
    return outer.cut(inner).Solids()[0]


# =============================================================================
# PRESETS
# =============================================================================


class Case(Enum):
    BASE_CASE = "base_case"
    CONSTANT_WIDTH_CASE = "constant_width_case"
    SPHERE_CASE = "sphere_case"
    SPHERE_CASE_WITH_BETA = "sphere_case_with_beta"
    FILLETS = "fillets"
    SOLID_FILLETS = "solid_fillets"

    @classmethod
    def from_name(cls, name: str) -> Case:
        """Look up a case by value or member name (case-insensitive)."""
        key = name.strip().lower().replace("-", "_")
        for case in cls:
            if case.value == key:
                return case
        raise InvalidCaseError(f"Unknown case: {name}. Valid cases: {[c.value for c in cls]}")


def base_case() -> CaseParameters:
    return CaseParameters(
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
        shell=make_cylindrical_shell(20.0, 1.0, 60.0),
    )


def sphere_case() -> CaseParameters:
    return CaseParameters(
        reference_point=(0.0, 0.0, 30.0),
        shell_thickness=1.0,
        theta=0.0,
        beta=0.0,
        hillside=0.0,
        hillside_plane=HillsidePlane.XY,
        external_length=7.0,
        internal_length=2.0,
        neck_radius=2.0,
        neck_thickness=0.5,
        pad_radius=5.0,
        pad_thickness=0.5,
        shell=make_spherical_shell(30.0, 1.0),
    )


def case_parameters(case: Case | str) -> CaseParameters:
    """
    Build the parameters of a preset case.

    Args:
        case: Case member or its name

    Returns:
        Fresh CaseParameters with a newly built shell

    Raises:
        InvalidCaseError: If case is not a known preset
    """
    if isinstance(case, str):
        case = Case.from_name(case)
    if not isinstance(case, Case):
        raise InvalidCaseError(f"Unknown case: {case!r}")

    if case is Case.BASE_CASE:
        return base_case()

    if case is Case.CONSTANT_WIDTH_CASE:
        params = base_case()
        params.beta = math.pi / 2.0 - 0.1
        params.is_pad_offset = True
        return params

    if case is Case.SPHERE_CASE:
        return sphere_case()

    if case is Case.SPHERE_CASE_WITH_BETA:
        params = sphere_case()
        params.beta = 0.2
        params.hillside = 4.0
        return params

    # FILLETS and SOLID_FILLETS: attachment-angle family on the base shell
    params = base_case()
    params.beta = 0.0
    params.normal_convention = NormalConvention.ELEVATION
    params.pad_orientation = PadOrientation.ATTACHMENT_ANGLE
    params.can_clean = True
    params.add_fillets = True
    params.make_solid_fillets = case is Case.SOLID_FILLETS
    return params
