"""
Neck (nozzle pipe) construction.

The neck is a tube: the bore circle on the extrude plane is offset outward by
the wall thickness into an annulus, moved sideways by the hillside offset, and
extruded along the extrude-plane normal (toward and through the shell).

The cut region is the disc of the neck's outer radius on the same plane. It
is what gets punched through the shell and pad later, so the hole matches the
outside of the pipe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .kernel.base import GeometryKernel
from .parameters import CaseParameters
from .planes import AttachmentPlanes
from .repair import RepairStatus, repair_solid

NECK_OFFSET_TOLERANCE = 1e-4


@dataclass
class NeckParts:
    """
    Everything the later stages need from the neck.

    Attributes:
        neck: Neck tube solid
        uncut_neck: Independent copy of the neck, kept for sectioning
        cut_region: Planar disc of the outer neck radius on the extrude plane
        repair_status: Outcome of the repair pass
    """

    neck: Any
    uncut_neck: Any
    cut_region: Any
    repair_status: RepairStatus


class NeckBuilder:
    def __init__(self, kernel: GeometryKernel):
        self.kernel = kernel

    def build(self, params: CaseParameters, planes: AttachmentPlanes) -> NeckParts:
        kernel = self.kernel
        plane = planes.extrude
        outer_radius = params.neck_radius + params.neck_thickness

        bore = kernel.make_circle(plane, params.neck_radius)
        annulus = kernel.offset_curve_to_region(bore, params.neck_thickness, NECK_OFFSET_TOLERANCE, closed=True)
        cut_region = kernel.make_face(kernel.make_circle(plane, outer_radius))

        annulus = kernel.translate(annulus, planes.hillside_vector)
        cut_region = kernel.translate(cut_region, planes.hillside_vector)

        neck = kernel.extrude_to_solid(annulus, plane.normal, params.extrude_length)
        outcome = repair_solid(kernel, neck, params.can_clean, "neck")

        return NeckParts(
            neck=outcome.solid,
            uncut_neck=kernel.copy(outcome.solid),
            cut_region=cut_region,
            repair_status=outcome.status,
        )
