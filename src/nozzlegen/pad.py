"""
Reinforcement pad construction.

The pad starts as a planar outline on the pad plane, is pushed out along the
pad normal by the external length, and extruded back toward (and through)
the shell. The trimming Booleans later cut it down to the band between the
shell's outer surface and that surface offset by the pad thickness.

Two outlines:
- constant radius: a circle of pad_radius around the pad plane origin
- constant width: the neck's own cross-section grown by pad_radius, so the
  clearance around an angled or off-axis neck stays the same all round

Two families decide the pad plane:
- SURFACE_NORMAL: normal of the shell under the orientation loop
- ATTACHMENT_ANGLE: radial (YZ) or vertical (XY) from the attachment angle
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .errors import DegenerateIntersectionError
from .intersection import IntersectionLoops, IntersectionResolver, rank_by_axial_extent
from .kernel.base import GeometryKernel
from .neck import NeckParts
from .parameters import CaseParameters, PadOrientation
from .planes import AttachmentPlanes, DerivedPlane, pad_angle_normal
from .repair import RepairStatus, repair_solid

PAD_TOLERANCE = 1e-4


@dataclass
class PadParts:
    """
    Attributes:
        pad: Untrimmed pad solid
        plane: Pad plane (origin at the orientation center)
        outline: Planar pad outline before translation
        weld_toe: Outline grown by the weld length
        extrude_length: Length the outline was extruded by
        repair_status: Outcome of the repair pass
    """

    pad: Any
    plane: DerivedPlane
    outline: Any
    weld_toe: Any
    extrude_length: float
    repair_status: RepairStatus


class PadBuilder:
    def __init__(self, kernel: GeometryKernel, params: CaseParameters):
        self.kernel = kernel
        self.params = params

    def pad_plane(self, loops: IntersectionLoops, resolver: IntersectionResolver) -> DerivedPlane:
        """Plane the pad outline is drawn on."""
        params = self.params
        if params.pad_orientation is PadOrientation.SURFACE_NORMAL:
            normal = resolver.shell_normal_at(loops)
        else:
            normal = pad_angle_normal(params.theta, params.hillside_plane)
        return DerivedPlane.make(loops.orientation_center, normal)

    def extrude_length(self, plane: DerivedPlane) -> float:
        params = self.params
        if params.pad_orientation is PadOrientation.SURFACE_NORMAL:
            return params.extrude_length + params.pad_thickness
        return params.external_length + float(np.linalg.norm(plane.origin))

    def outlines(self, plane: DerivedPlane, planes: AttachmentPlanes, neck: NeckParts) -> tuple[Any, Any]:
        """(pad outline, weld-toe outline) as planar regions."""
        kernel = self.kernel
        params = self.params
        toe_radius = params.pad_radius + params.weld_length

        if not params.is_pad_offset:
            outline = kernel.make_face(kernel.make_circle(plane, params.pad_radius))
            weld_toe = kernel.make_face(kernel.make_circle(plane, toe_radius))
            return outline, weld_toe

        section_plane = plane if params.pad_orientation is PadOrientation.SURFACE_NORMAL else planes.flush
        curves = kernel.connect_curves(
            kernel.section_solid(neck.uncut_neck, section_plane, PAD_TOLERANCE),
            PAD_TOLERANCE,
        )
        if not curves:
            raise DegenerateIntersectionError("Pad plane does not cross the neck")
        neck_outline = rank_by_axial_extent(kernel, curves, section_plane.y_dir)[0]

        outline = kernel.offset_curve_to_region(neck_outline, params.pad_radius, PAD_TOLERANCE, closed=False)
        weld_toe = kernel.offset_curve_to_region(neck_outline, toe_radius, PAD_TOLERANCE, closed=False)
        return outline, weld_toe

    def build(
        self,
        planes: AttachmentPlanes,
        neck: NeckParts,
        loops: IntersectionLoops,
        resolver: IntersectionResolver,
    ) -> PadParts:
        kernel = self.kernel
        params = self.params

        plane = self.pad_plane(loops, resolver)
        outline, weld_toe = self.outlines(plane, planes, neck)
        normal = np.asarray(plane.normal)
        length = self.extrude_length(plane)

        face = kernel.translate(outline, tuple(normal * params.external_length))
        pad = kernel.extrude_to_solid(face, tuple(-normal), length)
        outcome = repair_solid(kernel, pad, params.can_clean, "pad")

        return PadParts(
            pad=outcome.solid,
            plane=plane,
            outline=outline,
            weld_toe=weld_toe,
            extrude_length=length,
            repair_status=outcome.status,
        )
