"""
Nozzle pipeline: case parameters in, trimmed solids out.

Stages, in order:

1. Derive the flush and extrude planes from the case angles
2. Build the neck tube and its cut region
3. Intersect shell and neck, rank the loops, find the reference centers
4. Build the reinforcement pad on the orientation loop
5. Trim the pad back to the shell wall offset by the pad thickness
6. Optionally weld the three junctions while the pad still crosses the wall
7. Trim the pad down to the band outside the shell wall
8. Punch the neck hole through shell and pad

Every run re-derives everything from its CaseParameters; the input shell is
never modified.

Usage:
    from nozzlegen import Case, NozzlePipeline, case_parameters

    result = NozzlePipeline().run(case_parameters(Case.BASE_CASE))
    result.export("nozzle.step")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import cadquery as cq
import numpy as np

from .booleans import BooleanCombiner
from .intersection import IntersectionResolver
from .kernel.base import GeometryKernel
from .kernel.occ import CadQueryKernel
from .neck import NeckBuilder
from .pad import PadBuilder
from .parameters import CaseParameters, PadOrientation
from .planes import AttachmentPlanes, DerivedPlane, derive_attachment_planes
from .repair import repair_solid
from .shell_offset import ShellOffsetBuilder
from .welds import WeldBuilder


@dataclass
class NozzleResult:
    """
    Finished nozzle geometry.

    Attributes:
        shell: Shell with the neck hole cut
        neck: Neck tube
        pad: Trimmed reinforcement pad with the neck hole cut
        welds: Weld bodies (empty when fillets are off or infeasible)
        center: Reference center of the cut loop
        planes: Attachment planes the run was built on
        pad_plane: Plane the pad outline was drawn on
    """

    shell: Any
    neck: Any
    pad: Any
    welds: list[Any] = field(default_factory=list)
    center: np.ndarray | None = None
    planes: AttachmentPlanes | None = None
    pad_plane: DerivedPlane | None = None

    def solids(self) -> list[Any]:
        """All bodies of the result, shell first."""
        return [s for s in (self.shell, self.neck, self.pad) if s is not None] + list(self.welds)

    def export(self, filename: str | Path) -> None:
        """
        Write every body to one STEP compound.

        Raises:
            RuntimeError: If the result holds no geometry
        """
        shapes = self.solids()
        if not shapes:
            raise RuntimeError("Nozzle result has no geometry to export")
        cq.exporters.export(cq.Compound.makeCompound(shapes), str(filename))


class NozzlePipeline:
    """Runs the nozzle stages against a geometry kernel."""

    def __init__(self, kernel: GeometryKernel | None = None):
        self.kernel = kernel if kernel is not None else CadQueryKernel()

    def run(self, params: CaseParameters) -> NozzleResult:
        """
        Build shell, neck, pad and welds for one case.

        Raises:
            InvalidCaseError: If the parameters fail validation
            DegenerateIntersectionError: If shell and neck do not meet
            AmbiguousBooleanError: If a trim removes everything
        """
        params.validate()
        kernel = self.kernel

        planes = derive_attachment_planes(params)
        neck = NeckBuilder(kernel).build(params, planes)

        resolver = IntersectionResolver(kernel, params, planes)
        loops = resolver.resolve(params.shell, neck.neck)
        origin = resolver.relative_origin(loops)

        pad_parts = PadBuilder(kernel, params).build(planes, neck, loops, resolver)
        pad = self.trim_outer(params, pad_parts.pad, origin)

        # the pad still runs through the shell wall here, so all three junctions exist
        welds = []
        if params.add_fillets:
            welds = WeldBuilder(kernel, params, origin).build(params.shell, neck.neck, pad)

        pad = self.trim_inner(params, pad, origin)

        combiner = BooleanCombiner(kernel, params.hillside_plane)
        direction = planes.extrude.normal
        shell = combiner.extrude_remove(params.shell, neck.cut_region, direction, params.extrude_length)
        pad = combiner.extrude_remove(pad, neck.cut_region, direction, params.extrude_length)

        return NozzleResult(
            shell=shell,
            neck=neck.neck,
            pad=pad,
            welds=welds,
            center=loops.cut_center,
            planes=planes,
            pad_plane=pad_parts.plane,
        )

    def trim_outer(self, params: CaseParameters, pad: Any, origin) -> Any:
        """Cut away the part of the pad beyond the shell wall offset by the pad thickness."""
        kernel = self.kernel
        offsets = ShellOffsetBuilder(kernel, params, origin)
        outer_offset = offsets.build(params.pad_thickness, flip=True)
        outer_offset = repair_solid(kernel, outer_offset, params.can_clean, "offset shell").solid
        return BooleanCombiner(kernel, params.hillside_plane).difference(pad, outer_offset, want_outer=False).solid

    def trim_inner(self, params: CaseParameters, pad: Any, origin) -> Any:
        """Cut away the part of the pad inside the shell's outer wall."""
        kernel = self.kernel
        combiner = BooleanCombiner(kernel, params.hillside_plane)
        if params.pad_orientation is PadOrientation.SURFACE_NORMAL:
            wall = ShellOffsetBuilder(kernel, params, origin).build(0.0)
            wall = repair_solid(kernel, wall, params.can_clean, "shell wall").solid
            return combiner.difference(pad, wall, want_outer=True).solid
        return combiner.difference(pad, params.shell, want_outer=True).solid
