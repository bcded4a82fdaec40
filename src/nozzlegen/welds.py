"""
Weld fillet generation at the nozzle junctions.

Three junctions get a weld: pad to neck, shell to pad on the outer wall, and
shell to pad on the inner wall. Both strategies chamfer between the base
solid's outer (or inner) significant surface and the attached solid's
significant surfaces:

- SurfaceWeldStrategy returns the chamfer faces as open shells. They show
  the weld but do not close into solids.
- SolidWeldStrategy collects the boundary loops of the chamfer faces and of
  the trimmed faces next to them, reconnects the segments and lofts a solid
  through the loops. A junction whose loops do not all close yields nothing.

A junction without a weld is reported with InfeasibleWeldWarning and the run
continues.
"""

from __future__ import annotations

import warnings
from abc import ABC, abstractmethod
from typing import Any, Sequence

from .errors import InfeasibleWeldWarning
from .intersection import significant_surfaces
from .kernel.base import ChamferResult, GeometryKernel
from .parameters import CaseParameters, HillsidePlane

CHAMFER_TOLERANCE = 1e-4
LOOP_TOLERANCE = 0.1


# =============================================================================
# STRATEGIES
# =============================================================================


class WeldStrategy(ABC):
    """Builds the weld between a base solid and a solid attached to it."""

    def __init__(self, kernel: GeometryKernel):
        self.kernel = kernel

    def junction_chamfer(
        self,
        base: Any,
        attached: Any,
        hillside_plane: HillsidePlane,
        size: float,
        inner: bool,
        origin: Sequence[float],
    ) -> ChamferResult:
        """Chamfer between the base wall and the attached solid's surfaces."""
        kernel = self.kernel
        base_faces = significant_surfaces(kernel, base, hillside_plane)
        if not base_faces:
            return ChamferResult()
        point = tuple(float(c) for c in origin)
        distances = [kernel.distance_to_point(f, point) for f in base_faces]
        pick = min if inner else max
        wall = base_faces[distances.index(pick(distances))]

        attached_faces = significant_surfaces(kernel, attached, hillside_plane)
        if not attached_faces:
            return ChamferResult()
        return kernel.chamfer(base, [wall], attached, attached_faces, size, CHAMFER_TOLERANCE)

    @abstractmethod
    def make(
        self,
        base: Any,
        attached: Any,
        hillside_plane: HillsidePlane,
        size: float,
        inner: bool,
        origin: Sequence[float],
    ) -> list[Any]:
        """Weld bodies for one junction (possibly none)."""


class SurfaceWeldStrategy(WeldStrategy):
    """Chamfer faces wrapped as open shells."""

    def make(self, base, attached, hillside_plane, size, inner, origin):
        result = self.junction_chamfer(base, attached, hillside_plane, size, inner, origin)
        return [self.kernel.make_shell_surface(face) for face in result.fillets]


class SolidWeldStrategy(WeldStrategy):
    """Solids lofted through the closed boundary loops of the chamfer."""

    def make(self, base, attached, hillside_plane, size, inner, origin):
        kernel = self.kernel
        result = self.junction_chamfer(base, attached, hillside_plane, size, inner, origin)
        if result.is_empty:
            return []

        curves = []
        for face in result.fillets:
            curves.extend(kernel.face_loops(face))
        for face in result.leftover_a + result.leftover_b:
            if any(kernel.shape_distance(face, fillet) <= LOOP_TOLERANCE for fillet in result.fillets):
                curves.extend(kernel.face_loops(face))

        segments = kernel.flatten_curves(curves, LOOP_TOLERANCE)
        loops = kernel.connect_curves(segments, LOOP_TOLERANCE)
        if not loops or not all(kernel.is_closed(loop) for loop in loops):
            return []

        solid = kernel.loft(loops)
        return [] if solid is None else [solid]


def select_weld_strategy(kernel: GeometryKernel, params: CaseParameters) -> WeldStrategy:
    """Pick the weld strategy once per run from the case flags."""
    if params.make_solid_fillets:
        return SolidWeldStrategy(kernel)
    return SurfaceWeldStrategy(kernel)


# =============================================================================
# JUNCTIONS
# =============================================================================


class WeldBuilder:
    def __init__(self, kernel: GeometryKernel, params: CaseParameters, origin: Sequence[float]):
        self.kernel = kernel
        self.params = params
        self.origin = origin
        self.strategy = select_weld_strategy(kernel, params)

    def junction(self, name: str, base: Any, attached: Any, inner: bool) -> list[Any]:
        welds = self.strategy.make(
            base,
            attached,
            self.params.hillside_plane,
            self.params.fillet_size,
            inner,
            self.origin,
        )
        if not welds:
            warnings.warn(f"No weld could be built at the {name} junction", InfeasibleWeldWarning, stacklevel=2)
        return welds

    def build(self, shell: Any, neck: Any, pad: Any) -> list[Any]:
        """Welds for pad-neck, shell-pad outer and shell-pad inner."""
        welds = []
        welds.extend(self.junction("pad-neck", pad, neck, inner=False))
        welds.extend(self.junction("shell-pad outer", shell, pad, inner=False))
        welds.extend(self.junction("shell-pad inner", shell, pad, inner=True))
        return welds
