"""
CadQuery / OpenCASCADE implementation of the geometry kernel.

Curves are cq.Wire (edges coming out of OCCT are wrapped on the way in),
regions and surfaces are cq.Face, solids are cq.Solid. Where CadQuery has no
wrapper (sections, fuse history, chamfers between face sets, lofts) the OCP
bindings are used directly.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

import cadquery as cq
import numpy as np
from OCP.BRep import BRep_Tool
from OCP.BRepAlgoAPI import BRepAlgoAPI_Fuse, BRepAlgoAPI_Section
from OCP.BRepFilletAPI import BRepFilletAPI_MakeChamfer
from OCP.BRepOffsetAPI import BRepOffsetAPI_ThruSections
from OCP.gp import gp_Dir, gp_Pln, gp_Pnt
from OCP.TopAbs import TopAbs_EDGE, TopAbs_FACE
from OCP.TopExp import TopExp
from OCP.TopoDS import TopoDS
from OCP.TopTools import (
    TopTools_IndexedDataMapOfShapeListOfShape,
    TopTools_IndexedMapOfShape,
    TopTools_ListOfShape,
)

from ..planes import DerivedPlane
from .base import DEFAULT_TOLERANCE, ChamferResult, GeometryKernel, Vec3

# Samples used when an offset curve has to be rebuilt as a spline
SPLINE_SAMPLES = 32


def _as_wire(curve: cq.Shape) -> cq.Wire:
    """Wrap a bare edge as a single-edge wire."""
    if isinstance(curve, cq.Wire):
        return curve
    if isinstance(curve, cq.Edge):
        return cq.Wire.assembleEdges([curve])
    raise TypeError(f"Expected an edge or wire, got {type(curve).__name__}")


def _iter_shapes(shape_list: TopTools_ListOfShape):
    """Iterate an OCCT shape list."""
    yield from shape_list


def _map_to_list(shape_map: TopTools_IndexedMapOfShape) -> list:
    return [shape_map.FindKey(i) for i in range(1, shape_map.Extent() + 1)]


class CadQueryKernel(GeometryKernel):
    """GeometryKernel backed by CadQuery and OCP."""

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        self.tolerance = tolerance

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    def make_circle(self, plane: DerivedPlane, radius: float) -> cq.Wire:
        return cq.Wire.makeCircle(radius, cq.Vector(*plane.origin), cq.Vector(*plane.normal))

    def make_face(self, curve: cq.Shape) -> cq.Face:
        return cq.Face.makeFromWires(_as_wire(curve))

    def offset_curve_to_region(self, curve: cq.Shape, distance: float, tolerance: float, closed: bool) -> cq.Face:
        wire = _as_wire(curve)
        offsets = wire.offset2D(distance, "arc")
        if not offsets:
            raise RuntimeError(f"Offset by {distance} produced no contour")
        outer = max(offsets, key=lambda w: w.BoundingBox().DiagonalLength)
        if closed:
            return cq.Face.makeFromWires(outer, [wire])
        return cq.Face.makeFromWires(outer)

    def offset_planar_curve(self, curve: cq.Shape, distance: float, plane_normal: Vec3) -> cq.Wire:
        wire = _as_wire(curve)
        normal = cq.Vector(*plane_normal).normalized()
        edges = wire.Edges()
        kind = edges[0].geomType() if len(edges) == 1 else "COMPOSITE"

        if kind == "LINE":
            params = [0.0, 1.0]
        elif kind == "CIRCLE" and not wire.IsClosed():
            params = [0.0, 0.5, 1.0]
        else:
            params = [i / SPLINE_SAMPLES for i in range(SPLINE_SAMPLES + 1)]

        points = []
        for t in params:
            shift = wire.tangentAt(t).cross(normal).normalized() * distance
            points.append(wire.positionAt(t) + shift)

        if kind == "LINE":
            return cq.Wire.assembleEdges([cq.Edge.makeLine(points[0], points[1])])
        if len(points) == 3:
            return cq.Wire.assembleEdges([cq.Edge.makeThreePointArc(*points)])
        if wire.IsClosed():
            return cq.Wire.assembleEdges([cq.Edge.makeSpline(points[:-1], periodic=True)])
        return cq.Wire.assembleEdges([cq.Edge.makeSpline(points)])

    def join_profile(self, curve: cq.Shape, points: Sequence[Vec3], tolerance: float) -> cq.Face:
        wire = _as_wire(curve)
        path = [wire.endPoint()] + [cq.Vector(*p) for p in points] + [wire.startPoint()]

        segments: list[cq.Shape] = [wire]
        current = path[0]
        for target in path[1:]:
            if (target - current).Length < tolerance:
                continue
            segments.append(cq.Edge.makeLine(current, target))
            current = target

        closed = [w for w in cq.Wire.combine(segments, tolerance) if w.IsClosed()]
        if not closed:
            raise RuntimeError("Profile does not close")
        return cq.Face.makeFromWires(closed[0])

    def make_bounding_cylinder(self, radius: float, z_min: float, z_max: float) -> cq.Solid:
        return cq.Solid.makeCylinder(radius, z_max - z_min, cq.Vector(0, 0, z_min), cq.Vector(0, 0, 1))

    def translate(self, shape: cq.Shape, vector: Vec3) -> cq.Shape:
        return shape.moved(cq.Location(cq.Vector(*vector)))

    def copy(self, shape: cq.Shape) -> cq.Shape:
        return shape.copy()

    def extrude_to_solid(self, region: cq.Face, direction: Vec3, length: float) -> cq.Solid:
        vec = cq.Vector(*direction).normalized() * length
        return cq.Solid.extrudeLinear(region.outerWire(), region.innerWires(), vec)

    def revolve_to_solid(
        self,
        region: cq.Face,
        start_angle: float,
        sweep_angle: float,
        axis: Vec3,
        origin: Vec3,
        tolerance: float,
    ) -> cq.Solid:
        axis_start = cq.Vector(*origin)
        axis_end = axis_start + cq.Vector(*axis)
        if abs(start_angle) > tolerance:
            region = region.rotate(axis_start, axis_end, math.degrees(start_angle))
        return cq.Solid.revolve(
            region.outerWire(),
            region.innerWires(),
            math.degrees(sweep_angle),
            axis_start,
            axis_end,
        )

    def loft(self, curves: Sequence[cq.Shape]) -> cq.Solid | None:
        loft = BRepOffsetAPI_ThruSections(True, True)  # solid=True, ruled=True
        for curve in curves:
            loft.AddWire(_as_wire(curve).wrapped)
        try:
            loft.Build()
        except Exception:
            return None
        if not loft.IsDone():
            return None
        solids = cq.Shape.cast(loft.Shape()).Solids()
        return solids[0] if solids else None

    def make_shell_surface(self, face: cq.Face) -> cq.Shell:
        return cq.Shell.makeShell([face])

    # =========================================================================
    # INTERSECTION AND SECTIONING
    # =========================================================================

    def _section_edges(self, section: BRepAlgoAPI_Section, tolerance: float) -> list[cq.Wire]:
        section.SetFuzzyValue(tolerance)
        section.Approximation(True)
        section.Build()
        if not section.IsDone():
            return []
        return [_as_wire(e) for e in cq.Shape.cast(section.Shape()).Edges()]

    def intersect_surfaces(self, a: cq.Face, b: cq.Face, tolerance: float) -> list[cq.Wire]:
        return self._section_edges(BRepAlgoAPI_Section(a.wrapped, b.wrapped, False), tolerance)

    def section_solid(self, shape: cq.Shape, plane: DerivedPlane, tolerance: float) -> list[cq.Wire]:
        pln = gp_Pln(gp_Pnt(*plane.origin), gp_Dir(*plane.normal))
        return self._section_edges(BRepAlgoAPI_Section(shape.wrapped, pln, False), tolerance)

    def connect_curves(self, curves: Sequence[cq.Shape], tolerance: float) -> list[cq.Wire]:
        if not curves:
            return []
        return cq.Wire.combine(list(curves), tolerance)

    def flatten_curves(self, curves: Sequence[cq.Shape], tolerance: float) -> list[cq.Edge]:
        kept: list[cq.Edge] = []
        for curve in curves:
            for edge in curve.Edges():
                if not any(self._same_edge(edge, other, tolerance) for other in kept):
                    kept.append(edge)
        return kept

    @staticmethod
    def _same_edge(a: cq.Edge, b: cq.Edge, tolerance: float) -> bool:
        a0, a1 = a.startPoint(), a.endPoint()
        b0, b1 = b.startPoint(), b.endPoint()
        same_ends = ((a0 - b0).Length < tolerance and (a1 - b1).Length < tolerance) or (
            (a0 - b1).Length < tolerance and (a1 - b0).Length < tolerance
        )
        return same_ends and (a.positionAt(0.5) - b.positionAt(0.5)).Length < tolerance

    def clip_curve(self, curve: cq.Shape, axis: int, keep_positive: bool) -> cq.Wire:
        wire = _as_wire(curve)
        bb = wire.BoundingBox()
        size = 4.0 * max(bb.DiagonalLength, 1.0)
        corner = [bb.center.x - size / 2.0, bb.center.y - size / 2.0, bb.center.z - size / 2.0]
        dims = [size, size, size]
        corner[axis] = 0.0 if keep_positive else -size
        half_space = cq.Solid.makeBox(dims[0], dims[1], dims[2], cq.Vector(*corner))

        edges = wire.intersect(half_space).Edges()
        if not edges:
            return wire
        pieces = cq.Wire.combine(edges, self.tolerance)
        return max(pieces, key=lambda w: w.Length())

    # =========================================================================
    # BOOLEANS, FILLETS, REPAIR
    # =========================================================================

    def boolean_difference(self, a: cq.Shape, b: cq.Shape) -> list[cq.Solid]:
        return a.cut(b).Solids()

    def boolean_intersects(self, a: cq.Shape, b: cq.Shape) -> bool:
        return a.distance(b) <= self.tolerance

    def chamfer(
        self,
        solid_a: cq.Shape,
        faces_a: Sequence[cq.Face],
        solid_b: cq.Shape,
        faces_b: Sequence[cq.Face],
        size: float,
        tolerance: float,
    ) -> ChamferResult:
        """
        Chamfer the concave junction where faces_a meet faces_b.

        The two solids are fused, the fused faces descending from each set
        are tracked through the fuse history, and every edge bounded by one
        face of each set is chamfered symmetrically by size.
        """
        fuse = BRepAlgoAPI_Fuse()
        args = TopTools_ListOfShape()
        args.Append(solid_a.wrapped)
        tools = TopTools_ListOfShape()
        tools.Append(solid_b.wrapped)
        fuse.SetArguments(args)
        fuse.SetTools(tools)
        fuse.SetFuzzyValue(tolerance)
        fuse.Build()
        if not fuse.IsDone():
            return ChamferResult()
        fused = fuse.Shape()

        def images(faces: Sequence[cq.Face]) -> TopTools_IndexedMapOfShape:
            found = TopTools_IndexedMapOfShape()
            for face in faces:
                modified = list(_iter_shapes(fuse.Modified(face.wrapped)))
                if modified:
                    for shape in modified:
                        found.Add(shape)
                elif not fuse.IsDeleted(face.wrapped):
                    found.Add(face.wrapped)
            return found

        images_a = images(faces_a)
        images_b = images(faces_b)

        # Build edge-to-face map of the fused solid
        edge_face_map = TopTools_IndexedDataMapOfShapeListOfShape()
        TopExp.MapShapesAndAncestors_s(fused, TopAbs_EDGE, TopAbs_FACE, edge_face_map)

        junction = []
        for i in range(1, edge_face_map.Extent() + 1):
            adjacent = list(_iter_shapes(edge_face_map.FindFromIndex(i)))
            face_a = next((f for f in adjacent if images_a.Contains(f)), None)
            face_b = next((f for f in adjacent if images_b.Contains(f)), None)
            if face_a is not None and face_b is not None and not face_a.IsSame(face_b):
                junction.append((TopoDS.Edge_s(edge_face_map.FindKey(i)), TopoDS.Face_s(face_a)))

        if not junction:
            return ChamferResult()

        chamfer_maker = BRepFilletAPI_MakeChamfer(fused)
        for edge, face in junction:
            chamfer_maker.Add(size, size, edge, face)
        try:
            chamfer_maker.Build()
        except Exception:
            return ChamferResult()
        if not chamfer_maker.IsDone():
            return ChamferResult()

        generated = TopTools_IndexedMapOfShape()
        for edge, _ in junction:
            for shape in _iter_shapes(chamfer_maker.Generated(edge)):
                generated.Add(shape)

        def leftovers(face_images: TopTools_IndexedMapOfShape) -> list[cq.Face]:
            result = []
            for shape in _map_to_list(face_images):
                modified = list(_iter_shapes(chamfer_maker.Modified(shape)))
                result.extend(cq.Shape.cast(s) for s in (modified or [shape]))
            return result

        return ChamferResult(
            fillets=[cq.Shape.cast(s) for s in _map_to_list(generated)],
            leftover_a=leftovers(images_a),
            leftover_b=leftovers(images_b),
        )

    def repair_topology(self, solid: cq.Shape) -> cq.Shape | None:
        if solid.isValid():
            return None
        try:
            fixed = solid.fix()
        except Exception:
            return None
        return fixed if fixed.isValid() else None

    # =========================================================================
    # QUERIES
    # =========================================================================

    def sample_by_arc_length(self, curve: cq.Shape, step: float) -> np.ndarray:
        wire = _as_wire(curve)
        count = max(int(round(wire.Length() / step)), 1)
        return np.array([wire.positionAt(i / count, mode="length").toTuple() for i in range(count + 1)])

    def curve_length(self, curve: cq.Shape) -> float:
        return _as_wire(curve).Length()

    def curve_endpoints(self, curve: cq.Shape) -> tuple[Vec3, Vec3]:
        wire = _as_wire(curve)
        return wire.startPoint().toTuple(), wire.endPoint().toTuple()

    def is_closed(self, curve: cq.Shape) -> bool:
        return _as_wire(curve).IsClosed()

    def face_loops(self, face: cq.Face) -> list[cq.Wire]:
        edges = [
            e for e in face.Edges()
            if not BRep_Tool.IsClosed_s(e.wrapped, face.wrapped)  # drop seam edges
        ]
        return cq.Wire.combine(edges, self.tolerance) if edges else []

    def faces(self, shape: cq.Shape) -> list[cq.Face]:
        return shape.Faces()

    def surface_kind(self, face: cq.Face) -> str:
        return face.geomType()

    def surface_extent(self, face: cq.Face, metric: str) -> float:
        bb = face.BoundingBox()
        if metric == "height":
            return bb.zlen
        return bb.DiagonalLength

    def surface_normal_at(self, face: cq.Face, point: Vec3) -> Vec3:
        return face.normalAt(cq.Vector(*point)).toTuple()

    def distance_to_point(self, shape: cq.Shape, point: Vec3) -> float:
        return shape.distance(cq.Vertex.makeVertex(*point))

    def shape_distance(self, a: cq.Shape, b: cq.Shape) -> float:
        return a.distance(b)

    def max_coordinate(self, shape: cq.Shape, axis: int | None = None) -> float:
        bb = shape.BoundingBox()
        corner = (bb.xmax, bb.ymax, bb.zmax)
        return max(corner) if axis is None else corner[axis]

    def bounding_box(self, shape: cq.Shape) -> tuple[Vec3, Vec3]:
        bb = shape.BoundingBox()
        return (bb.xmin, bb.ymin, bb.zmin), (bb.xmax, bb.ymax, bb.zmax)

    def volume(self, shape: cq.Shape) -> float:
        return shape.Volume()

    def is_valid(self, shape: cq.Shape) -> bool:
        return shape.isValid()
