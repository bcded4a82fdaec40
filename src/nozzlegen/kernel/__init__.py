"""
Geometry kernels for the nozzle pipeline.

Usage:
    from nozzlegen.kernel import CadQueryKernel

    kernel = CadQueryKernel()
"""

from .base import DEFAULT_TOLERANCE, PLANE, REVOLVED_KINDS, ChamferResult, GeometryKernel
from .occ import CadQueryKernel

__all__ = [
    "CadQueryKernel",
    "ChamferResult",
    "DEFAULT_TOLERANCE",
    "GeometryKernel",
    "PLANE",
    "REVOLVED_KINDS",
]
