"""
nozzlegen - pressure vessel nozzle geometry with CadQuery.

Builds the shell, neck, reinforcement pad and weld solids of a nozzle
attachment from a small set of case parameters.

Usage:
    from nozzlegen import Case, NozzlePipeline, case_parameters

    result = NozzlePipeline().run(case_parameters(Case.BASE_CASE))
    result.export("base_case.step")
"""

__version__ = "0.1.0"

from .cases import Case, case_parameters, make_cylindrical_shell, make_spherical_shell
from .config import CaseConfig, ShellConfig
from .errors import (
    AmbiguousBooleanError,
    DegenerateIntersectionError,
    InfeasibleWeldWarning,
    InvalidCaseError,
    NozzleError,
    TopologyDefectWarning,
)
from .kernel import CadQueryKernel, GeometryKernel
from .nozzle import NozzlePipeline, NozzleResult
from .parameters import CaseParameters, HillsidePlane, NormalConvention, PadOrientation
from .planes import DerivedPlane, derive_attachment_planes

__all__ = [
    # Pipeline
    "NozzlePipeline",
    "NozzleResult",
    # Parameters
    "CaseParameters",
    "HillsidePlane",
    "NormalConvention",
    "PadOrientation",
    "DerivedPlane",
    "derive_attachment_planes",
    # Presets and config
    "Case",
    "case_parameters",
    "make_cylindrical_shell",
    "make_spherical_shell",
    "CaseConfig",
    "ShellConfig",
    # Kernels
    "GeometryKernel",
    "CadQueryKernel",
    # Errors
    "NozzleError",
    "InvalidCaseError",
    "DegenerateIntersectionError",
    "AmbiguousBooleanError",
    "TopologyDefectWarning",
    "InfeasibleWeldWarning",
]
