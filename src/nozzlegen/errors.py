"""
Error and warning types raised by the nozzle pipeline.

Fatal failures are exceptions and end the run. Recoverable problems with a
defined fallback (declined topology repair, a weld that cannot be closed)
are reported as warnings and the run continues.
"""


class NozzleError(Exception):
    """Base class for nozzle construction failures."""


class InvalidCaseError(NozzleError, ValueError):
    """Unknown case preset, or case parameters that cannot describe a nozzle."""


class DegenerateIntersectionError(NozzleError, RuntimeError):
    """Shell and neck surfaces produced no connected intersection loop."""


class AmbiguousBooleanError(NozzleError, RuntimeError):
    """A Boolean difference returned nothing while its inputs still intersect."""


class TopologyDefectWarning(UserWarning):
    """A solid failed validation and the repair pass did not fix it."""


class InfeasibleWeldWarning(UserWarning):
    """A weld junction could not be built; the weld is left out."""
