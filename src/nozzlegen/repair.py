"""
Best-effort topology repair of built solids.

Some extrusions and Boolean results come back from the kernel with small
topological defects. When a case allows cleaning, each built solid gets
exactly one repair attempt; a solid the kernel cannot (or will not) fix is
used as is and reported with a TopologyDefectWarning.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import TopologyDefectWarning
from .kernel.base import GeometryKernel


class RepairStatus(Enum):
    SKIPPED = "skipped"  # cleaning disabled for the case
    VALID = "valid"  # nothing to repair
    REPAIRED = "repaired"
    DECLINED = "declined"  # kernel could not fix it, defective solid kept


@dataclass
class RepairOutcome:
    solid: Any
    status: RepairStatus


def repair_solid(kernel: GeometryKernel, solid: Any, enabled: bool, label: str = "solid") -> RepairOutcome:
    """
    Run the single repair pass on a solid.

    Args:
        kernel: Geometry kernel
        solid: Solid to check
        enabled: The case's can_clean flag
        label: Name used in the warning message

    Returns:
        RepairOutcome with the solid to continue with
    """
    if not enabled:
        return RepairOutcome(solid, RepairStatus.SKIPPED)

    repaired = kernel.repair_topology(solid)
    if repaired is not None:
        return RepairOutcome(repaired, RepairStatus.REPAIRED)

    if kernel.is_valid(solid):
        return RepairOutcome(solid, RepairStatus.VALID)

    warnings.warn(
        f"Topology repair declined for {label}; using the defective solid as is",
        TopologyDefectWarning,
        stacklevel=2,
    )
    return RepairOutcome(solid, RepairStatus.DECLINED)
