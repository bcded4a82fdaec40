"""
YAML configuration for nozzle cases.

A case file either describes a case completely or starts from a preset and
overrides some of its values. Angles are in radians.

Example:
    preset: base_case
    beta: 1.4708
    is_pad_offset: true

    # or, without a preset
    shell:
      kind: cylinder
      radius: 20.0
      thickness: 1.0
      height: 60.0
    reference_point: [20.0, 0.0, 30.0]
    theta: 0.0
    ...
"""

from dataclasses import MISSING, dataclass, fields
from pathlib import Path
from typing import Any, Literal

import yaml

from .cases import case_parameters, make_cylindrical_shell, make_spherical_shell
from .errors import InvalidCaseError
from .parameters import CaseParameters, HillsidePlane, NormalConvention, PadOrientation


def _to_tuple3(value: list | tuple) -> tuple[float, float, float]:
    """Convert a list or tuple to a 3-element float tuple."""
    return (float(value[0]), float(value[1]), float(value[2]))


@dataclass
class ShellConfig:
    """
    Shell solid to attach the nozzle to.

    Attributes:
        kind: "cylinder" (open ring standing on XY) or "sphere" (hemispherical head)
        radius: Inner radius
        thickness: Wall thickness
        height: Cylinder height (ignored for spheres)
    """

    kind: Literal["cylinder", "sphere"]
    radius: float
    thickness: float
    height: float | None = None

    def build(self) -> Any:
        if self.kind == "cylinder":
            if self.height is None:
                raise InvalidCaseError("Cylindrical shell needs a height")
            return make_cylindrical_shell(self.radius, self.thickness, self.height)
        if self.kind == "sphere":
            return make_spherical_shell(self.radius, self.thickness)
        raise InvalidCaseError(f"Unknown shell kind: {self.kind}")

    def _to_dict(self) -> dict[str, Any]:
        result = {"kind": self.kind, "radius": self.radius, "thickness": self.thickness}
        if self.height is not None:
            result["height"] = self.height
        return result


@dataclass
class CaseConfig:
    """
    Case description as read from YAML.

    Every field except preset and shell mirrors the CaseParameters field of
    the same name. Unset fields come from the preset.
    """

    preset: str | None = None
    shell: ShellConfig | None = None
    reference_point: tuple[float, float, float] | None = None
    shell_thickness: float | None = None
    theta: float | None = None
    beta: float | None = None
    hillside: float | None = None
    hillside_plane: str | None = None
    external_length: float | None = None
    internal_length: float | None = None
    neck_radius: float | None = None
    neck_thickness: float | None = None
    pad_radius: float | None = None
    pad_thickness: float | None = None
    weld_length: float | None = None
    is_pad_offset: bool | None = None
    add_fillets: bool | None = None
    make_solid_fillets: bool | None = None
    can_clean: bool | None = None
    normal_convention: str | None = None
    pad_orientation: str | None = None

    def __post_init__(self):
        # Convert lists/dicts if needed (from YAML loading)
        if isinstance(self.reference_point, list):
            self.reference_point = _to_tuple3(self.reference_point)
        if isinstance(self.shell, dict):
            self.shell = ShellConfig(**self.shell)

    def overrides(self) -> dict[str, Any]:
        """CaseParameters fields set in this config."""
        skip = {"preset", "shell"}
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in skip and getattr(self, f.name) is not None}

    def to_parameters(self) -> CaseParameters:
        """
        Build CaseParameters from the preset and overrides.

        Raises:
            InvalidCaseError: If the preset is unknown or required values are missing
        """
        values = self.overrides()
        if self.shell is not None:
            values["shell"] = self.shell.build()
            values.setdefault("shell_thickness", self.shell.thickness)

        if self.preset is not None:
            params = case_parameters(self.preset)
            for name, value in values.items():
                setattr(params, name, value)
            params.__post_init__()
            return params

        required = [
            f.name for f in fields(CaseParameters)
            if f.default is MISSING and f.default_factory is MISSING and f.name not in values
        ]
        if required:
            raise InvalidCaseError(f"Case config is missing: {', '.join(required)}")
        return CaseParameters(**values)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "CaseConfig":
        """Load a case configuration from a YAML file."""
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, yaml_path: str | Path) -> None:
        """Save the case configuration to a YAML file."""
        data = self._to_dict()
        with open(yaml_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def _to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for YAML serialization."""
        result: dict[str, Any] = {}
        if self.preset is not None:
            result["preset"] = self.preset
        if self.shell is not None:
            result["shell"] = self.shell._to_dict()
        for name, value in self.overrides().items():
            result[name] = list(value) if isinstance(value, tuple) else value
        return result

    @classmethod
    def from_parameters(cls, params: CaseParameters, shell: ShellConfig | None = None) -> "CaseConfig":
        """Config describing existing parameters (the shell solid itself is not serializable)."""
        values = {}
        for f in fields(CaseParameters):
            if f.name == "shell":
                continue
            value = getattr(params, f.name)
            if isinstance(value, HillsidePlane):
                value = value.name
            elif isinstance(value, (NormalConvention, PadOrientation)):
                value = value.value
            elif isinstance(value, tuple):
                value = tuple(float(v) for v in value)
            values[f.name] = value
        return cls(shell=shell, **values)
