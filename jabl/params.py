"""
Run-wide configuration of the single-column model.

SimulationConfig is a frozen dataclass rather than a tree_math struct: every
field is a Python scalar fixed for the whole run, so it is hashable and is
passed to jitted functions as a static argument.
"""

import dataclasses
import math
from typing import Any, Mapping, Optional

from jabl.constants import physical_constants
from jabl.errors import InvalidConfig, InvalidInput


@dataclasses.dataclass(frozen=True)
class SimulationConfig:
    """Scalars describing one boundary layer run.

    Attributes:
        u_geostrophic: Geostrophic wind, x-component (m/s). Top boundary value of u.
        v_geostrophic: Geostrophic wind, y-component (m/s). Top boundary value of v.
        omega: Angular speed of the Earth (rad/s).
        latitude: Latitude of the column (degrees).
        theta_ref: Reference potential temperature (K), imposed at both boundaries.
        prandtl_number: Turbulent Prandtl number relating heat and momentum diffusivity.
        nstep: Number of time steps.
        nz: Number of grid points.
        domain_top: Height of the top of the domain (m).
        coriolis_parameter_override: If set, used instead of 2 Ω sin(latitude).
    """
    u_geostrophic: float = 8.0
    v_geostrophic: float = 0.0
    omega: float = physical_constants.omega
    latitude: float = 57.05
    theta_ref: float = physical_constants.theta_ref
    prandtl_number: float = physical_constants.prandtl_number
    nstep: int = 10000
    nz: int = 129
    domain_top: float = 3000.0
    coriolis_parameter_override: Optional[float] = None

    @classmethod
    def default(cls, **kwargs) -> 'SimulationConfig':
        """Return the default configuration, with optional field overrides"""
        return cls.from_dict(kwargs)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'SimulationConfig':
        """Build a validated config from a mapping, e.g. the ``model`` node of a Hydra config."""
        names = {field.name for field in dataclasses.fields(cls)}
        unknown = sorted(set(values) - names)
        if unknown:
            raise InvalidConfig(f"Unknown configuration keys: {unknown}. Must be among: {sorted(names)}")

        kwargs = {}
        for key, value in values.items():
            if key == "coriolis_parameter_override" and value is None:
                kwargs[key] = None
                continue
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise InvalidConfig(f"Invalid value for {key}: {value!r}. Must be a number.") from None
            if key in ("nstep", "nz"):
                if not number.is_integer():
                    raise InvalidConfig(f"Invalid value for {key}: {value!r}. Must be a whole number.")
                kwargs[key] = int(number)
            else:
                kwargs[key] = number
        config = cls(**kwargs)
        config.validate()
        return config

    @property
    def coriolis_parameter(self) -> float:
        """Coriolis parameter f = 2 Ω sin(latitude) (1/s)"""
        if self.coriolis_parameter_override is not None:
            return self.coriolis_parameter_override
        return 2.0 * self.omega * math.sin(math.radians(self.latitude))

    def validate(self) -> None:
        """Raise if the settings cannot describe a run."""
        for name in ("u_geostrophic", "v_geostrophic", "omega", "latitude", "theta_ref", "domain_top"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidConfig(f"Invalid value for {name}: {getattr(self, name)}. Must be finite.")
        if self.coriolis_parameter_override is not None and not math.isfinite(self.coriolis_parameter_override):
            raise InvalidConfig(
                f"Invalid Coriolis parameter override: {self.coriolis_parameter_override}. Must be finite."
            )
        if self.nz < 3:
            raise InvalidInput(f"Invalid number of grid points: {self.nz}. Must be at least 3.")
        if not self.domain_top > 0.0:
            raise InvalidConfig(f"Invalid domain top: {self.domain_top}. Must be positive.")
        if self.nstep < 0:
            raise InvalidConfig(f"Invalid number of steps: {self.nstep}. Must be non-negative.")
        if not (math.isfinite(self.prandtl_number) and self.prandtl_number > 0.0):
            raise InvalidConfig(f"Invalid turbulent Prandtl number: {self.prandtl_number}. Must be positive.")
