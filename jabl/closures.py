"""
Eddy viscosity closures.

Each closure maps grid heights to a momentum diffusivity profile ν_t. The scalar
diffusivity follows from the turbulent Prandtl number, α_t = ν_t / Pr_t. The
profile is computed once per run and held fixed while the column is stepped
forward (quasi-steady turbulence).

Three closures are available:
- constant: ν_t is a single value at every height
- mixing-length: ν_t = κ l_m u*, with l_m = κz / (1 + κz/λ)
- ysu: simplified YSU profile ν_t = κ u* z (1 - z/h)², floored above h
"""

import dataclasses
import enum
import math
from typing import Union

import jax
import jax.numpy as jnp
import tree_math

from jabl.constants import physical_constants, mixing_length_ustar, ysu_ustar, ysu_nu_floor
from jabl.errors import InvalidConfig
from jabl.grid import Grid


@tree_math.struct
class DiffusivityProfile:
    nu_t: jnp.ndarray      # Momentum diffusivity [m²/s] (nz,)
    alpha_t: jnp.ndarray   # Scalar (heat) diffusivity [m²/s] (nz,)


@jax.jit
def constant_closure(z: jnp.ndarray, value: float) -> jnp.ndarray:
    """Uniform eddy viscosity ``value`` at every height."""
    return jnp.full(jnp.shape(z), value, dtype=jnp.result_type(z, float))


@jax.jit
def mixing_length_closure(
    z: jnp.ndarray,
    length_scale: float,
    friction_velocity: float = mixing_length_ustar,
    von_karman: float = physical_constants.karman_const
) -> jnp.ndarray:
    """
    Mixing-length eddy viscosity.

    Args:
        z: Grid heights [m] (nz,)
        length_scale: Asymptotic mixing length λ [m]
        friction_velocity: u* [m/s]
        von_karman: von Kármán constant [-]

    Returns:
        Eddy viscosity [m²/s] (nz,)
    """
    mixing_length = (von_karman * z) / (1.0 + von_karman * z / length_scale)
    return von_karman * mixing_length * friction_velocity


@jax.jit
def ysu_closure(
    z: jnp.ndarray,
    boundary_layer_height: float,
    friction_velocity: float = ysu_ustar,
    von_karman: float = physical_constants.karman_const,
    floor: float = ysu_nu_floor
) -> jnp.ndarray:
    """
    Simplified YSU eddy viscosity, with the profile exponent fixed at 2.

    Args:
        z: Grid heights [m] (nz,)
        boundary_layer_height: Boundary layer height h [m]
        friction_velocity: u* [m/s]
        von_karman: von Kármán constant [-]
        floor: Eddy viscosity above h [m²/s]

    Returns:
        Eddy viscosity [m²/s] (nz,)
    """
    above = z > boundary_layer_height
    shape_factor = jnp.where(above, 0.0, 1.0 - z / boundary_layer_height)
    nu_t = von_karman * friction_velocity * z * shape_factor**2
    return jnp.where(above, floor, nu_t)


class ClosureType(str, enum.Enum):
    CONSTANT = "constant"
    MIXING_LENGTH = "mixing-length"
    YSU = "ysu"

    @classmethod
    def from_tag(cls, tag: Union[str, 'ClosureType']) -> 'ClosureType':
        if isinstance(tag, cls):
            return tag
        key = str(tag).strip().lower()
        key = _TAG_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidConfig(
                f"Unknown closure model: {tag!r}. Must be one of: {[member.value for member in cls]}"
            ) from None


_TAG_ALIASES = {
    "mixinglength": "mixing-length",
    "mixing_length": "mixing-length",
}


def _require_positive(name: str, value) -> float:
    if value is None:
        raise InvalidConfig(f"Missing closure parameter: {name}")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidConfig(f"Closure parameter {name} must be a number, got {value!r}") from None
    if not (math.isfinite(value) and value > 0.0):
        raise InvalidConfig(f"Closure parameter {name} must be positive, got {value}")
    return value


@dataclasses.dataclass(frozen=True)
class ConstantClosure:
    value: float

    kind = ClosureType.CONSTANT

    def __post_init__(self):
        object.__setattr__(self, "value", _require_positive("value", self.value))

    def __call__(self, z: jnp.ndarray) -> jnp.ndarray:
        return constant_closure(z, self.value)


@dataclasses.dataclass(frozen=True)
class MixingLengthClosure:
    length_scale: float
    friction_velocity: float = mixing_length_ustar
    von_karman: float = physical_constants.karman_const

    kind = ClosureType.MIXING_LENGTH

    def __post_init__(self):
        for name in ("length_scale", "friction_velocity", "von_karman"):
            object.__setattr__(self, name, _require_positive(name, getattr(self, name)))

    def __call__(self, z: jnp.ndarray) -> jnp.ndarray:
        return mixing_length_closure(z, self.length_scale, self.friction_velocity, self.von_karman)


@dataclasses.dataclass(frozen=True)
class YSUClosure:
    boundary_layer_height: float
    friction_velocity: float = ysu_ustar
    von_karman: float = physical_constants.karman_const
    floor: float = ysu_nu_floor

    kind = ClosureType.YSU

    def __post_init__(self):
        for name in ("boundary_layer_height", "friction_velocity", "von_karman", "floor"):
            object.__setattr__(self, name, _require_positive(name, getattr(self, name)))

    def __call__(self, z: jnp.ndarray) -> jnp.ndarray:
        return ysu_closure(z, self.boundary_layer_height, self.friction_velocity, self.von_karman, self.floor)


Closure = Union[ConstantClosure, MixingLengthClosure, YSUClosure]

# parameter that each closure cannot do without
_REQUIRED_PARAMETER = {
    ClosureType.CONSTANT: ("value", ConstantClosure),
    ClosureType.MIXING_LENGTH: ("length_scale", MixingLengthClosure),
    ClosureType.YSU: ("boundary_layer_height", YSUClosure),
}


def closure_from_config(tag: Union[str, ClosureType], **params) -> Closure:
    """
    Resolve a closure tag and its parameters into a closure instance.

    Parameters belonging to the other closures are ignored, so the full set of
    settings of a presentation layer can be passed through unchanged.

    Example:
        >>> closure_from_config("ysu", value=0.1, length_scale=40.0, boundary_layer_height=900.0)
        YSUClosure(boundary_layer_height=900.0, friction_velocity=0.36, von_karman=0.4, floor=1e-05)
    """
    kind = ClosureType.from_tag(tag)
    required, closure_cls = _REQUIRED_PARAMETER[kind]
    if params.get(required) is None:
        raise InvalidConfig(f"Closure model '{kind.value}' requires parameter '{required}'")

    field_names = {field.name for field in dataclasses.fields(closure_cls)}
    kwargs = {name: value for name, value in params.items() if name in field_names and value is not None}
    return closure_cls(**kwargs)


def eddy_viscosity(closure: Closure, grid: Grid, prandtl_number: float) -> DiffusivityProfile:
    """
    Momentum and scalar diffusivity profiles for a closure.

    Args:
        closure: Closure instance, see closure_from_config
        grid: Vertical grid
        prandtl_number: Turbulent Prandtl number Pr_t

    Returns:
        DiffusivityProfile with ν_t and α_t = ν_t / Pr_t
    """
    if not (math.isfinite(prandtl_number) and prandtl_number > 0.0):
        raise InvalidConfig(f"Invalid turbulent Prandtl number: {prandtl_number}. Must be positive.")
    nu_t = closure(grid.z)
    return DiffusivityProfile(nu_t=nu_t, alpha_t=nu_t / prandtl_number)
