"""
Classical fourth-order Runge-Kutta step and time step sizing.
"""

import math
from functools import partial

import jax
import jax.numpy as jnp

from jabl.closures import DiffusivityProfile
from jabl.constants import diffusion_safety_factor
from jabl.errors import DegenerateInput
from jabl.grid import Grid
from jabl.params import SimulationConfig
from jabl.state import FieldState
from jabl.tendencies import get_tendencies


@partial(jax.jit, static_argnames=("config",))
def rk4_step(
    state: FieldState,
    dt: float,
    diffusivity: DiffusivityProfile,
    grid: Grid,
    config: SimulationConfig
) -> FieldState:
    """
    Advance the state by one RK4 step of size ``dt``.

    The diffusivity is the same in all four stages.
    """
    tendencies = partial(get_tendencies, diffusivity=diffusivity, grid=grid, config=config)

    k1 = tendencies(state)
    k2 = tendencies(state + k1 * (0.5 * dt))
    k3 = tendencies(state + k2 * (0.5 * dt))
    k4 = tendencies(state + k3 * dt)

    return state + (k1 + 2.0 * k2 + 2.0 * k3 + k4) * (dt / 6.0)


def stable_time_step(dz: float, nu_t: jnp.ndarray, safety_factor: float = diffusion_safety_factor) -> float:
    """
    Time step 0.1 Δz² / max(ν_t) for explicit diffusion.

    A heuristic rather than a strict stability bound. Evaluated eagerly, once
    per run, before any stepping.

    Raises:
        DegenerateInput: if the profile is empty or its maximum is not positive
    """
    if jnp.size(nu_t) == 0:
        raise DegenerateInput("Cannot size the time step from an empty diffusivity profile.")
    nu_max = float(jnp.max(nu_t))
    if not (math.isfinite(nu_max) and nu_max > 0.0):
        raise DegenerateInput(f"Maximum eddy viscosity must be positive to size the time step, got {nu_max}.")
    return safety_factor * float(dz)**2 / nu_max
