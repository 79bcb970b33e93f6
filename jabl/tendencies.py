"""
Right-hand side of the column equations.

    ∂u/∂t = f (v - v_G) - ∂(u'w')/∂z
    ∂v/∂t = f (u_G - u) - ∂(v'w')/∂z
    ∂θ/∂t = - ∂(w'θ')/∂z

with down-gradient fluxes u'w' = -ν_t ∂u/∂z, v'w' = -ν_t ∂v/∂z and
w'θ' = -α_t ∂θ/∂z. The flux divergence is expanded with the product rule,
∂(-K ∂φ/∂z)/∂z = -(∂K/∂z)(∂φ/∂z) - K ∂²φ/∂z², instead of differencing the
flux a second time.
"""

from functools import partial

import jax
import jax.numpy as jnp

from jabl.closures import DiffusivityProfile
from jabl.derivatives import first_derivative, second_derivative
from jabl.grid import Grid
from jabl.params import SimulationConfig
from jabl.state import FieldState


@jax.jit
def flux_divergence(z: jnp.ndarray, field: jnp.ndarray, diffusivity: jnp.ndarray) -> jnp.ndarray:
    """Vertical divergence of the down-gradient flux -K ∂φ/∂z."""
    return (
        - first_derivative(z, diffusivity) * first_derivative(z, field)
        - diffusivity * second_derivative(z, field)
    )


@partial(jax.jit, static_argnames=("config",))
def get_tendencies(
    state: FieldState,
    diffusivity: DiffusivityProfile,
    grid: Grid,
    config: SimulationConfig
) -> FieldState:
    """
    Compute tendencies of the prognostic fields.

    Args:
        state: Current u, v and θ
        diffusivity: ν_t and α_t, constant during the run
        grid: Vertical grid
        config: Run configuration (geostrophic wind and Coriolis parameter)

    Returns:
        FieldState holding ∂u/∂t, ∂v/∂t and ∂θ/∂t
    """
    z = grid.z
    f = config.coriolis_parameter

    duw_dz = flux_divergence(z, state.u, diffusivity.nu_t)
    dvw_dz = flux_divergence(z, state.v, diffusivity.nu_t)
    dwtheta_dz = flux_divergence(z, state.theta, diffusivity.alpha_t)

    du_dt = f * (state.v - config.v_geostrophic) - duw_dz
    dv_dt = f * (config.u_geostrophic - state.u) - dvw_dz
    dtheta_dt = - dwtheta_dz

    return FieldState(u=du_dt, v=dv_dt, theta=dtheta_dt)
