"""
Dirichlet boundary conditions of the column: no-slip surface, geostrophic
wind aloft and reference potential temperature at both ends.
"""

from functools import partial

import jax

from jabl.params import SimulationConfig
from jabl.state import FieldState


@partial(jax.jit, static_argnames=("config",))
def apply_boundary_conditions(state: FieldState, config: SimulationConfig) -> FieldState:
    """Return ``state`` with its surface and top values overwritten. Idempotent."""
    u = state.u.at[0].set(0.0).at[-1].set(config.u_geostrophic)
    v = state.v.at[0].set(0.0).at[-1].set(config.v_geostrophic)
    theta = state.theta.at[0].set(config.theta_ref).at[-1].set(config.theta_ref)
    return state.replace(u=u, v=v, theta=theta)
