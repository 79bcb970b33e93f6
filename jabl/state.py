"""
Prognostic state of the column.
"""

import jax.numpy as jnp
import tree_math
from jax import tree_util

from jabl.grid import Grid
from jabl.params import SimulationConfig


@tree_math.struct
class FieldState:
    u: jnp.ndarray       # Mean wind, x-component [m/s] (nz,)
    v: jnp.ndarray       # Mean wind, y-component [m/s] (nz,)
    theta: jnp.ndarray   # Potential temperature [K] (nz,)

    @classmethod
    def zeros(cls, shape, u=None, v=None, theta=None):
        return cls(
            u if u is not None else jnp.zeros(shape),
            v if v is not None else jnp.zeros(shape),
            theta if theta is not None else jnp.zeros(shape),
        )

    @classmethod
    def ones(cls, shape, u=None, v=None, theta=None):
        return cls(
            u if u is not None else jnp.ones(shape),
            v if v is not None else jnp.ones(shape),
            theta if theta is not None else jnp.ones(shape),
        )

    def isnan(self):
        return tree_util.tree_map(jnp.isnan, self)

    def any_nan(self) -> bool:
        return bool(any(jnp.any(leaf) for leaf in tree_util.tree_leaves(self.isnan())))


def initial_state(grid: Grid, config: SimulationConfig) -> FieldState:
    """Geostrophic wind and reference potential temperature at every height."""
    shape = (grid.nz,)
    return FieldState(
        u=config.u_geostrophic * jnp.ones(shape),
        v=config.v_geostrophic * jnp.ones(shape),
        theta=config.theta_ref * jnp.ones(shape),
    )
