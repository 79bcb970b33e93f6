"""
Vertical coordinate of the single column.
"""

import jax.numpy as jnp
import numpy as np
import tree_math

from jabl.errors import InvalidInput


@tree_math.struct
class Grid:
    """Heights of the grid points (m), ordered from the surface upwards."""
    z: jnp.ndarray

    @classmethod
    def from_domain(cls, nz: int, domain_top: float) -> 'Grid':
        """Uniform grid of ``nz`` points from 0 to ``domain_top``."""
        if nz < 3:
            raise InvalidInput(f"Invalid number of grid points: {nz}. Must be at least 3.")
        if not domain_top > 0.0:
            raise InvalidInput(f"Invalid domain top: {domain_top}. Must be positive.")
        return cls(jnp.linspace(0.0, domain_top, nz))

    @classmethod
    def from_heights(cls, z) -> 'Grid':
        """Grid from arbitrary heights, which must be strictly increasing."""
        z = np.asarray(z, dtype=float)
        if z.ndim != 1 or z.size < 3:
            raise InvalidInput(f"Grid must be 1-D with at least 3 points, got shape {z.shape}.")
        if np.any(np.diff(z) <= 0.0):
            raise InvalidInput("Grid heights must be strictly increasing.")
        return cls(jnp.asarray(z))

    @property
    def nz(self) -> int:
        return self.z.shape[0]

    @property
    def dz(self):
        """Size of the first grid cell (m)"""
        return self.z[1] - self.z[0]

    @property
    def domain_top(self):
        return self.z[-1]
