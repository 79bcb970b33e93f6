"""
Finite-difference derivatives on the vertical grid.

Interior points use centred differences; the end points use one-sided
differences (first derivative) or the adjacent interior stencil (second
derivative), so the boundary values are only first-order accurate.
"""

import jax
import jax.numpy as jnp

from jabl.errors import InvalidInput


def _check_field(z: jnp.ndarray, f: jnp.ndarray) -> None:
    # shapes are static, so this also runs while tracing under jit
    if jnp.ndim(z) != 1 or jnp.ndim(f) != 1:
        raise InvalidInput(f"Expected 1-D grid and field, got shapes {jnp.shape(z)} and {jnp.shape(f)}")
    if z.shape != f.shape:
        raise InvalidInput(f"Field of length {f.shape[0]} does not match grid of length {z.shape[0]}")
    if z.shape[0] < 3:
        raise InvalidInput(f"At least 3 grid points are needed for the stencils, got {z.shape[0]}")


@jax.jit
def _first_derivative(z: jnp.ndarray, f: jnp.ndarray) -> jnp.ndarray:
    bottom = (f[1] - f[0]) / (z[1] - z[0])
    interior = (f[2:] - f[:-2]) / (z[2:] - z[:-2])
    top = (f[-1] - f[-2]) / (z[-1] - z[-2])

    return jnp.concatenate([bottom[None], interior, top[None]])


@jax.jit
def _second_derivative(z: jnp.ndarray, f: jnp.ndarray) -> jnp.ndarray:
    bottom = (f[2] - 2.0 * f[1] + f[0]) / (z[1] - z[0])**2
    interior = (f[2:] - 2.0 * f[1:-1] + f[:-2]) / (z[1:-1] - z[:-2])**2
    top = (f[-3] - 2.0 * f[-2] + f[-1]) / (z[-1] - z[-2])**2

    return jnp.concatenate([bottom[None], interior, top[None]])


def first_derivative(z, f) -> jnp.ndarray:
    """
    Compute df/dz.

    Args:
        z: Grid heights [m] (nz,), any array-like
        f: Field sampled on the grid (nz,), any array-like

    Returns:
        df/dz (nz,)
    """
    z, f = jnp.asarray(z), jnp.asarray(f)
    _check_field(z, f)
    return _first_derivative(z, f)


def second_derivative(z, f) -> jnp.ndarray:
    """
    Compute d²f/dz².

    The interior stencil divides by the squared gap below each point; the
    boundary values are the 3-point stencil of the neighbouring interior point
    scaled by the squared end cell size.

    Args:
        z: Grid heights [m] (nz,), any array-like
        f: Field sampled on the grid (nz,), any array-like

    Returns:
        d²f/dz² (nz,)
    """
    z, f = jnp.asarray(z), jnp.asarray(f)
    _check_field(z, f)
    return _second_derivative(z, f)
