"""
Quantities derived from the final profiles for plotting: wind speed and
direction, turbulent fluxes and the vertical momentum stress.
"""

from typing import Tuple

import jax
import jax.numpy as jnp

from jabl.derivatives import first_derivative


@jax.jit
def wind_speed(u: jnp.ndarray, v: jnp.ndarray) -> jnp.ndarray:
    """Horizontal wind speed [m/s]"""
    return jnp.sqrt(u**2 + v**2)


@jax.jit
def wind_direction(u: jnp.ndarray, v: jnp.ndarray) -> jnp.ndarray:
    """Angle of the wind vector from the x-axis [degrees], in (-180, 180]"""
    return jnp.degrees(jnp.arctan2(v, u))


@jax.jit
def momentum_fluxes(
    z: jnp.ndarray,
    u: jnp.ndarray,
    v: jnp.ndarray,
    nu_t: jnp.ndarray
) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """
    Down-gradient turbulent momentum fluxes.

    Args:
        z: Grid heights [m] (nz,)
        u: Wind, x-component [m/s] (nz,)
        v: Wind, y-component [m/s] (nz,)
        nu_t: Eddy viscosity [m²/s] (nz,)

    Returns:
        Tuple of u'w' and v'w' [m²/s²] (nz,)
    """
    uw = - nu_t * first_derivative(z, u)
    vw = - nu_t * first_derivative(z, v)
    return uw, vw


@jax.jit
def vertical_momentum_stress(
    z: jnp.ndarray,
    u: jnp.ndarray,
    v: jnp.ndarray,
    nu_t: jnp.ndarray
) -> jnp.ndarray:
    """Magnitude of the kinematic momentum stress τ/ρ = sqrt(u'w'² + v'w'²) [m²/s²]"""
    uw, vw = momentum_fluxes(z, u, v, nu_t)
    return jnp.sqrt(uw**2 + vw**2)


@jax.jit
def heat_flux(z: jnp.ndarray, theta: jnp.ndarray, alpha_t: jnp.ndarray) -> jnp.ndarray:
    """Kinematic heat flux w'θ' = -α_t ∂θ/∂z [K m/s]"""
    return - alpha_t * first_derivative(z, theta)
