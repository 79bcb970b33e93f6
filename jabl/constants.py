"""
Physical and closure constants for the boundary layer model.

Nothing in the model reads these directly: they only seed the default values of
SimulationConfig and of the closure parameter classes, so every run carries its
own copy.
"""

from typing import NamedTuple


class PhysicalConstants(NamedTuple):
    """Physical constants used as configuration defaults"""

    omega: float = 7.29e-5        # Angular speed of the Earth (rad/s)
    karman_const: float = 0.4     # von Kármán constant (dimensionless)

    # Reference state of the column
    theta_ref: float = 289.5      # Reference potential temperature (K)
    prandtl_number: float = 0.85  # Turbulent Prandtl number (dimensionless)

    @classmethod
    def default(cls) -> 'PhysicalConstants':
        """Return default physical constants"""
        return cls()


# Global instance of physical constants
physical_constants = PhysicalConstants.default()

# Friction velocities (m/s) assumed by the closures; arbitrary but fixed values
mixing_length_ustar = 0.5
ysu_ustar = 0.36

# Eddy viscosity (m²/s) assigned above the YSU boundary layer height. Keeps the
# diffusion terms non-degenerate in the free atmosphere.
ysu_nu_floor = 1e-5

# Fraction of the explicit diffusion limit used to size the time step
diffusion_safety_factor = 0.1
