import jax.numpy as jnp
import numpy as np
import pytest
from unittest import TestCase

from jabl.closures import DiffusivityProfile, ConstantClosure, eddy_viscosity
from jabl.errors import DegenerateInput
from jabl.grid import Grid
from jabl.params import SimulationConfig
from jabl.state import FieldState
from jabl.time_integration import rk4_step, stable_time_step


class TestRK4(TestCase):

    def setUp(self):
        self.grid = Grid.from_domain(17, 1000.0)
        self.shape = (17,)
        self.still = DiffusivityProfile(nu_t=jnp.zeros(self.shape), alpha_t=jnp.zeros(self.shape))

    def test_fixed_point_without_forcing(self):
        config = SimulationConfig.default(nz=17, domain_top=1000.0, coriolis_parameter_override=0.0)
        state = FieldState(u=jnp.full(self.shape, 4.0), v=jnp.full(self.shape, -1.0), theta=jnp.full(self.shape, 290.0))
        new_state = rk4_step(state, 60.0, self.still, self.grid, config)
        for before, after in zip(state.astuple(), new_state.astuple()):
            np.testing.assert_array_equal(before, after)

    def test_inertial_oscillation_matches_analytic_solution(self):
        # without mixing, (u - u_G, v - v_G) rotates clockwise at the Coriolis frequency
        config = SimulationConfig.default(nz=17, domain_top=1000.0, coriolis_parameter_override=1e-4)
        f, dt, nsteps = 1e-4, 100.0, 100
        a0, b0 = -3.0, 1.5
        state = FieldState(
            u=jnp.full(self.shape, config.u_geostrophic + a0),
            v=jnp.full(self.shape, config.v_geostrophic + b0),
            theta=jnp.full(self.shape, 289.5),
        )
        for _ in range(nsteps):
            state = rk4_step(state, dt, self.still, self.grid, config)

        t = dt * nsteps
        u_exact = config.u_geostrophic + a0 * np.cos(f * t) + b0 * np.sin(f * t)
        v_exact = config.v_geostrophic + b0 * np.cos(f * t) - a0 * np.sin(f * t)
        np.testing.assert_allclose(state.u, u_exact, rtol=1e-8)
        np.testing.assert_allclose(state.v, v_exact, rtol=1e-8)
        np.testing.assert_array_equal(state.theta, 289.5)

    def test_diffusion_smooths_a_spike(self):
        config = SimulationConfig.default(nz=17, domain_top=1000.0, coriolis_parameter_override=0.0)
        diffusivity = eddy_viscosity(ConstantClosure(1.0), self.grid, config.prandtl_number)
        theta = jnp.full(self.shape, 289.5).at[8].add(1.0)
        state = FieldState(u=jnp.full(self.shape, 8.0), v=jnp.zeros(self.shape), theta=theta)
        dt = stable_time_step(self.grid.dz, diffusivity.nu_t)
        new_state = rk4_step(state, dt, diffusivity, self.grid, config)
        self.assertLess(float(new_state.theta[8]), float(theta[8]))
        self.assertGreater(float(new_state.theta[7]), 289.5)
        self.assertGreater(float(new_state.theta[9]), 289.5)


def test_stable_time_step():
    grid = Grid.from_domain(129, 3000.0)
    dt = stable_time_step(grid.dz, jnp.full((129,), 0.1))
    assert dt == pytest.approx(0.1 * (3000.0 / 128)**2 / 0.1)


@pytest.mark.parametrize("nu_t", [jnp.zeros(5), -jnp.ones(5), jnp.array([])])
def test_stable_time_step_degenerate(nu_t):
    with pytest.raises(DegenerateInput):
        stable_time_step(10.0, nu_t)
