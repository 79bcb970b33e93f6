import jax.numpy as jnp
import numpy as np
import pytest
from unittest import TestCase

from jabl.closures import ConstantClosure, YSUClosure, closure_from_config
from jabl.errors import InvalidConfig, InvalidInput
from jabl.model import Model, RunStatus, run
from jabl.params import SimulationConfig


class TestReferenceRun(TestCase):
    """129 points up to 3 km, constant eddy viscosity of 0.1 m²/s, 10,000 steps."""

    @classmethod
    def setUpClass(cls):
        cls.config = SimulationConfig.default()
        cls.result = run(cls.config, ConstantClosure(0.1))

    def test_boundary_values_are_exact(self):
        self.assertEqual(float(self.result.u[-1]), 8.0)
        self.assertEqual(float(self.result.u[0]), 0.0)
        self.assertEqual(float(self.result.v[0]), 0.0)
        self.assertEqual(float(self.result.v[-1]), 0.0)
        self.assertEqual(float(self.result.theta[0]), 289.5)
        self.assertEqual(float(self.result.theta[-1]), 289.5)

    def test_shapes_and_status(self):
        for field in (self.result.z, self.result.u, self.result.v, self.result.theta, self.result.nu_t):
            self.assertEqual(field.shape, (129,))
        self.assertIs(self.result.status, RunStatus.FINISHED)
        self.assertEqual(self.result.steps_taken, 10000)
        self.assertAlmostEqual(self.result.dt, 0.1 * (3000.0 / 128)**2 / 0.1)
        self.assertFalse(self.result.state.any_nan())

    def test_rotation_turns_the_wind_near_the_surface(self):
        self.assertGreater(float(jnp.max(self.result.v)), 0.0)
        np.testing.assert_allclose(self.result.u[-10:], 8.0, atol=0.1)


def test_profile_is_monotonic_without_rotation():
    config = SimulationConfig.default(coriolis_parameter_override=0.0)
    result = run(config, ConstantClosure(0.1))
    assert float(result.u[0]) == 0.0
    assert float(result.u[-1]) == 8.0
    assert jnp.all(jnp.diff(result.u) >= 0.0)
    np.testing.assert_array_equal(result.v, 0.0)
    np.testing.assert_array_equal(result.theta, 289.5)


def test_closure_change_keeps_grid(short_config):
    params = dict(value=0.1, length_scale=40.0, boundary_layer_height=900.0)
    results = {tag: run(short_config, closure_from_config(tag, **params)) for tag in ("constant", "mixing-length", "ysu")}
    reference = results["constant"]
    for tag, result in results.items():
        np.testing.assert_array_equal(result.z, reference.z)
        for name in ("u", "v", "theta", "nu_t", "alpha_t"):
            assert getattr(result, name).shape == (short_config.nz,)
    assert not jnp.allclose(results["constant"].nu_t, results["ysu"].nu_t)
    assert not jnp.allclose(results["mixing-length"].nu_t, results["ysu"].nu_t)


class TestModelLifecycle(TestCase):

    def setUp(self):
        self.config = SimulationConfig.default(nstep=300)

    def test_status_transitions(self):
        model = Model(self.config, YSUClosure(900.0), chunk_size=100)
        self.assertIs(model.status, RunStatus.INITIALIZED)
        result = model.run()
        self.assertIs(model.status, RunStatus.FINISHED)
        self.assertEqual(model.steps_taken, 300)
        self.assertIs(result.closure, model.closure)

    def test_chunking_does_not_change_the_result(self):
        closure = YSUClosure(900.0)
        whole = Model(self.config, closure, chunk_size=1000).run()
        chunked = Model(self.config, closure, chunk_size=7).run(should_stop=lambda: False)
        np.testing.assert_allclose(chunked.u, whole.u, rtol=1e-12)
        np.testing.assert_allclose(chunked.v, whole.v, rtol=1e-12, atol=1e-14)
        np.testing.assert_allclose(chunked.theta, whole.theta, rtol=1e-12)

    def test_cancellation(self):
        model = Model(self.config, YSUClosure(900.0), chunk_size=100)
        result = model.run(should_stop=lambda: True)
        self.assertIs(result.status, RunStatus.CANCELLED)
        self.assertIs(model.status, RunStatus.CANCELLED)
        self.assertEqual(result.steps_taken, 100)
        self.assertEqual(float(result.u[0]), 0.0)
        self.assertEqual(float(result.u[-1]), 8.0)

    def test_rerun_starts_from_initial_state(self):
        model = Model(self.config, ConstantClosure(0.5))
        first = model.run()
        second = model.run()
        np.testing.assert_array_equal(first.u, second.u)

    def test_zero_steps_returns_initial_state_with_boundaries(self):
        result = Model(SimulationConfig.default(nstep=0), ConstantClosure(0.1)).run()
        self.assertIs(result.status, RunStatus.FINISHED)
        self.assertEqual(result.steps_taken, 0)
        self.assertEqual(float(result.u[0]), 0.0)
        self.assertTrue(jnp.all(result.u[1:] == 8.0))

    def test_invalid_setup_raises_before_stepping(self):
        with self.assertRaises(InvalidInput):
            Model(SimulationConfig(nz=2), ConstantClosure(0.1))
        with self.assertRaises(InvalidConfig):
            Model(self.config, ConstantClosure(0.1), chunk_size=0)


class TestUnroll(TestCase):

    def setUp(self):
        self.config = SimulationConfig.default(nstep=400)
        self.closure = closure_from_config("mixing-length", length_scale=40.0)

    def test_snapshots(self):
        result, predictions = Model(self.config, self.closure).unroll(save_interval=100)
        self.assertEqual(predictions.state.u.shape, (4, self.config.nz))
        np.testing.assert_array_equal(predictions.steps, [100, 200, 300, 400])
        np.testing.assert_allclose(predictions.state.u[-1], result.u, rtol=1e-12)
        self.assertTrue(jnp.all(predictions.state.u[:, 0] == 0.0))

    def test_matches_run(self):
        result, _ = Model(self.config, self.closure).unroll(save_interval=200)
        reference = Model(self.config, self.closure).run()
        np.testing.assert_allclose(result.u, reference.u, rtol=1e-12)
        np.testing.assert_allclose(result.v, reference.v, rtol=1e-12, atol=1e-14)

    def test_save_interval_must_divide_nstep(self):
        with self.assertRaises(InvalidConfig):
            Model(self.config, self.closure).unroll(save_interval=300)
        with self.assertRaises(InvalidConfig):
            Model(self.config, self.closure).unroll(save_interval=0)
