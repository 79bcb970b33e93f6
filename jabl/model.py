"""
Driver of the single-column boundary layer model.

A Model goes through INITIALIZED -> STEPPING -> FINISHED. Everything that can
fail (grid, closure, time step) is set up in the constructor, so an invalid
configuration raises before any stepping. Each iteration enforces the boundary
conditions and then takes one RK4 step. The loop runs for a fixed number of
steps: convergence towards a steady state is not checked.
"""

import dataclasses
import enum
import logging
from functools import partial
from typing import Callable, Optional, Tuple

import jax
import jax.numpy as jnp
import tree_math

from jabl.boundaries import apply_boundary_conditions
from jabl.closures import Closure, ConstantClosure, DiffusivityProfile, eddy_viscosity
from jabl.errors import InvalidConfig
from jabl.grid import Grid
from jabl.params import SimulationConfig
from jabl.state import FieldState, initial_state
from jabl.time_integration import rk4_step, stable_time_step

logger = logging.getLogger(__name__)


class RunStatus(enum.Enum):
    INITIALIZED = "initialized"
    STEPPING = "stepping"
    FINISHED = "finished"
    CANCELLED = "cancelled"


@tree_math.struct
class Predictions:
    """Snapshots of the prognostic fields saved during a run.

    Attributes:
        state: FieldState whose fields are stacked along a leading time axis (nsave, nz).
        steps: Number of steps completed at each snapshot (nsave,).
    """
    state: FieldState
    steps: jnp.ndarray


@dataclasses.dataclass(frozen=True)
class SimulationResult:
    """Final profiles of a run, handed to plotting or output code."""
    z: jnp.ndarray
    u: jnp.ndarray
    v: jnp.ndarray
    theta: jnp.ndarray
    nu_t: jnp.ndarray
    alpha_t: jnp.ndarray
    dt: float
    steps_taken: int
    status: RunStatus
    closure: Closure
    config: SimulationConfig

    @property
    def state(self) -> FieldState:
        return FieldState(u=self.u, v=self.v, theta=self.theta)


def _step(state: FieldState, dt, diffusivity: DiffusivityProfile, grid: Grid, config: SimulationConfig) -> FieldState:
    state = apply_boundary_conditions(state, config)
    return rk4_step(state, dt, diffusivity, grid, config)


@partial(jax.jit, static_argnames=("config",))
def integrate(
    state: FieldState,
    dt: float,
    diffusivity: DiffusivityProfile,
    grid: Grid,
    config: SimulationConfig,
    nsteps: int
) -> FieldState:
    """Take ``nsteps`` iterations of (boundary conditions, RK4 step)."""
    body = lambda _, s: _step(s, dt, diffusivity, grid, config)
    return jax.lax.fori_loop(0, nsteps, body, state)


@partial(jax.jit, static_argnames=("config", "outer_steps"))
def integrate_trajectory(
    state: FieldState,
    dt: float,
    diffusivity: DiffusivityProfile,
    grid: Grid,
    config: SimulationConfig,
    inner_steps: int,
    outer_steps: int
) -> Tuple[FieldState, FieldState]:
    """Run ``outer_steps`` chunks of ``inner_steps`` iterations, saving the state after each chunk."""
    def chunk(carry, _):
        carry = integrate(carry, dt, diffusivity, grid, config, inner_steps)
        return carry, apply_boundary_conditions(carry, config)

    return jax.lax.scan(chunk, state, None, length=outer_steps)


class Model:
    """
    Single-column model of the atmospheric boundary layer.

    Example:
        >>> from jabl import Model, SimulationConfig, closure_from_config
        >>> model = Model(SimulationConfig.default(nstep=2000), closure_from_config("ysu", boundary_layer_height=900.0))
        >>> result = model.run()
        >>> result.u.shape
        (129,)
    """

    def __init__(self, config: SimulationConfig = None, closure: Closure = None, chunk_size: int = 1000) -> None:
        """
        Set up the grid, diffusivity profile, time step and initial state.

        Args:
            config:
                Run configuration (default SimulationConfig.default())
            closure:
                Eddy viscosity closure (default constant 0.1 m²/s)
            chunk_size:
                Number of steps per compiled loop; a cancellation callback is
                polled between chunks
        """
        self.config = config if config is not None else SimulationConfig.default()
        self.config.validate()
        self.closure = closure if closure is not None else ConstantClosure(0.1)
        if chunk_size < 1:
            raise InvalidConfig(f"Invalid chunk size: {chunk_size}. Must be positive.")
        self.chunk_size = int(chunk_size)

        self.grid = Grid.from_domain(self.config.nz, self.config.domain_top)
        self.diffusivity = eddy_viscosity(self.closure, self.grid, self.config.prandtl_number)
        self.dt = stable_time_step(self.grid.dz, self.diffusivity.nu_t)
        self.initial_state = initial_state(self.grid, self.config)

        self.status = RunStatus.INITIALIZED
        self.steps_taken = 0

    def _start(self) -> None:
        self.status = RunStatus.STEPPING
        self.steps_taken = 0
        logger.info("Stepping %s closure for %d steps with dt=%.4g s",
                    self.closure.kind.value, self.config.nstep, self.dt)

    def _finish(self, state: FieldState, status: RunStatus) -> SimulationResult:
        # Dirichlet values hold exactly in what is handed back
        state = apply_boundary_conditions(state, self.config)
        self.status = status
        if status is RunStatus.FINISHED:
            logger.info("Run finished after %d steps; convergence is not verified", self.steps_taken)
        else:
            logger.warning("Run cancelled after %d of %d steps", self.steps_taken, self.config.nstep)

        return SimulationResult(
            z=self.grid.z,
            u=state.u,
            v=state.v,
            theta=state.theta,
            nu_t=self.diffusivity.nu_t,
            alpha_t=self.diffusivity.alpha_t,
            dt=self.dt,
            steps_taken=self.steps_taken,
            status=status,
            closure=self.closure,
            config=self.config,
        )

    def run(self, should_stop: Optional[Callable[[], bool]] = None) -> SimulationResult:
        """
        Integrate from the initial state for ``config.nstep`` steps.

        Args:
            should_stop:
                Optional callable polled between chunks of ``chunk_size`` steps.
                Returning True stops the run early with status CANCELLED.

        Returns:
            SimulationResult with the final profiles.
        """
        self._start()
        state = self.initial_state

        while self.steps_taken < self.config.nstep:
            nsteps = min(self.chunk_size, self.config.nstep - self.steps_taken)
            state = integrate(state, self.dt, self.diffusivity, self.grid, self.config, nsteps)
            self.steps_taken += nsteps

            if self.steps_taken < self.config.nstep and should_stop is not None and should_stop():
                return self._finish(state, RunStatus.CANCELLED)

        return self._finish(state, RunStatus.FINISHED)

    def unroll(self, save_interval: int) -> Tuple[SimulationResult, Predictions]:
        """
        Integrate for ``config.nstep`` steps, saving the fields every ``save_interval`` steps.

        Returns:
            A tuple of the final SimulationResult and the saved Predictions.
        """
        if save_interval < 1 or self.config.nstep % save_interval != 0:
            raise InvalidConfig(
                f"Invalid save interval: {save_interval}. Must be positive and divide nstep={self.config.nstep}."
            )
        outer_steps = self.config.nstep // save_interval

        self._start()
        state, snapshots = integrate_trajectory(
            self.initial_state, self.dt, self.diffusivity, self.grid, self.config,
            save_interval, outer_steps
        )
        self.steps_taken = self.config.nstep

        predictions = Predictions(state=snapshots, steps=save_interval * jnp.arange(1, outer_steps + 1))
        return self._finish(state, RunStatus.FINISHED), predictions


def run(config: SimulationConfig = None, closure: Closure = None) -> SimulationResult:
    """Build a Model and run it to completion."""
    return Model(config, closure).run()
