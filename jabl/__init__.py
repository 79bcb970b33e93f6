"""
jabl: a single-column atmospheric boundary layer model written in JAX.

Two horizontal wind components and potential temperature are stepped forward
with a classical RK4 integrator, mixed vertically by an eddy diffusivity
taken from one of three closure models.
"""

from jabl.errors import InvalidInput, InvalidConfig, DegenerateInput
from jabl.params import SimulationConfig
from jabl.grid import Grid
from jabl.closures import (
    ClosureType,
    ConstantClosure,
    MixingLengthClosure,
    YSUClosure,
    DiffusivityProfile,
    closure_from_config,
    eddy_viscosity,
)
from jabl.state import FieldState
from jabl.model import Model, RunStatus, SimulationResult, Predictions, run

__version__ = "0.1.0"

__all__ = [
    "InvalidInput",
    "InvalidConfig",
    "DegenerateInput",
    "SimulationConfig",
    "Grid",
    "ClosureType",
    "ConstantClosure",
    "MixingLengthClosure",
    "YSUClosure",
    "DiffusivityProfile",
    "closure_from_config",
    "eddy_viscosity",
    "FieldState",
    "Model",
    "RunStatus",
    "SimulationResult",
    "Predictions",
    "run",
]
