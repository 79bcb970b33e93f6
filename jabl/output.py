"""
Conversion of model results to xarray for analysis, plotting and NetCDF output.
"""

import dataclasses
from pathlib import Path

import jax
import numpy as np
import pandas as pd
import xarray as xr

from jabl.diagnostics import wind_speed, wind_direction, momentum_fluxes, vertical_momentum_stress, heat_flux
from jabl.model import Predictions, SimulationResult

UNITS_TABLE = Path(__file__).parent / "units_table.csv"


def _add_units(ds: xr.Dataset) -> xr.Dataset:
    units_df = pd.read_csv(UNITS_TABLE)
    for var, unit, desc in zip(units_df["Variable"], units_df["Units"], units_df["Description"]):
        if var in ds.variables:
            ds[var].attrs["units"] = unit
            ds[var].attrs["description"] = desc
    return ds


def result_to_xarray(result: SimulationResult) -> xr.Dataset:
    """Converts the final profiles of a run, plus derived diagnostics, to an xarray.Dataset.

    Args:
        result:
            The output of `Model.run` or `Model.unroll`.

    Returns:
        An `xarray.Dataset` on the `z` coordinate, with units and descriptions
        attached and the run configuration stored as global attributes.
    """
    uw, vw = momentum_fluxes(result.z, result.u, result.v, result.nu_t)
    fields = {
        "u": result.u,
        "v": result.v,
        "theta": result.theta,
        "nu_t": result.nu_t,
        "alpha_t": result.alpha_t,
        "wind_speed": wind_speed(result.u, result.v),
        "wind_direction": wind_direction(result.u, result.v),
        "uw": uw,
        "vw": vw,
        "momentum_stress": vertical_momentum_stress(result.z, result.u, result.v, result.nu_t),
        "heat_flux": heat_flux(result.z, result.theta, result.alpha_t),
    }
    fields = jax.device_get(fields)
    ds = xr.Dataset(
        {name: ("z", np.asarray(values)) for name, values in fields.items()},
        coords={"z": np.asarray(jax.device_get(result.z))},
    )

    config = {
        key: value for key, value in dataclasses.asdict(result.config).items() if value is not None
    }
    ds.attrs.update(config)
    ds.attrs["coriolis_parameter"] = result.config.coriolis_parameter
    ds.attrs["closure"] = result.closure.kind.value
    for key, value in dataclasses.asdict(result.closure).items():
        ds.attrs[f"closure_{key}"] = value
    ds.attrs["dt"] = result.dt
    ds.attrs["steps_taken"] = result.steps_taken
    ds.attrs["status"] = result.status.value

    return _add_units(ds)


def predictions_to_xarray(predictions: Predictions, result: SimulationResult) -> xr.Dataset:
    """Converts saved snapshots to an xarray.Dataset with `step` and `z` dimensions."""
    state = jax.device_get(predictions.state)
    ds = xr.Dataset(
        {name: (("step", "z"), np.asarray(values)) for name, values in state.asdict().items()},
        coords={
            "step": np.asarray(jax.device_get(predictions.steps)),
            "z": np.asarray(jax.device_get(result.z)),
        },
    )
    ds["time"] = ("step", ds["step"].values * result.dt)
    ds["time"].attrs["units"] = "s"
    return _add_units(ds)
