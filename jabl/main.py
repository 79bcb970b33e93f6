import hydra
import logging
from omegaconf import DictConfig, OmegaConf
from hydra.core.hydra_config import HydraConfig
from pathlib import Path
from jabl.closures import closure_from_config
from jabl.model import Model
from jabl.output import result_to_xarray, predictions_to_xarray
from jabl.params import SimulationConfig

logger = logging.getLogger(__name__)


def build_model(cfg: DictConfig) -> Model:
    """Create a Model from the `model`, `closure` and `run` nodes of a config."""
    config = SimulationConfig.from_dict(OmegaConf.to_container(cfg.model, resolve=True))
    closure_params = OmegaConf.to_container(cfg.closure, resolve=True)
    closure = closure_from_config(closure_params.pop("name"), **closure_params)
    return Model(config, closure, chunk_size=cfg.run.chunk_size)


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig):
    """
    Runs the single-column boundary layer model with configurable parameters
    and writes the final profiles to NetCDF.

    Example:
        python -m jabl.main
        python -m jabl.main closure.name=ysu closure.boundary_layer_height=850
        python -m jabl.main -m closure.name=constant,mixing-length,ysu
        python -m jabl.main model.nstep=2000 run.save_interval=500
    """
    model = build_model(cfg)

    if cfg.run.save_interval:
        result, predictions = model.unroll(cfg.run.save_interval)
    else:
        result, predictions = model.run(), None

    output_dir = Path(HydraConfig.get().runtime.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    output_path = output_dir / cfg.output.filename
    result_to_xarray(result).to_netcdf(str(output_path))
    logger.info("Wrote final profiles to %s", output_path)

    if predictions is not None:
        trajectory_path = output_path.with_name(output_path.stem + "_trajectory.nc")
        predictions_to_xarray(predictions, result).to_netcdf(str(trajectory_path))
        logger.info("Wrote trajectory to %s", trajectory_path)

if __name__ == "__main__":
    main()
