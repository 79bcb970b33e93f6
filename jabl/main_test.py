import pytest
from hydra import initialize, compose
from omegaconf import DictConfig

from jabl.closures import ClosureType, MixingLengthClosure
from jabl.main import build_model
from jabl.model import RunStatus


@pytest.fixture
def test_config() -> DictConfig:
    with initialize(version_base=None, config_path="config"):
        cfg = compose(config_name="config", overrides=["model.nstep=20", "closure.name=mixinglength"])
        return cfg


def test_default_config_values():
    with initialize(version_base=None, config_path="config"):
        cfg = compose(config_name="config")
    assert cfg.closure.name == "constant"
    assert cfg.model.nstep == 10000
    assert cfg.model.nz == 129
    assert cfg.model.coriolis_parameter_override is None


def test_build_model(test_config):
    model = build_model(test_config)
    assert model.config.nstep == 20
    assert model.closure == MixingLengthClosure(40.0)
    assert model.closure.kind is ClosureType.MIXING_LENGTH
    result = model.run()
    assert result.status is RunStatus.FINISHED


def test_unknown_closure_is_rejected():
    from jabl.errors import InvalidConfig
    with initialize(version_base=None, config_path="config"):
        cfg = compose(config_name="config", overrides=["closure.name=kepsilon"])
    with pytest.raises(InvalidConfig):
        build_model(cfg)
