import jax
import pytest

# end-to-end checks compare profiles to machine precision over 10,000 steps
jax.config.update('jax_enable_x64', True)


@pytest.fixture
def short_config():
    from jabl.params import SimulationConfig
    return SimulationConfig.default(nstep=200)
