import numpy as np
import pytest

from particle_pusher.config import ParticleParameters


@pytest.fixture
def small_params(tmp_path):
    """Parameters for quick runs writing into a temporary directory."""
    return ParticleParameters(
        num_particles=5,
        output_filename_pattern=str(tmp_path / 'particles.%07i.h5'),
        final_output_filename=str(tmp_path / 'particles_final.h5'),
        start_time=0.0,
        end_time=1.0,
        input_dt=1000.0,
        dt=0.1,
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
