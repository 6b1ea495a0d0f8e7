"""Parameter loading."""

import pytest

from particle_pusher.config import ParticleParameters, load_parameters


def test_defaults():
    params = ParticleParameters()
    assert params.mode == 'distribution'
    assert params.output_filename(3) == 'particles.0000003.h5'
    assert params.reflect_num_points == 200


def test_load_nested_yaml(tmp_path):
    path = tmp_path / 'params.yaml'
    path.write_text("particles:\n"
                    "  mode: precipitation\n"
                    "  num_particles: 12\n"
                    "  temperature: 1e6\n"
                    "  precip_inner_boundary: 3.0e+7\n")

    params = load_parameters(path)
    assert params.mode == 'precipitation'
    assert params.num_particles == 12
    assert params.temperature == 1e6
    assert params.precip_inner_boundary == 3.0e7


def test_load_flat_yaml(tmp_path):
    path = tmp_path / 'params.yaml'
    path.write_text("mode: single\ninit_x: 1.5\n")
    params = load_parameters(path)
    assert params.mode == 'single'
    assert params.init_position == (1.5, 0.0, 0.0)


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / 'params.yaml'
    path.write_text("mode: single\nbogus: 1\n")
    with pytest.raises(ValueError, match="bogus"):
        load_parameters(path)


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_parameters('/nonexistent/params.yaml')


@pytest.mark.parametrize("pattern", ["particles.h5", "particles.%d.%d.h5", "p.%s.h5"])
def test_output_pattern_needs_one_integer_placeholder(pattern):
    with pytest.raises(ValueError):
        ParticleParameters(output_filename_pattern=pattern)


def test_output_pattern_escaped_percent_is_not_a_placeholder():
    params = ParticleParameters(output_filename_pattern='run%%d.%07i.h5')
    assert params.output_filename(3) == 'run%d.0000003.h5'
