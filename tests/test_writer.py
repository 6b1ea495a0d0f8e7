"""Particle dumps: disabled particles are filtered, arrays stay aligned."""

import numpy as np
import h5py
import pytest
from numpy.testing import assert_array_equal

from particle_pusher.core.particle import ParticleArray
from particle_pusher.io.writer import Writer, write_particles, read_particles


def make_arena():
    arena = ParticleArray()
    arena.extend(np.array([[1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [3.0, 0.0, 0.0]]),
                 np.array([[10.0, 0.0, 0.0], [20.0, 0.0, 0.0], [30.0, 0.0, 0.0]]))
    return arena


def test_disabled_particle_is_not_written(tmp_path):
    arena = make_arena()
    arena.disable(1)
    path = tmp_path / 'out.h5'

    assert write_particles(arena, path)

    positions, velocities = read_particles(path)
    assert positions.shape == (2, 3)
    assert velocities.shape == (2, 3)
    assert_array_equal(positions[:, 0], [1.0, 3.0])
    assert_array_equal(velocities[:, 0], [10.0, 30.0])


def test_array_attributes(tmp_path):
    path = tmp_path / 'out.h5'
    write_particles(make_arena(), path)

    with h5py.File(path, 'r') as f:
        dataset = f['MESH/proton_velocity']
        assert dataset.attrs['name'] == 'proton_velocity'
        assert dataset.attrs['type'] == 'point'


def test_empty_arena_writes_empty_arrays(tmp_path):
    path = tmp_path / 'empty.h5'
    assert write_particles(ParticleArray(), path)
    positions, velocities = read_particles(path)
    assert positions.shape == (0, 3)
    assert velocities.shape == (0, 3)


class FailingWriter(Writer):
    def write_array(self, mesh_name, attributes, count, components, buffer):
        return False


def test_write_failure_is_reported_not_raised(tmp_path, capsys):
    ok = write_particles(make_arena(), tmp_path / 'out.h5', writer=FailingWriter())

    assert ok is False
    err = capsys.readouterr().err
    assert "failed to write particle positions" in err
    assert "failed to write particle velocities" in err


def test_write_array_without_open_file_returns_false(capsys):
    writer = Writer()
    assert writer.write_array('MESH', {'name': 'x', 'type': 'point'}, 1, 3,
                              np.zeros(3)) is False
    assert "ERROR" in capsys.readouterr().err


class RaisingWriter(Writer):
    closed = False

    def write_array(self, mesh_name, attributes, count, components, buffer):
        raise RuntimeError("disk vanished")

    def close(self):
        self.closed = True
        super().close()


def test_writer_closed_when_write_raises(tmp_path):
    writer = RaisingWriter()
    with pytest.raises(RuntimeError, match="disk vanished"):
        write_particles(make_arena(), tmp_path / 'out.h5', writer=writer)
    assert writer.closed
    assert writer._file is None
