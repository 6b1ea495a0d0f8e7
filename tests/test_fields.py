"""Field collaborators."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from particle_pusher.core.fields import (UniformField, FunctionField, GridField,
                                         FieldSnapshot, FieldSequence,
                                         write_field_snapshot)


def test_uniform_field_single_and_batch():
    field = UniformField((1.0, 2.0, 3.0))
    assert_allclose(field(np.zeros(3)), [1.0, 2.0, 3.0])
    assert field(np.zeros((5, 3))).shape == (5, 3)


def test_function_field_batch():
    field = FunctionField(lambda p: 2.0 * p)
    points = np.arange(6.0).reshape(2, 3)
    assert_allclose(field(points), 2.0 * points)


def linear_grid():
    axis = np.linspace(-1.0, 1.0, 5)
    x, y, z = np.meshgrid(axis, axis, axis, indexing='ij')
    values = np.stack([x, 2.0 * y, -z], axis=-1)
    return axis, values


def test_grid_field_is_exact_for_linear_data():
    axis, values = linear_grid()
    field = GridField(axis, axis, axis, values)

    assert_allclose(field(np.array([0.3, -0.1, 0.7])), [0.3, -0.2, -0.7], atol=1e-12)
    # outside the grid the field reads zero
    assert_allclose(field(np.array([5.0, 0.0, 0.0])), [0.0, 0.0, 0.0])


def test_snapshot_roundtrip(tmp_path):
    axis, values = linear_grid()
    path = tmp_path / 'bulk.0000000.h5'
    write_field_snapshot(path, axis, axis, axis, values, 2.0 * values, values, time=4.0)

    snapshot = FieldSnapshot.load(path)
    assert snapshot.time == 4.0
    assert_allclose(snapshot.B(np.array([0.5, 0.5, 0.5])), [1.0, 2.0, -1.0], atol=1e-12)


def test_snapshot_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FieldSnapshot.load(tmp_path / 'missing.h5')


def test_sequence_interpolates_in_time():
    reads = []

    def loader(name):
        index = int(name.split('.')[1])
        reads.append(index)
        value = UniformField((float(index), 0.0, 0.0))
        return FieldSnapshot(value, value, value, time=index)

    sequence = FieldSequence('bulk.%07i.h5', input_dt=2.0, loader=loader)
    sequence.load_initial(0)
    sequence.advance(1)
    sequence.set_time(1.0)
    assert_allclose(sequence.B(np.zeros(3)), [0.5, 0.0, 0.0])

    sequence.advance(2)
    sequence.set_time(3.5)
    assert_allclose(sequence.E(np.zeros(3)), [1.75, 0.0, 0.0])
    # consecutive intervals reuse the newer snapshot
    assert reads == [0, 1, 2]
