"""Particle arena: append-only storage, disabling, index provenance."""

import numpy as np
import pytest

from particle_pusher.core.particle import Particle, ParticleArray


def test_append_returns_stable_indices():
    arena = ParticleArray(capacity=1)
    indices = [arena.append(Particle(position=(i, 0, 0))) for i in range(10)]

    assert indices == list(range(10))
    assert len(arena) == 10
    assert arena.positions[7, 0] == 7.0


def test_extend_broadcasts_shared_position():
    arena = ParticleArray()
    arena.extend((1.0, 2.0, 3.0), np.ones((4, 3)), mass=2.0, charge=-1.0)

    assert len(arena) == 4
    assert np.all(arena.positions == [1.0, 2.0, 3.0])
    assert np.all(arena.particles['mass'] == 2.0)
    assert np.all(arena.particles['charge'] == -1.0)


def test_disable_keeps_index_and_sets_sentinel():
    arena = ParticleArray()
    arena.extend(np.arange(9.0).reshape(3, 3) + 1.0, np.ones((3, 3)))
    arena.disable(1)

    assert len(arena) == 3
    assert arena.n_alive == 2
    assert arena.is_disabled(1)
    assert np.isnan(np.linalg.norm(arena.positions[1]))
    assert np.all(arena.velocities[1] == 0.0)
    assert list(arena.get_alive_indices()) == [0, 2]
    assert arena[2].position.tolist() == [7.0, 8.0, 9.0]


def test_particle_disable():
    p = Particle(position=(1, 1, 1), velocity=(2, 2, 2))
    assert not p.disabled
    p.disable()
    assert p.disabled
    assert np.all(p.velocity == 0)


def test_batch_decoding():
    assert ParticleArray.batch_of(7, 5) == 1
    assert ParticleArray.offset_in_batch(7, 5) == 2
    assert ParticleArray.batch_of(4, 5) == 0


def test_getitem_out_of_range():
    arena = ParticleArray()
    with pytest.raises(IndexError):
        arena[0]
