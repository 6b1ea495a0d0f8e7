"""
Particle state management using NumPy structured arrays.

Particles live in an append-only arena. A particle is never removed; it is
disabled instead by setting its position to a NaN-magnitude sentinel, so that
the index of every particle stays stable for the lifetime of a run. Several
scenarios decode a particle's injection batch from its index alone.
"""

import numpy as np
from typing import Tuple

from particle_pusher.constants import PROTON_MASS, ELEMENTARY_CHARGE


# Particle record layout
PARTICLE_DTYPE = np.dtype([
    ('position', np.float64, 3),      # x, y, z [m]
    ('velocity', np.float64, 3),      # vx, vy, vz [m/s]
    ('mass', np.float64),             # [kg]
    ('charge', np.float64),           # [C]
])

DISABLED_POSITION = (np.nan, 0.0, 0.0)


def is_disabled_position(position: np.ndarray) -> bool:
    """Disabled predicate: the position vector has NaN magnitude."""
    return bool(np.isnan(np.linalg.norm(position)))


class Particle:
    """Single particle (for convenience)."""

    def __init__(self, mass: float = PROTON_MASS, charge: float = ELEMENTARY_CHARGE,
                 position: Tuple[float, float, float] = (0.0, 0.0, 0.0),
                 velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)):
        """
        Initialize a single particle.

        Parameters:
            mass: Particle mass [kg]
            charge: Particle charge [C]
            position: (x, y, z) position [m]
            velocity: (vx, vy, vz) velocity [m/s]
        """
        self.mass = mass
        self.charge = charge
        self.position = np.array(position, dtype=np.float64)
        self.velocity = np.array(velocity, dtype=np.float64)

    @property
    def disabled(self) -> bool:
        return is_disabled_position(self.position)

    def disable(self):
        """Move the particle into the disabled sentinel state."""
        self.position = np.array(DISABLED_POSITION, dtype=np.float64)
        self.velocity = np.zeros(3)

    def to_structured_array(self) -> np.ndarray:
        """Convert to structured array format."""
        particle_array = np.zeros(1, dtype=PARTICLE_DTYPE)
        particle_array['position'][0] = self.position
        particle_array['velocity'][0] = self.velocity
        particle_array['mass'][0] = self.mass
        particle_array['charge'][0] = self.charge
        return particle_array

    def __repr__(self) -> str:
        return (f"Particle(x={self.position.tolist()}, v={self.velocity.tolist()}, "
                f"m={self.mass:.3e}, q={self.charge:.3e})")


class ParticleArray:
    """Append-only particle arena."""

    def __init__(self, capacity: int = 1024):
        """
        Initialize an empty particle arena.

        Parameters:
            capacity: Number of records to preallocate (grows on demand)
        """
        self._data = np.zeros(max(int(capacity), 1), dtype=PARTICLE_DTYPE)
        self.n_particles = 0

    @property
    def particles(self) -> np.ndarray:
        """View of the used part of the arena."""
        return self._data[:self.n_particles]

    @property
    def positions(self) -> np.ndarray:
        return self.particles['position']

    @property
    def velocities(self) -> np.ndarray:
        return self.particles['velocity']

    def _reserve(self, n_new: int):
        needed = self.n_particles + n_new
        if needed <= len(self._data):
            return
        capacity = len(self._data)
        while capacity < needed:
            capacity *= 2
        grown = np.zeros(capacity, dtype=PARTICLE_DTYPE)
        grown[:self.n_particles] = self._data[:self.n_particles]
        self._data = grown

    def append(self, particle: Particle) -> int:
        """Append one particle, returning its (permanent) index."""
        self._reserve(1)
        index = self.n_particles
        self._data[index] = particle.to_structured_array()[0]
        self.n_particles += 1
        return index

    def extend(self, positions: np.ndarray, velocities: np.ndarray,
               mass: float = PROTON_MASS, charge: float = ELEMENTARY_CHARGE):
        """
        Append a batch of particles in the given order.

        Parameters:
            positions: (N, 3) positions [m], or a single (3,) position shared by all
            velocities: (N, 3) velocities [m/s]
            mass: Particle mass [kg]
            charge: Particle charge [C]
        """
        velocities = np.atleast_2d(np.asarray(velocities, dtype=np.float64))
        n_new = len(velocities)
        if n_new == 0:
            return
        self._reserve(n_new)
        batch = self._data[self.n_particles:self.n_particles + n_new]
        batch['position'] = positions
        batch['velocity'] = velocities
        batch['mass'] = mass
        batch['charge'] = charge
        self.n_particles += n_new

    def disable(self, index: int):
        """Disable particle: position becomes (NaN, 0, 0), velocity is zeroed."""
        self._data['position'][index] = DISABLED_POSITION
        self._data['velocity'][index] = 0.0

    def is_disabled(self, index: int) -> bool:
        return is_disabled_position(self._data['position'][index])

    def alive_mask(self) -> np.ndarray:
        """Boolean mask of particles whose position magnitude is not NaN."""
        return ~np.isnan(np.linalg.norm(self.positions, axis=1))

    def get_alive_indices(self) -> np.ndarray:
        return np.where(self.alive_mask())[0]

    @property
    def n_alive(self) -> int:
        return int(np.sum(self.alive_mask()))

    def kinetic_energy_eV(self, index: int) -> float:
        """Non-relativistic kinetic energy of one particle [eV]."""
        record = self._data[index]
        v = record['velocity']
        return 0.5 * record['mass'] * np.dot(v, v) / ELEMENTARY_CHARGE

    @staticmethod
    def batch_of(index: int, batch_size: int) -> int:
        """Injection batch (timestep) that produced particle ``index``."""
        return index // batch_size

    @staticmethod
    def offset_in_batch(index: int, batch_size: int) -> int:
        """Position of particle ``index`` inside its injection batch."""
        return index % batch_size

    def __len__(self) -> int:
        return self.n_particles

    def __getitem__(self, index: int) -> Particle:
        if index < 0:
            index += self.n_particles
        if not 0 <= index < self.n_particles:
            raise IndexError(f"particle index {index} out of range")
        record = self._data[index]
        return Particle(float(record['mass']), float(record['charge']),
                        record['position'].copy(), record['velocity'].copy())

    def get_statistics(self) -> dict:
        """Get statistics about particle array."""
        alive = self.alive_mask()
        speeds = np.linalg.norm(self.velocities[alive], axis=1)

        return {
            'n_total': self.n_particles,
            'n_alive': int(np.sum(alive)),
            'n_disabled': int(np.sum(~alive)),
            'mean_speed': np.mean(speeds) if len(speeds) > 0 else 0.0,
            'max_speed': np.max(speeds) if len(speeds) > 0 else 0.0,
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"ParticleArray(n={stats['n_total']}, "
                f"alive={stats['n_alive']}, "
                f"<|v|>={stats['mean_speed']:.3e} m/s)")
