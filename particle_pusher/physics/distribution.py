"""
Velocity distributions for particle injection.

Every distribution owns its random generator and exposes ``next()``, a single
stateful draw returning a velocity vector. Callers shift it by the local
bulk velocity and place the particle themselves.
"""

import numpy as np
from typing import Optional

from particle_pusher.constants import BOLTZMANN


class Distribution:
    """Base class: draws velocities from a fixed distribution."""

    def __init__(self, rng: np.random.Generator, mass: float, charge: float):
        self.rng = rng
        self.mass = mass
        self.charge = charge

    def next(self) -> np.ndarray:
        """Draw one velocity [m/s] (advances the generator)."""
        raise NotImplementedError

    def sample(self, n: int) -> np.ndarray:
        """Draw ``n`` velocities in sequence, shape (n, 3)."""
        velocities = np.empty((n, 3))
        for i in range(n):
            velocities[i] = self.next()
        return velocities


class MaxwellBoltzmann(Distribution):
    """Isotropic Maxwellian: each component ~ N(0, sqrt(kT/m))."""

    def __init__(self, rng: np.random.Generator, mass: float, charge: float,
                 temperature: float):
        super().__init__(rng, mass, charge)
        self.temperature = temperature
        self.sigma = np.sqrt(BOLTZMANN * temperature / mass)

    def next(self) -> np.ndarray:
        return self.rng.normal(0.0, self.sigma, 3)


class Monoenergetic(Distribution):
    """Fixed speed, isotropic direction."""

    def __init__(self, rng: np.random.Generator, mass: float, charge: float,
                 speed: float):
        super().__init__(rng, mass, charge)
        self.speed = speed

    def next(self) -> np.ndarray:
        direction = self.rng.normal(0.0, 1.0, 3)
        norm = np.linalg.norm(direction)
        while norm == 0.0:
            direction = self.rng.normal(0.0, 1.0, 3)
            norm = np.linalg.norm(direction)
        return self.speed * direction / norm


class Kappa(Distribution):
    """
    Kappa distribution sampled as a multivariate Student-t.

    With nu = 2 kappa - 1 degrees of freedom and scale
    sigma^2 = (kT/m) (2 kappa - 3) / (2 kappa - 1), each velocity component
    has variance kT/m, the same as the Maxwellian it tends to for large kappa.
    """

    def __init__(self, rng: np.random.Generator, mass: float, charge: float,
                 temperature: float, kappa: float):
        if kappa <= 1.5:
            raise ValueError(f"kappa must be > 1.5 for a finite temperature, got {kappa}")
        super().__init__(rng, mass, charge)
        self.temperature = temperature
        self.kappa = kappa
        self.nu = 2.0 * kappa - 1.0
        self.sigma = np.sqrt(BOLTZMANN * temperature / mass
                             * (2.0 * kappa - 3.0) / (2.0 * kappa - 1.0))

    def next(self) -> np.ndarray:
        gaussian = self.rng.normal(0.0, self.sigma, 3)
        chi2 = self.rng.chisquare(self.nu)
        return gaussian * np.sqrt(self.nu / chi2)


DISTRIBUTIONS = {
    'maxwell': lambda rng, p: MaxwellBoltzmann(rng, p.mass, p.charge, p.temperature),
    'monoenergetic': lambda rng, p: Monoenergetic(rng, p.mass, p.charge, p.particle_vel),
    'kappa2': lambda rng, p: Kappa(rng, p.mass, p.charge, p.temperature, 2.0),
    'kappa6': lambda rng, p: Kappa(rng, p.mass, p.charge, p.temperature, 6.0),
}


def create_distribution(params, seed: Optional[int] = None) -> Distribution:
    """
    Build the configured velocity distribution with a freshly seeded generator.

    Parameters:
        params: ParticleParameters (uses distribution, mass, charge,
                temperature, particle_vel, random_seed)
        seed: Generator seed (defaults to params.random_seed)

    Returns:
        Distribution instance
    """
    name = params.distribution.lower()
    if name not in DISTRIBUTIONS:
        raise ValueError(f"Unknown distribution '{params.distribution}'. "
                         f"Available: {list(DISTRIBUTIONS.keys())}")
    if seed is None:
        seed = params.random_seed
    return DISTRIBUTIONS[name](np.random.default_rng(seed), params)
