"""
Relativistic Boris pusher.

Advances particle velocity and position under local E and B samples:

    u-  = v + q E dt / 2m                 (half electric kick)
    h   = q B dt / (2 m gamma(u-))        (rotation vector)
    u'  = u- + u- x h
    h'  = 2 h / (1 + h.h)
    u+  = u- + u' x h'                    (completed rotation)
    v   = u+ + q E dt / 2m                (second half kick)
    x   = x + dt v                        (position with the new velocity)

The rotation preserves |u-| exactly, so a pure magnetic field conserves
kinetic energy for any number of steps.

References:
    - J. P. Boris, "Relativistic plasma simulation - optimization of a hybrid code", 1970
    - H. Qin et al., "Why is Boris algorithm so good?", Phys. Plasmas 20, 084503 (2013)
"""

import numpy as np
import numba

from particle_pusher.constants import SPEED_OF_LIGHT
from particle_pusher.core.particle import Particle, ParticleArray


@numba.njit(cache=True)
def lorentz_gamma(u: np.ndarray) -> float:
    """Lorentz factor 1/sqrt(1 - |u|^2/c^2)."""
    u2 = u[0] * u[0] + u[1] * u[1] + u[2] * u[2]
    return 1.0 / np.sqrt(1.0 - u2 / (SPEED_OF_LIGHT * SPEED_OF_LIGHT))


@numba.njit(cache=True)
def boris_step(x: np.ndarray, v: np.ndarray, mass: float, charge: float,
               B: np.ndarray, E: np.ndarray, dt: float):
    """
    Advance one particle by one timestep (in place).

    Parameters:
        x: Position [m], modified in place
        v: Velocity [m/s], modified in place
        mass: Particle mass [kg]
        charge: Particle charge [C]
        B: Magnetic field at the pre-push position [T]
        E: Electric field at the pre-push position [V/m]
        dt: Timestep [s]
    """
    uminus = np.empty(3)
    for k in range(3):
        uminus[k] = v[k] + (charge * E[k] * dt) / (2.0 * mass)

    denom = 2.0 * mass * lorentz_gamma(uminus)
    hx = (charge * B[0] * dt) / denom
    hy = (charge * B[1] * dt) / denom
    hz = (charge * B[2] * dt) / denom

    # u' = u- + u- x h
    upx = uminus[0] + (uminus[1] * hz - uminus[2] * hy)
    upy = uminus[1] + (uminus[2] * hx - uminus[0] * hz)
    upz = uminus[2] + (uminus[0] * hy - uminus[1] * hx)

    # h' = 2h / (1 + h.h)
    hh = 1.0 + (hx * hx + hy * hy + hz * hz)
    hx = (2.0 * hx) / hh
    hy = (2.0 * hy) / hh
    hz = (2.0 * hz) / hh

    # u+ = u- + u' x h'
    uplus_x = uminus[0] + (upy * hz - upz * hy)
    uplus_y = uminus[1] + (upz * hx - upx * hz)
    uplus_z = uminus[2] + (upx * hy - upy * hx)

    v[0] = uplus_x + (charge * E[0] * dt) / (2.0 * mass)
    v[1] = uplus_y + (charge * E[1] * dt) / (2.0 * mass)
    v[2] = uplus_z + (charge * E[2] * dt) / (2.0 * mass)

    for k in range(3):
        x[k] += dt * v[k]


@numba.njit(cache=True)
def push_all(positions: np.ndarray, velocities: np.ndarray, masses: np.ndarray,
             charges: np.ndarray, B: np.ndarray, E: np.ndarray, dt: float):
    """
    Push every live particle of an arena by one timestep.

    Disabled particles (NaN position magnitude) are skipped; their field
    samples are never read. Each particle is independent, so the loop has no
    ordering requirement.

    Parameters:
        positions: (N, 3) positions [m], modified in place
        velocities: (N, 3) velocities [m/s], modified in place
        masses: (N,) masses [kg]
        charges: (N,) charges [C]
        B: (N, 3) magnetic field samples [T]
        E: (N, 3) electric field samples [V/m]
        dt: Timestep [s]
    """
    for i in range(positions.shape[0]):
        r2 = (positions[i, 0] * positions[i, 0] + positions[i, 1] * positions[i, 1]
              + positions[i, 2] * positions[i, 2])
        if np.isnan(r2):
            continue
        boris_step(positions[i], velocities[i], masses[i], charges[i], B[i], E[i], dt)


def push(particle: Particle, B, E, dt: float):
    """
    Advance a single Particle by one timestep with the Boris method.

    Parameters:
        particle: Particle to advance (position/velocity modified in place)
        B: Magnetic field sample at the particle position [T]
        E: Electric field sample at the particle position [V/m]
        dt: Timestep [s]
    """
    boris_step(particle.position, particle.velocity, float(particle.mass),
               float(particle.charge), np.asarray(B, dtype=np.float64),
               np.asarray(E, dtype=np.float64), dt)


def push_particles(particles: ParticleArray, B_field, E_field, dt: float):
    """
    Sample B and E at each live particle position and push the whole arena.

    Parameters:
        particles: ParticleArray (modified in place)
        B_field: Callable field, (N, 3) positions -> (N, 3) samples
        E_field: Callable field, (N, 3) positions -> (N, 3) samples
        dt: Timestep [s]
    """
    n = len(particles)
    if n == 0:
        return

    alive = particles.alive_mask()
    B = np.zeros((n, 3))
    E = np.zeros((n, 3))
    if np.any(alive):
        live_positions = particles.positions[alive]
        B[alive] = B_field(live_positions)
        E[alive] = E_field(live_positions)

    # Structured-array field views are strided; the kernel works on contiguous copies
    data = particles.particles
    positions = np.ascontiguousarray(data['position'])
    velocities = np.ascontiguousarray(data['velocity'])
    push_all(positions, velocities,
             np.ascontiguousarray(data['mass']), np.ascontiguousarray(data['charge']),
             B, E, dt)
    data['position'] = positions
    data['velocity'] = velocities
