"""
Single Particle Gyration - Simple Example

Traces one proton in a uniform magnetic field and compares the numerical
gyration with the analytic result.

This example validates:
    - Boris rotation (speed is conserved to round-off)
    - Gyration period T = 2 pi m / (q B)
    - Larmor radius r = m v / (q B)
"""

import io
import numpy as np
import matplotlib.pyplot as plt

from particle_pusher.config import ParticleParameters
from particle_pusher.constants import PROTON_MASS, ELEMENTARY_CHARGE
from particle_pusher.core.fields import StaticFields, UniformField
from particle_pusher.transport.driver import ParticleDriver
from particle_pusher.transport.scenario import create_scenario


def simulate_gyration(B0: float = 5e-9, v0: float = 4e5, n_periods: float = 3.0,
                      steps_per_period: int = 400):
    """
    Trace one proton gyrating in B = (0, 0, B0).

    Parameters:
        B0: Magnetic field strength [T]
        v0: Initial speed along x [m/s] (set through the bulk velocity field)
        n_periods: Number of gyration periods to trace
        steps_per_period: Timesteps per period

    Returns:
        trajectory: list of TrajectoryPoint
        period: analytic gyration period [s]
    """
    period = 2.0 * np.pi * PROTON_MASS / (ELEMENTARY_CHARGE * B0)
    dt = period / steps_per_period

    params = ParticleParameters(mode='single', dt=dt, end_time=n_periods * period,
                                input_dt=n_periods * period)

    print(f"\n{'='*70}")
    print(f"Single Particle Gyration")
    print(f"{'='*70}")
    print(f"  B0: {B0:.2e} T")
    print(f"  v0: {v0:.2e} m/s")
    print(f"  Period: {period:.3f} s, dt = {dt:.3e} s")
    print(f"{'='*70}\n")

    fields = StaticFields(B=UniformField((0.0, 0.0, B0)), V=UniformField((v0, 0.0, 0.0)))
    scenario = create_scenario('single', params, output=io.StringIO(),
                               keep_trajectory=True)
    ParticleDriver(scenario, fields, params).run(verbose=True)

    trajectory = scenario.trajectory
    speeds = np.array([np.linalg.norm(point.velocity) for point in trajectory])
    x = np.array([point.position[0] for point in trajectory])
    y = np.array([point.position[1] for point in trajectory])

    larmor = PROTON_MASS * v0 / (ELEMENTARY_CHARGE * B0)
    diameter = 0.5 * ((x.max() - x.min()) + (y.max() - y.min()))

    print(f"\n{'='*70}")
    print(f"Results:")
    print(f"{'='*70}")
    print(f"  Relative speed drift: {np.max(np.abs(speeds - v0)) / v0:.2e}")
    print(f"  Larmor radius: {0.5 * diameter:.4e} m (analytic {larmor:.4e} m)")
    print(f"{'='*70}\n")

    return trajectory, period


def plot_orbit(trajectory, save_path=None):
    """Plot the orbit in the x-y plane."""
    x = [point.position[0] for point in trajectory]
    y = [point.position[1] for point in trajectory]

    plt.figure(figsize=(6, 6))
    plt.plot(x, y, 'b-', linewidth=1.5)
    plt.xlabel('x [m]', fontsize=12)
    plt.ylabel('y [m]', fontsize=12)
    plt.title('Proton gyration in uniform B', fontsize=14)
    plt.axis('equal')
    plt.grid(True, alpha=0.3)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150)
        print(f"Plot saved: {save_path}")


if __name__ == "__main__":
    trajectory, period = simulate_gyration()
    plot_orbit(trajectory, save_path='gyration_single.png')
