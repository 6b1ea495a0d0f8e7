"""
Generate field snapshots for a magnetic dipole test case.

Writes a series of HDF5 snapshots (E, B, V on a regular grid) in the layout
read by FieldSnapshot.load, so precipitation runs can be tried without
output from a plasma simulation.

Usage:
    python scripts/make_dipole_fields.py [out_dir] [n_snapshots]
"""

import sys
import time
import numpy as np
from pathlib import Path

from particle_pusher.core.fields import write_field_snapshot

# Earth dipole moment [A m^2] and mu0/4pi
DIPOLE_MOMENT = 8.0e22
MU0_OVER_4PI = 1e-7
EARTH_RADIUS = 6.371e6


def dipole_field(x, y, z, moment=DIPOLE_MOMENT):
    """Dipole B [T] with the moment along -z, on a meshgrid."""
    r = np.sqrt(x * x + y * y + z * z)
    r = np.maximum(r, EARTH_RADIUS)
    m_dot_r = -moment * z
    B = np.empty(x.shape + (3,))
    B[..., 0] = MU0_OVER_4PI * (3.0 * x * m_dot_r / r**5)
    B[..., 1] = MU0_OVER_4PI * (3.0 * y * m_dot_r / r**5)
    B[..., 2] = MU0_OVER_4PI * (3.0 * z * m_dot_r / r**5 + moment / r**3)
    return B


def make_dipole_fields(out_dir='fields', n_snapshots=5, input_dt=5.0,
                       extent=1.0e8, n_cells=41, bulk_velocity=(-4.0e5, 0.0, 0.0)):
    """
    Write ``n_snapshots`` identical dipole snapshots.

    Parameters:
        out_dir: Output directory
        n_snapshots: Number of files (dipole.0000000.h5, ...)
        input_dt: Time between snapshots [s]
        extent: Half width of the cubic grid [m]
        n_cells: Grid points per axis
        bulk_velocity: Uniform bulk flow [m/s]
    """
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    axis = np.linspace(-extent, extent, n_cells)
    x, y, z = np.meshgrid(axis, axis, axis, indexing='ij')

    B = dipole_field(x, y, z)
    E = np.zeros_like(B)
    V = np.zeros_like(B)
    V[...] = bulk_velocity
    # Ideal MHD electric field E = -V x B
    E[...] = -np.cross(V, B)

    print(f"Writing {n_snapshots} dipole snapshots to {out_path}")
    print(f"  Grid: {n_cells}^3 points, +-{extent:.2e} m\n")

    start = time.time()
    for k in range(n_snapshots):
        filename = out_path / f"dipole.{k:07d}.h5"
        write_field_snapshot(filename, axis, axis, axis, E, B, V, time=k * input_dt)
        print(f"  ✓ Saved: {filename.name}")

    print(f"\nDone in {(time.time() - start)*1000:.1f}ms")


if __name__ == "__main__":
    out = sys.argv[1] if len(sys.argv) > 1 else 'fields'
    count = int(sys.argv[2]) if len(sys.argv) > 2 else 5
    make_dipole_fields(out, count)
