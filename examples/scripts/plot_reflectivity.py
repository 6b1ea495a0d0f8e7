"""
Plot shock reflectivity event logs.

Reads transmitted.dat / reflected.dat written by the reflectivity scenario,
bins them with the layout stored in the .bov descriptors and plots the
reflected fraction as a function of y and injection time.

Usage:
    python plot_reflectivity.py [output_dir]
"""

import sys
import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path

from particle_pusher.io.histogram import Histogram2D


def read_descriptor(path: Path) -> dict:
    """Parse ``KEY: value`` lines of a BOV descriptor."""
    entries = {}
    for line in path.read_text().splitlines():
        key, _, value = line.partition(':')
        entries[key.strip()] = value.strip()
    return entries


def load_histogram(output_dir: Path, name: str) -> Histogram2D:
    """Rebuild a Histogram2D from its raw pairs and descriptor."""
    descriptor = read_descriptor(output_dir / f"{name}.dat.bov")
    bins = [int(b) for b in descriptor['HISTOGRAM_BINS'].split()]
    origin = [float(v) for v in descriptor['BRICK_ORIGIN'].split()[:2]]
    size = [float(v) for v in descriptor['BRICK_SIZE'].split()[:2]]

    histogram = Histogram2D(bins, origin, (origin[0] + size[0], origin[1] + size[1]))
    for pair in Histogram2D.load(output_dir / f"{name}.dat"):
        histogram.add_value(pair)
    return histogram


def plot_reflectivity(output_dir: Path, save_path=None):
    transmitted = load_histogram(output_dir, 'transmitted')
    reflected = load_histogram(output_dir, 'reflected')

    n_t = transmitted.counts()
    n_r = reflected.counts()
    total = n_t + n_r
    with np.errstate(invalid='ignore', divide='ignore'):
        fraction = np.where(total > 0, n_r / total, np.nan)

    print(f"Transmitted: {len(transmitted)}")
    print(f"Reflected: {len(reflected)}")

    lo = np.minimum(transmitted.low, transmitted.high)
    hi = np.maximum(transmitted.low, transmitted.high)

    plt.figure(figsize=(10, 6))
    plt.imshow(fraction.T, origin='lower', aspect='auto',
               extent=[lo[0], hi[0], lo[1], hi[1]], vmin=0.0, vmax=1.0)
    plt.colorbar(label='Reflected fraction')
    plt.xlabel('y [m]', fontsize=12)
    plt.ylabel('Injection time [s]', fontsize=12)
    plt.title('Shock reflectivity', fontsize=14)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150)
        print(f"Plot saved: {save_path}")


if __name__ == "__main__":
    directory = Path(sys.argv[1]) if len(sys.argv) > 1 else Path('.')
    plot_reflectivity(directory, save_path=directory / 'reflectivity.png')
