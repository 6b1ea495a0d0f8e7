"""
Particle output to HDF5.

The Writer mirrors a mesh/array container: arrays are written under a mesh
group, each with a string attribute map (at least ``name`` and ``type``).
Write failures are reported and returned as ``False``; they never abort a run.
"""

import sys
import numpy as np
import h5py
from typing import Dict, Optional

from particle_pusher.core.particle import ParticleArray


POINT_MESH_TYPE = 'point'


class Writer:
    """Minimal array container writer backed by h5py."""

    def __init__(self):
        self._file: Optional[h5py.File] = None

    def open(self, path) -> 'Writer':
        self._file = h5py.File(path, 'w')
        return self

    def write_array(self, mesh_name: str, attributes: Dict[str, str], count: int,
                    components: int, buffer: np.ndarray) -> bool:
        """
        Write ``count`` entries of ``components`` values each.

        Parameters:
            mesh_name: Group the array belongs to
            attributes: String attributes; ``name`` is the dataset name
            count: Number of entries
            components: Values per entry
            buffer: Flat or (count, components) buffer

        Returns:
            True on success, False if the array could not be written
        """
        try:
            data = np.asarray(buffer, dtype=np.float64).reshape(-1)[:count * components]
            group = self._file.require_group(mesh_name)
            name = attributes['name']
            if name in group:
                del group[name]
            dataset = group.create_dataset(name, data=data.reshape(count, components))
            for key, value in attributes.items():
                dataset.attrs[key] = str(value)
        except (OSError, KeyError, ValueError, TypeError, AttributeError) as e:
            print(f"\t ERROR writing array '{attributes.get('name')}': {e}", file=sys.stderr)
            return False
        return True

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def write_particles(particles: ParticleArray, filename, writer: Optional[Writer] = None) -> bool:
    """
    Write positions and velocities of all live particles.

    Disabled particles (NaN position magnitude) are skipped, so the written
    entry count equals the number of live particles and the two arrays are
    index-aligned with each other, not with the arena.

    Parameters:
        particles: ParticleArray to dump
        filename: Output path
        writer: Writer instance (a new HDF5 Writer if None)

    Returns:
        True if both arrays were written
    """
    alive = particles.alive_mask()
    positions = np.ascontiguousarray(particles.positions[alive])
    velocities = np.ascontiguousarray(particles.velocities[alive])
    n_writable = len(positions)

    if writer is None:
        writer = Writer()

    try:
        writer.open(filename)
    except OSError as e:
        print(f"\t ERROR failed to open {filename}: {e}", file=sys.stderr)
        return False

    attribs = {'name': 'proton_position', 'type': POINT_MESH_TYPE}
    ok = True
    try:
        if not writer.write_array('MESH', attribs, n_writable, 3, positions):
            print("\t ERROR failed to write particle positions!", file=sys.stderr)
            ok = False

        attribs['name'] = 'proton_velocity'
        if not writer.write_array('MESH', attribs, n_writable, 3, velocities):
            print("\t ERROR failed to write particle velocities!", file=sys.stderr)
            ok = False
    finally:
        writer.close()
    return ok


def read_particles(filename):
    """Read back (positions, velocities) written by ``write_particles``."""
    with h5py.File(filename, 'r') as f:
        return f['MESH/proton_position'][:], f['MESH/proton_velocity'][:]
