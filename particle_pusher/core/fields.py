"""
Field collaborators: E, B and bulk velocity V sampled at arbitrary positions.

A field is any callable mapping a (3,) position to a (3,) vector, or an
(N, 3) batch of positions to an (N, 3) batch of vectors. Gridded snapshots are
stored in HDF5 files and sampled trilinearly; a FieldSequence interpolates
linearly in time between the two snapshots bracketing the current time.
"""

import numpy as np
import h5py
from pathlib import Path
from typing import Callable, Optional
from scipy.interpolate import RegularGridInterpolator


class UniformField:
    """Same vector everywhere."""

    def __init__(self, value=(0.0, 0.0, 0.0)):
        self.value = np.array(value, dtype=np.float64)

    def __call__(self, position) -> np.ndarray:
        position = np.asarray(position, dtype=np.float64)
        return np.broadcast_to(self.value, position.shape).copy()


class FunctionField:
    """Wraps a function of a single (3,) position."""

    def __init__(self, func: Callable[[np.ndarray], np.ndarray]):
        self.func = func

    def __call__(self, position) -> np.ndarray:
        position = np.asarray(position, dtype=np.float64)
        if position.ndim == 1:
            return np.asarray(self.func(position), dtype=np.float64)
        return np.array([self.func(p) for p in position], dtype=np.float64).reshape(-1, 3)


class GridField:
    """Vector field on a rectilinear grid, sampled with trilinear interpolation."""

    def __init__(self, x: np.ndarray, y: np.ndarray, z: np.ndarray, values: np.ndarray):
        """
        Parameters:
            x, y, z: Grid axes [m] (strictly ascending)
            values: Field values, shape (nx, ny, nz, 3)
        """
        self.axes = (np.asarray(x), np.asarray(y), np.asarray(z))
        self.values = np.asarray(values, dtype=np.float64)
        # Out-of-grid samples read as zero field
        self._interp = RegularGridInterpolator(self.axes, self.values, method='linear',
                                               bounds_error=False, fill_value=0.0)

    def __call__(self, position) -> np.ndarray:
        position = np.asarray(position, dtype=np.float64)
        if position.ndim == 1:
            return self._interp(position[np.newaxis, :])[0]
        return self._interp(position)


class TimeInterpolatedField:
    """Linear blend of two fields: (1 - w) * before + w * after."""

    def __init__(self, before, after, weight: float = 0.0):
        self.before = before
        self.after = after
        self.weight = weight

    def __call__(self, position) -> np.ndarray:
        a = self.before(position)
        if self.after is None or self.weight == 0.0:
            return a
        return (1.0 - self.weight) * a + self.weight * self.after(position)


class FieldSnapshot:
    """E, B and V on one grid at one time."""

    def __init__(self, E, B, V, time: float = 0.0):
        self.E = E
        self.B = B
        self.V = V
        self.time = time

    @classmethod
    def load(cls, path) -> 'FieldSnapshot':
        """
        Load a snapshot from an HDF5 file.

        File layout:
            datasets x, y, z: grid axes [m]
            datasets E, B, V: shape (nx, ny, nz, 3)
            attribute time: snapshot time [s]
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Field file not found: {path}")

        with h5py.File(path, 'r') as f:
            x, y, z = f['x'][:], f['y'][:], f['z'][:]
            fields = [GridField(x, y, z, f[name][:]) for name in ('E', 'B', 'V')]
            time = float(f.attrs.get('time', 0.0))

        return cls(*fields, time=time)


def write_field_snapshot(path, x, y, z, E, B, V, time: float = 0.0):
    """Write gridded E, B, V arrays in the layout ``FieldSnapshot.load`` reads."""
    with h5py.File(path, 'w') as f:
        f.create_dataset('x', data=x)
        f.create_dataset('y', data=y)
        f.create_dataset('z', data=z)
        f.create_dataset('E', data=E)
        f.create_dataset('B', data=B)
        f.create_dataset('V', data=V)
        f.attrs['time'] = time


class StaticFields:
    """Time-independent E, B, V (no input files)."""

    def __init__(self, E=None, B=None, V=None):
        self.E = E if E is not None else UniformField()
        self.B = B if B is not None else UniformField()
        self.V = V if V is not None else UniformField()

    def load_initial(self, input_file_counter: int):
        pass

    def advance(self, input_file_counter: int):
        pass

    def set_time(self, time: float):
        pass


class FieldSequence:
    """
    Time series of field snapshots read from numbered HDF5 files.

    Snapshot ``k`` is read from ``filename_pattern % k`` and is valid at time
    ``k * input_dt``. Between snapshots the fields are interpolated linearly.
    """

    def __init__(self, filename_pattern: str, input_dt: float,
                 loader: Optional[Callable] = None):
        self.filename_pattern = filename_pattern
        self.input_dt = input_dt
        self.loader = loader if loader is not None else FieldSnapshot.load

        self.counter: Optional[int] = None
        self.current: Optional[FieldSnapshot] = None
        self.next: Optional[FieldSnapshot] = None

        self.E = TimeInterpolatedField(UniformField(), None)
        self.B = TimeInterpolatedField(UniformField(), None)
        self.V = TimeInterpolatedField(UniformField(), None)

    def _read(self, index: int) -> FieldSnapshot:
        return self.loader(self.filename_pattern % index)

    def load_initial(self, input_file_counter: int):
        """Use snapshot ``counter`` alone (before the first interval starts)."""
        self.current = self._read(input_file_counter)
        self.next = self.current
        self.counter = input_file_counter
        self._rebuild()

    def advance(self, input_file_counter: int):
        """Shift the newer snapshot back and read snapshot ``counter``."""
        if self.next is None or input_file_counter != self.counter + 1:
            self.next = self._read(input_file_counter - 1)
        self.current = self.next
        self.next = self._read(input_file_counter)
        self.counter = input_file_counter
        self._rebuild()

    def _rebuild(self):
        self.E = TimeInterpolatedField(self.current.E, self.next.E)
        self.B = TimeInterpolatedField(self.current.B, self.next.B)
        self.V = TimeInterpolatedField(self.current.V, self.next.V)

    def set_time(self, time: float):
        """Set the interpolation weight for ``time`` inside the active interval."""
        if self.counter is None:
            return
        t0 = (self.counter - 1) * self.input_dt
        weight = (time - t0) / self.input_dt
        weight = min(max(weight, 0.0), 1.0)
        for field in (self.E, self.B, self.V):
            field.weight = weight

