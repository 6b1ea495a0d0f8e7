"""
Two-dimensional event log for shock reflectivity diagnostics.

Stores raw (a, b) pairs as they are observed; binning is left to downstream
tools. ``save`` writes the pairs as raw little-endian float64 and
``write_bov_ascii`` writes a BOV descriptor pointing at that file.
"""

import numpy as np
from pathlib import Path
from typing import Tuple


class Histogram2D:
    """Append-only multiset of 2-vectors with a nominal bin layout."""

    def __init__(self, num_bins: Tuple[int, int] = (200, 600),
                 low: Tuple[float, float] = (0.0, 0.0),
                 high: Tuple[float, float] = (1.0, 1.0)):
        """
        Parameters:
            num_bins: Bins along (a, b) for downstream histogramming
            low: Lower extent of (a, b)
            high: Upper extent of (a, b)
        """
        self.num_bins = (int(num_bins[0]), int(num_bins[1]))
        self.low = np.array(low, dtype=np.float64)
        self.high = np.array(high, dtype=np.float64)
        self._values = []

    def add_value(self, pair):
        """Record one observed (a, b) pair."""
        a, b = pair
        self._values.append((float(a), float(b)))

    @property
    def values(self) -> np.ndarray:
        """Recorded pairs, shape (n, 2), in insertion order."""
        if not self._values:
            return np.zeros((0, 2))
        return np.array(self._values, dtype=np.float64)

    def __len__(self) -> int:
        return len(self._values)

    def counts(self) -> np.ndarray:
        """Bin the log on the nominal layout (for plotting, not used by the pusher)."""
        values = self.values
        lo = np.minimum(self.low, self.high)
        hi = np.maximum(self.low, self.high)
        counts, _, _ = np.histogram2d(values[:, 0], values[:, 1], bins=self.num_bins,
                                      range=[[lo[0], hi[0]], [lo[1], hi[1]]])
        return counts

    def save(self, path):
        """Write the raw pairs as little-endian float64."""
        self.values.astype('<f8').tofile(str(path))

    def write_bov_ascii(self, path, index: int, data_file):
        """
        Write a BOV descriptor referencing the raw pair file.

        Parameters:
            path: Descriptor path
            index: Value for the TIME entry
            data_file: Raw data file written by ``save``
        """
        extent = self.high - self.low
        lines = [
            f"TIME: {index}",
            f"DATA_FILE: {Path(data_file).name}",
            f"DATA_SIZE: {len(self)} 2 1",
            "DATA_FORMAT: DOUBLE",
            "VARIABLE: events",
            "DATA_ENDIAN: LITTLE",
            "CENTERING: zonal",
            f"BRICK_ORIGIN: {self.low[0]} {self.low[1]} 0",
            f"BRICK_SIZE: {extent[0]} {extent[1]} 1",
            "DATA_COMPONENTS: 1",
            f"HISTOGRAM_BINS: {self.num_bins[0]} {self.num_bins[1]}",
            f"PAIR_COUNT: {len(self)}",
        ]
        Path(path).write_text("\n".join(lines) + "\n")

    @staticmethod
    def load(path) -> np.ndarray:
        """Read a raw pair file back as an (n, 2) array."""
        return np.fromfile(str(path), dtype='<f8').reshape(-1, 2)
