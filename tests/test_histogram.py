"""Reflectivity event log."""

import numpy as np
from numpy.testing import assert_array_equal

from particle_pusher.io.histogram import Histogram2D


def test_add_value_keeps_raw_pairs_in_order():
    histogram = Histogram2D((4, 4), (0.0, 0.0), (1.0, 1.0))
    histogram.add_value((0.1, 0.2))
    histogram.add_value((0.1, 0.2))
    histogram.add_value((0.9, 0.5))

    assert len(histogram) == 3
    assert_array_equal(histogram.values, [[0.1, 0.2], [0.1, 0.2], [0.9, 0.5]])


def test_counts_bins_log():
    histogram = Histogram2D((2, 2), (1.0, 0.0), (-1.0, 10.0))
    histogram.add_value((0.5, 1.0))
    histogram.add_value((-0.5, 9.0))
    histogram.add_value((0.6, 2.0))

    counts = histogram.counts()
    assert counts.shape == (2, 2)
    assert counts.sum() == 3
    assert counts[1, 0] == 2


def test_save_and_descriptor(tmp_path):
    histogram = Histogram2D((200, 600), (5.0, 0.0), (-5.0, 100.0))
    histogram.add_value((1.0, 2.0))
    histogram.add_value((3.0, 4.0))

    data_file = tmp_path / 'reflected.dat'
    histogram.save(data_file)
    histogram.write_bov_ascii(tmp_path / 'reflected.dat.bov', 0, data_file)

    assert_array_equal(Histogram2D.load(data_file), [[1.0, 2.0], [3.0, 4.0]])
    descriptor = (tmp_path / 'reflected.dat.bov').read_text()
    assert "DATA_FILE: reflected.dat" in descriptor
    assert "PAIR_COUNT: 2" in descriptor
    assert "HISTOGRAM_BINS: 200 600" in descriptor


def test_empty_log_saves_empty_file(tmp_path):
    histogram = Histogram2D()
    histogram.save(tmp_path / 'empty.dat')
    assert (tmp_path / 'empty.dat').stat().st_size == 0
    assert Histogram2D.load(tmp_path / 'empty.dat').shape == (0, 2)
