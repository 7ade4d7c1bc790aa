"""
tests/test_scan.py - Multiplicity and DCC-fraction scans.
"""

import pytest
import torch

from dcctoy import scan, scan_dcc_fraction, scan_multiplicity
from dcctoy.scan import DEFAULT_DCC_FRACTIONS, multiplicity_windows


class TestScans:
    def test_default_windows(self):
        assert multiplicity_windows() == [
            (1.0, 201.0),
            (201.0, 401.0),
            (401.0, 601.0),
            (601.0, 801.0),
            (801.0, 1001.0),
        ]

    def test_window_validation(self):
        with pytest.raises(ValueError):
            multiplicity_windows(0)
        with pytest.raises(ValueError):
            multiplicity_windows(3, width=0.0)

    def test_default_fractions(self):
        assert DEFAULT_DCC_FRACTIONS[0] == 0.0
        assert DEFAULT_DCC_FRACTIONS[-1] == 1.0
        assert len(DEFAULT_DCC_FRACTIONS) == 11

    def test_multiplicity_scan_points(self):
        seen = []
        scan = scan_multiplicity(
            windows=multiplicity_windows(3),
            n_events=300,
            seed=4,
            progress=seen.append,
        )
        assert scan.variable == "multiplicity"
        assert scan.values == [101.0, 301.0, 501.0]
        assert len(seen) == 3
        assert all(point.config.dcc_fraction == 0.0 for point in scan.points)
        assert all(value is not None for value in scan.series("nu_dyn_ch0"))

    def test_dcc_fraction_scan_is_reproducible(self):
        kwargs = dict(fractions=(0.0, 0.5, 1.0), n_events=200, seed=12, vectorized=True)
        first = scan_dcc_fraction(**kwargs)
        second = scan_dcc_fraction(**kwargs)
        assert first.series("nu_dyn_ch0") == second.series("nu_dyn_ch0")
        assert [point.config.min_mult for point in first.points] == [800.0] * 3

    def test_dcc_signal_grows_with_fraction(self):
        scan = scan_dcc_fraction(fractions=(0.0, 1.0), n_events=2000, seed=2, vectorized=True)
        nu_binomial, nu_dcc = scan.series("nu_dyn_ch0")
        assert nu_dcc > nu_binomial + 0.5

    def test_precision_reaches_point_streams(self, monkeypatch):
        seen = []
        real_stream = scan.RandomStream

        def recording_stream(seed, *, dtype):
            seen.append(dtype)
            return real_stream(seed, dtype=dtype)

        monkeypatch.setattr(scan, "RandomStream", recording_stream)
        scan_multiplicity(windows=multiplicity_windows(2), n_events=50, seed=3, dtype=torch.float32)
        assert seen == [torch.float32, torch.float32]
