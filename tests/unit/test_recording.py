"""Unit tests for recording I/O and synthetic walks."""

import math

import numpy as np
import pytest

from stepsync.config import InvalidConfig
from stepsync.detectors import InvalidSample, Sample
from stepsync.utils.recording import (
    parse_recording,
    read_recording,
    recording_info,
    write_recording,
)
from stepsync.utils.synthetic import (
    GRAVITY_MS2,
    WalkConfig,
    generate_walking_samples,
    step_times_ms,
)


VALID_CSV = """timestamp_ms,x,y,z
0,0.0,0.0,9.8
20,0.1,0.2,9.7
40,0.0,10.0,9.9
"""


class TestParseRecording:
    """Tests for CSV parsing."""

    def test_parse_valid(self):
        rec = parse_recording(VALID_CSV)
        assert rec.n_samples == 3
        np.testing.assert_array_equal(rec.timestamps, [0, 20, 40])
        assert rec.acceleration.shape == (3, 3)
        assert rec.acceleration[2, 1] == 10.0
        assert rec.duration_ms == 40.0
        assert rec.sample_rate_hz == pytest.approx(50.0)

    def test_samples_iterator(self):
        samples = list(parse_recording(VALID_CSV).samples())
        assert samples[0] == Sample(x=0.0, y=0.0, z=9.8, timestamp=0.0)
        assert len(samples) == 3

    def test_as_array(self):
        array = parse_recording(VALID_CSV).as_array()
        assert array.shape == (3, 4)
        np.testing.assert_array_equal(array[:, 0], [0, 20, 40])

    def test_timestamp_header_alias(self):
        rec = parse_recording("timestamp,x,y,z\n5,1,2,3\n")
        assert rec.timestamps[0] == 5.0

    def test_single_row(self):
        rec = parse_recording("timestamp_ms,x,y,z\n5,1,2,3\n")
        assert rec.n_samples == 1
        assert rec.duration_ms == 0.0
        assert rec.sample_rate_hz == 0.0

    def test_non_finite_values_parse(self):
        rec = parse_recording("timestamp_ms,x,y,z\n0,nan,1,inf\n")
        assert math.isnan(rec.acceleration[0, 0])
        assert math.isinf(rec.acceleration[0, 2])

    @pytest.mark.parametrize("text", [
        "",
        "timestamp_ms,x,y,z\n",
        "time,x,y,z\n0,0,0,0\n",
        "timestamp_ms,x,y,z\n0,0,abc,0\n",
        "timestamp_ms,x,y,z\n0,0,0\n",
    ])
    def test_parse_invalid(self, text):
        with pytest.raises(InvalidSample):
            parse_recording(text)


class TestRecordingFiles:
    """Tests for reading and writing recordings on disk."""

    def test_write_then_read(self, tmp_path):
        samples = generate_walking_samples(n_steps=3, seed=1)
        path = tmp_path / "walk.csv"
        write_recording(str(path), samples)

        rec = read_recording(str(path))
        assert rec.n_samples == len(samples)
        np.testing.assert_allclose(rec.as_array(), samples, atol=1e-5)

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_recording(str(tmp_path / "missing.csv"))

    def test_write_bad_shape(self, tmp_path):
        with pytest.raises(InvalidSample):
            write_recording(str(tmp_path / "bad.csv"), np.zeros((3, 3)))

    def test_recording_info(self, tmp_path):
        path = tmp_path / "rec.csv"
        path.write_text(VALID_CSV)
        info = recording_info(str(path))

        assert info['n_samples'] == 3
        assert info['sample_rate_hz'] == 50.0
        assert [a['axis'] for a in info['axes']] == ['x', 'y', 'z']
        assert info['magnitude_max'] == pytest.approx(math.sqrt(100 + 9.9 ** 2))


class TestSyntheticWalk:
    """Tests for the synthetic walking generator."""

    def test_shape_and_timing(self):
        samples = generate_walking_samples(n_steps=10, cadence_hz=2.0, rate_hz=50.0, seed=0)
        assert samples.shape[1] == 4
        # 10 steps at 2 Hz is 5 s at 50 Hz
        assert len(samples) == 250
        np.testing.assert_allclose(np.diff(samples[:, 0]), 20.0)

    def test_gravity_on_z(self):
        samples = generate_walking_samples(n_steps=5, noise_std=0.0)
        np.testing.assert_allclose(samples[:, 3], GRAVITY_MS2)

    def test_deterministic_with_seed(self):
        a = generate_walking_samples(n_steps=5, seed=42)
        b = generate_walking_samples(n_steps=5, seed=42)
        np.testing.assert_array_equal(a, b)

    def test_step_times(self):
        times = step_times_ms(WalkConfig(n_steps=3, cadence_hz=2.0))
        np.testing.assert_allclose(times, [250.0, 750.0, 1250.0])

    def test_vertical_peaks_at_step_times(self):
        samples = generate_walking_samples(n_steps=4, cadence_hz=2.0, rate_hz=100.0, noise_std=0.0)
        for t_step in step_times_ms(WalkConfig(n_steps=4, cadence_hz=2.0)):
            idx = int(np.argmin(np.abs(samples[:, 0] - t_step)))
            assert samples[idx, 2] == pytest.approx(11.0, abs=0.01)

    def test_zero_steps(self):
        assert generate_walking_samples(n_steps=0).shape == (0, 4)

    @pytest.mark.parametrize("kwargs", [
        {'n_steps': -1},
        {'cadence_hz': 0},
        {'rate_hz': -10},
        {'noise_std': -0.1},
    ])
    def test_invalid_config(self, kwargs):
        with pytest.raises(InvalidConfig):
            generate_walking_samples(**kwargs)
