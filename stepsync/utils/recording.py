"""
Accelerometer recording utilities.

Recordings are CSV files with a ``timestamp_ms,x,y,z`` header and one
sample per row, timestamps in milliseconds and acceleration in m/s^2.
"""

from dataclasses import dataclass
from typing import Iterator, List
import numpy as np

from ..detectors.base import InvalidSample, Sample


HEADER = ['timestamp_ms', 'x', 'y', 'z']


@dataclass
class Recording:
    """Container for a recorded acceleration stream."""

    timestamps: np.ndarray    # (N,) ms
    acceleration: np.ndarray  # (N, 3) m/s^2

    @property
    def n_samples(self) -> int:
        return len(self.timestamps)

    @property
    def duration_ms(self) -> float:
        if self.n_samples < 2:
            return 0.0
        return float(self.timestamps[-1] - self.timestamps[0])

    @property
    def sample_rate_hz(self) -> float:
        """Nominal sample rate from the median sample spacing."""
        if self.n_samples < 2:
            return 0.0
        spacing = float(np.median(np.diff(self.timestamps)))
        return 1000.0 / spacing if spacing > 0 else 0.0

    @property
    def magnitude(self) -> np.ndarray:
        return np.linalg.norm(self.acceleration, axis=1)

    def as_array(self) -> np.ndarray:
        """(N, 4) array of timestamp_ms, x, y, z rows."""
        return np.column_stack([self.timestamps, self.acceleration])

    def samples(self) -> Iterator[Sample]:
        for t, (x, y, z) in zip(self.timestamps, self.acceleration):
            yield Sample(x=float(x), y=float(y), z=float(z), timestamp=float(t))


def parse_recording(text: str, source: str = '<string>') -> Recording:
    """
    Parse CSV recording text.

    Args:
        text: CSV content including the header row
        source: Name used in error messages

    Returns:
        Recording with timestamps and acceleration arrays

    Raises:
        InvalidSample: If the header is wrong, a row is malformed,
            or there are no samples
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise InvalidSample(f"No data found in {source}")

    header = [col.strip().lower() for col in lines[0].split(',')]
    if header[0] == 'timestamp':
        header[0] = 'timestamp_ms'
    if header != HEADER:
        raise InvalidSample(
            f"Unexpected header in {source}: {lines[0]!r} (expected {','.join(HEADER)})"
        )

    rows = lines[1:]
    if not rows:
        raise InvalidSample(f"No sample rows found in {source}")

    try:
        data = np.loadtxt(rows, delimiter=',', dtype=float, ndmin=2)
    except ValueError as e:
        raise InvalidSample(f"Malformed row in {source}: {e}")

    if data.shape[1] != 4:
        raise InvalidSample(f"Expected 4 columns in {source}, got {data.shape[1]}")

    return Recording(timestamps=data[:, 0], acceleration=data[:, 1:4])


def read_recording(filepath: str) -> Recording:
    """
    Read a CSV recording from disk.

    Raises:
        FileNotFoundError: If file doesn't exist
        InvalidSample: If the content is not a valid recording
    """
    with open(filepath, 'r') as f:
        return parse_recording(f.read(), source=str(filepath))


def write_recording(filepath: str, samples: np.ndarray) -> None:
    """
    Write an (N, 4) array of timestamp_ms, x, y, z rows as CSV.
    """
    samples = np.asarray(samples, dtype=float)
    if samples.ndim != 2 or samples.shape[1] != 4:
        raise InvalidSample(f"Expected (N, 4) array, got shape {samples.shape}")

    np.savetxt(
        filepath,
        samples,
        delimiter=',',
        header=','.join(HEADER),
        comments='',
        fmt=['%.1f', '%.6f', '%.6f', '%.6f'],
    )


def recording_info(filepath: str) -> dict:
    """
    Get basic statistics about a recording.

    Args:
        filepath: Path to CSV recording

    Returns:
        Dictionary with sample count, timing and per-axis statistics
    """
    rec = read_recording(filepath)

    info = {
        'n_samples': rec.n_samples,
        'duration_ms': rec.duration_ms,
        'sample_rate_hz': round(rec.sample_rate_hz, 2),
        'magnitude_mean': float(np.mean(rec.magnitude)),
        'magnitude_max': float(np.max(rec.magnitude)),
    }

    axis_stats: List[dict] = []
    for i, axis in enumerate(('x', 'y', 'z')):
        values = rec.acceleration[:, i]
        axis_stats.append({
            'axis': axis,
            'mean': float(values.mean()),
            'std': float(values.std()),
            'range': float(values.max() - values.min()),
        })
    info['axes'] = axis_stats

    return info
