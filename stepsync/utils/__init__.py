"""Utility functions."""

from .recording import (
    Recording,
    parse_recording,
    read_recording,
    write_recording,
    recording_info,
)
from .synthetic import WalkConfig, generate_walking_samples, step_times_ms
from .visualization import plot_step_timeline, HAS_MATPLOTLIB

__all__ = [
    "Recording",
    "parse_recording",
    "read_recording",
    "write_recording",
    "recording_info",
    "WalkConfig",
    "generate_walking_samples",
    "step_times_ms",
    "plot_step_timeline",
    "HAS_MATPLOTLIB",
]
