"""
Synthetic walking signals.

Generates acceleration streams shaped like a phone carried while walking:
gravity on z and one short vertical (y) impulse per heel strike. Used for
demos and for testing the classifier end to end without a device.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from ..config import InvalidConfig


GRAVITY_MS2 = 9.81


@dataclass
class WalkConfig:
    """Parameters of a synthetic walk."""
    n_steps: int = 20
    cadence_hz: float = 1.8          # Steps per second
    rate_hz: float = 50.0            # Samples per second
    step_peak_ms2: float = 11.0      # Vertical impulse amplitude
    step_width_ms: float = 40.0      # Gaussian sigma of the impulse
    noise_std: float = 0.2           # m/s^2, per axis
    seed: Optional[int] = None

    def validate(self) -> 'WalkConfig':
        if self.n_steps < 0:
            raise InvalidConfig(f"n_steps must be >= 0, got {self.n_steps}")
        for name in ('cadence_hz', 'rate_hz', 'step_width_ms'):
            if not getattr(self, name) > 0:
                raise InvalidConfig(f"{name} must be > 0, got {getattr(self, name)}")
        if self.noise_std < 0:
            raise InvalidConfig(f"noise_std must be >= 0, got {self.noise_std}")
        return self


def step_times_ms(config: WalkConfig) -> np.ndarray:
    """Heel-strike times; the first lands half a period into the walk."""
    period_ms = 1000.0 / config.cadence_hz
    return period_ms * (np.arange(config.n_steps) + 0.5)


def generate_walking_samples(config: WalkConfig = None, **overrides) -> np.ndarray:
    """
    Generate a walking acceleration stream.

    Args:
        config: Walk parameters (defaults if None)
        **overrides: Field overrides applied on top of config

    Returns:
        (N, 4) array of timestamp_ms, x, y, z rows
    """
    config = config or WalkConfig()
    if overrides:
        config = WalkConfig(**{**config.__dict__, **overrides})
    config.validate()

    rng = np.random.default_rng(config.seed)
    period_ms = 1000.0 / config.cadence_hz
    duration_ms = period_ms * config.n_steps
    timestamps = np.arange(0.0, duration_ms, 1000.0 / config.rate_hz)
    n = len(timestamps)

    acc = np.zeros((n, 3))
    acc[:, 2] = GRAVITY_MS2

    # Sum of Gaussian impulses, one per heel strike
    for t_step in step_times_ms(config):
        acc[:, 1] += config.step_peak_ms2 * np.exp(
            -0.5 * ((timestamps - t_step) / config.step_width_ms) ** 2
        )

    if config.noise_std > 0:
        acc += rng.normal(0.0, config.noise_std, acc.shape)

    return np.column_stack([timestamps, acc])
