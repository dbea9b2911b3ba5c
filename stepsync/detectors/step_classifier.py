"""
Fixed-threshold step classifier.

Each acceleration sample is scored on three boolean indicators:

1. Significant movement: magnitude of the acceleration vector above
   standard gravity
2. Valid interval: more than the cooldown elapsed since the last step
3. Vertical step: |y| above the walking threshold

The weighted sum of the indicators is the confidence. A step is accepted
when the confidence exceeds the threshold and the interval is valid; the
interval therefore counts twice, once as a weight and once as a gate.

Non-finite acceleration never counts as movement and is never accepted.
A sample timestamped before the last accepted step yields a negative
interval and is rejected.
"""

import math
from collections import deque
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from .base import InvalidSample, Sample, StepDecision, StepEvent, StepSignature
from ..config import ClassifierConfig, DetectorState, DEFAULT_CONFIG


class StepClassifier:
    """
    Stateful step detector fed one sample at a time.

    State is the timestamp of the last accepted step plus a bounded ring
    buffer of signatures. Time comes only from the samples, so replaying
    the same stream yields the same events. Not thread-safe: calls to
    process() must be serialized and arrive in timestamp order.
    """

    def __init__(self, config: ClassifierConfig = None):
        self._config = (config or DEFAULT_CONFIG).validate()
        self._last_peak_timestamp: Optional[float] = None
        self._history = deque(maxlen=self._config.history_size)

    @property
    def config(self) -> ClassifierConfig:
        """Active configuration. Change it through reconfigure()."""
        return self._config

    @property
    def last_peak_timestamp(self) -> Optional[float]:
        """Timestamp of the last accepted step, None before the first."""
        return self._last_peak_timestamp

    @property
    def signature_history(self) -> Tuple[StepSignature, ...]:
        """Most recent signatures, oldest first."""
        return tuple(self._history)

    def state_at(self, timestamp: float) -> DetectorState:
        """Cooldown state as seen by a sample arriving at ``timestamp``."""
        if self._valid_interval(timestamp):
            return DetectorState.ARMED
        return DetectorState.COOLING

    def evaluate(self, sample: Sample) -> StepDecision:
        """
        Score a sample against the current state without changing it.

        Args:
            sample: Acceleration reading

        Returns:
            StepDecision with the indicators, confidence and verdict
        """
        cfg = self._config
        weights = cfg.weights

        magnitude = math.sqrt(sample.x * sample.x + sample.y * sample.y + sample.z * sample.z)
        vertical_movement = abs(sample.y)
        finite = sample.is_finite

        significant_movement = finite and magnitude > cfg.movement_threshold
        valid_interval = self._valid_interval(sample.timestamp)
        vertical_step = finite and vertical_movement > cfg.vertical_threshold

        confidence = 0.0
        confidence += weights.movement if significant_movement else 0.0
        confidence += weights.interval if valid_interval else 0.0
        confidence += weights.vertical if vertical_step else 0.0

        accepted = finite and confidence > cfg.confidence_threshold and valid_interval

        if self._last_peak_timestamp is None:
            time_since_last_peak = None
        else:
            time_since_last_peak = sample.timestamp - self._last_peak_timestamp

        return StepDecision(
            magnitude=magnitude,
            vertical_movement=vertical_movement,
            significant_movement=significant_movement,
            valid_interval=valid_interval,
            vertical_step=vertical_step,
            confidence=confidence,
            accepted=accepted,
            state=DetectorState.ARMED if valid_interval else DetectorState.COOLING,
            time_since_last_peak=time_since_last_peak,
        )

    def process(self, sample: Sample) -> Optional[StepEvent]:
        """
        Process one sample and report a step if one is detected.

        The signature history is updated for every sample; the last peak
        timestamp only moves on acceptance.

        Returns:
            StepEvent for an accepted step, otherwise None
        """
        decision = self.evaluate(sample)

        self._history.append(StepSignature(
            magnitude=decision.magnitude,
            vertical_movement=decision.vertical_movement,
            confidence=decision.confidence,
            timestamp=sample.timestamp,
        ))

        if not decision.accepted:
            return None

        self._last_peak_timestamp = sample.timestamp
        return StepEvent(
            timestamp=sample.timestamp,
            confidence=decision.confidence,
            accepted=True,
        )

    def reconfigure(self, config: ClassifierConfig) -> None:
        """
        Replace the configuration.

        The last peak is kept. If the history shrinks, the most recent
        signatures survive.
        """
        self._config = config.validate()
        self._history = deque(self._history, maxlen=self._config.history_size)

    def reset(self) -> None:
        """Forget the last step and clear the history."""
        self._last_peak_timestamp = None
        self._history.clear()

    def _valid_interval(self, timestamp: float) -> bool:
        if not math.isfinite(timestamp):
            return False
        if self._last_peak_timestamp is None:
            return True
        return timestamp - self._last_peak_timestamp > self._config.cooldown_ms


def _as_samples(samples: Union[np.ndarray, Iterable]) -> List[Sample]:
    """Normalize an (N, 4) array of timestamp, x, y, z rows or Samples."""
    if not isinstance(samples, np.ndarray):
        samples = list(samples)
        if all(isinstance(s, Sample) for s in samples):
            return samples

    array = np.asarray(samples, dtype=float)
    if array.size == 0:
        return []
    if array.ndim != 2 or array.shape[1] != 4:
        raise InvalidSample(
            f"Expected (N, 4) array of timestamp, x, y, z; got shape {array.shape}"
        )

    return [Sample(x=float(x), y=float(y), z=float(z), timestamp=float(t))
            for t, x, y, z in array]


def detect_steps(
    samples: Union[np.ndarray, Iterable],
    config: ClassifierConfig = None
) -> List[StepEvent]:
    """
    Convenience function for offline step detection.

    Args:
        samples: (N, 4) array of timestamp_ms, x, y, z rows, or Samples
        config: Classifier configuration

    Returns:
        Accepted step events in stream order
    """
    classifier = StepClassifier(config)
    events = []
    for sample in _as_samples(samples):
        event = classifier.process(sample)
        if event is not None:
            events.append(event)
    return events
