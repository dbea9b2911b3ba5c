"""
Unified configuration for the step detection system.

This module contains all configurable parameters organized into logical groups.
Defaults reproduce the fixed-threshold heuristic of the StepSync tracker.
"""

import math
from dataclasses import dataclass, field, asdict, replace as dc_replace
from typing import Any, Dict
from enum import Enum


class InvalidConfig(ValueError):
    """Raised when a configuration value is out of range or not finite."""


# Upper bound on the signature ring buffer capacity
MAX_HISTORY_SIZE = 10


class DetectorState(Enum):
    """Logical cooldown state of the step classifier."""
    ARMED = "armed"       # Cooldown elapsed, a step may be accepted
    COOLING = "cooling"   # Within cooldown of the last accepted step


@dataclass(frozen=True)
class ConfidenceWeights:
    """
    Weights of the three boolean indicators in the confidence score.

    With the defaults the maximum attainable confidence is 1.0. Weights are
    not required to sum to 1.0 and the resulting confidence is never clamped.
    """
    movement: float = 0.4   # magnitude above movement threshold
    interval: float = 0.3   # cooldown elapsed since last accepted step
    vertical: float = 0.3   # |y| above vertical threshold

    def as_tuple(self):
        return (self.movement, self.interval, self.vertical)


@dataclass(frozen=True)
class ClassifierConfig:
    """
    Main configuration for the step classifier.

    Thresholds are in m/s^2 (acceleration may include gravity), times in ms.
    Instances are immutable; derive variants with replace().
    """

    # Minimum time between two accepted steps
    cooldown_ms: float = 250.0

    # Confidence must strictly exceed this to accept a step
    confidence_threshold: float = 0.7

    # Standard gravity: magnitude must exceed it to count as movement
    movement_threshold: float = 9.8

    # |y| must exceed this to count as a vertical (walking) signature
    vertical_threshold: float = 6.0

    weights: ConfidenceWeights = field(default_factory=ConfidenceWeights)

    # Capacity of the signature ring buffer, at most MAX_HISTORY_SIZE
    history_size: int = MAX_HISTORY_SIZE

    def validate(self) -> 'ClassifierConfig':
        """
        Check every field, raising InvalidConfig on the first bad value.

        Returns:
            self, so construction can chain on it
        """
        numeric = {
            'cooldown_ms': self.cooldown_ms,
            'confidence_threshold': self.confidence_threshold,
            'movement_threshold': self.movement_threshold,
            'vertical_threshold': self.vertical_threshold,
            'weights.movement': self.weights.movement,
            'weights.interval': self.weights.interval,
            'weights.vertical': self.weights.vertical,
        }
        for name, value in numeric.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidConfig(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidConfig(f"{name} must be finite, got {value!r}")

        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise InvalidConfig(
                f"confidence_threshold must lie in [0, 1], got {self.confidence_threshold}"
            )
        if self.cooldown_ms < 0:
            raise InvalidConfig(f"cooldown_ms must be >= 0, got {self.cooldown_ms}")
        if (isinstance(self.history_size, bool) or not isinstance(self.history_size, int)
                or not 1 <= self.history_size <= MAX_HISTORY_SIZE):
            raise InvalidConfig(
                f"history_size must be an int in [1, {MAX_HISTORY_SIZE}], got {self.history_size!r}"
            )
        return self

    def replace(self, **overrides) -> 'ClassifierConfig':
        """Return a validated copy with the given fields replaced."""
        return dc_replace(self, **overrides).validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClassifierConfig':
        """
        Build a validated config from a (possibly partial) dictionary.

        Unknown keys raise InvalidConfig.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidConfig(f"config must be an object, got {type(data).__name__}")

        data = dict(data)
        weights = data.pop('weights', None) or {}
        if isinstance(weights, (list, tuple)):
            if len(weights) != 3:
                raise InvalidConfig("weights must have exactly three values")
            weights = dict(zip(('movement', 'interval', 'vertical'), weights))
        if not isinstance(weights, dict):
            raise InvalidConfig("weights must be an object or a 3-item list")

        known = {'cooldown_ms', 'confidence_threshold', 'movement_threshold',
                 'vertical_threshold', 'history_size'}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfig(f"Unknown config keys: {sorted(unknown)}")
        unknown_weights = set(weights) - {'movement', 'interval', 'vertical'}
        if unknown_weights:
            raise InvalidConfig(f"Unknown weight keys: {sorted(unknown_weights)}")

        return cls(weights=ConfidenceWeights(**weights), **data).validate()


@dataclass(frozen=True)
class TrackerConfig:
    """Configuration of the step aggregator."""

    daily_goal: int = 10000

    # Number of activity log entries kept (newest first)
    activity_log_size: int = 10

    def validate(self) -> 'TrackerConfig':
        for name in ('daily_goal', 'activity_log_size'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidConfig(f"{name} must be a positive int, got {value!r}")
        return self


# Default configuration instance
DEFAULT_CONFIG = ClassifierConfig()
