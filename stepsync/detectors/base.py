"""
Sample and result types shared by step detection backends.

A Sample comes in from the sensor collaborator, a StepSignature is the
per-sample summary kept in the classifier history, and a StepEvent is what
an accepted step hands over to the aggregator.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..config import DetectorState


class InvalidSample(ValueError):
    """Raised when raw input cannot be turned into a Sample."""


def json_number(value: float, ndigits: Optional[int] = None) -> Optional[float]:
    """JSON-safe float: None for NaN and infinities, optionally rounded."""
    if not math.isfinite(value):
        return None
    return round(value, ndigits) if ndigits is not None else value


@dataclass(frozen=True)
class Sample:
    """One tri-axial acceleration reading."""
    x: float  # m/s^2
    y: float  # m/s^2, vertical axis for the walking signature
    z: float  # m/s^2
    timestamp: float  # Monotonic time in ms

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Sample':
        """
        Parse a sample from a JSON-like mapping.

        Accepts either ``timestamp`` or ``timestamp_ms`` for the time field.

        Raises:
            InvalidSample: If a field is missing or not numeric
        """
        if not isinstance(data, Mapping):
            raise InvalidSample(f"Sample must be an object, got {type(data).__name__}")

        timestamp = data.get('timestamp', data.get('timestamp_ms'))
        values = {'x': data.get('x'), 'y': data.get('y'), 'z': data.get('z'),
                  'timestamp': timestamp}

        parsed = {}
        for name, value in values.items():
            if value is None:
                raise InvalidSample(f"Sample is missing field '{name}'")
            if isinstance(value, bool):
                raise InvalidSample(f"Sample field '{name}' must be a number")
            try:
                parsed[name] = float(value)
            except (TypeError, ValueError):
                raise InvalidSample(f"Sample field '{name}' must be a number, got {value!r}")

        return cls(**parsed)


@dataclass(frozen=True)
class StepSignature:
    """Summary of one processed sample, kept for diagnostics."""
    magnitude: float
    vertical_movement: float
    confidence: float
    timestamp: float

    def to_dict(self) -> dict:
        return {
            'magnitude': json_number(self.magnitude, 4),
            'vertical_movement': json_number(self.vertical_movement, 4),
            'confidence': json_number(self.confidence, 4),
            'timestamp': json_number(self.timestamp),
        }


@dataclass(frozen=True)
class StepDecision:
    """Outcome of evaluating a sample against the current classifier state."""
    magnitude: float
    vertical_movement: float
    significant_movement: bool
    valid_interval: bool
    vertical_step: bool
    confidence: float
    accepted: bool
    state: DetectorState  # State the sample arrived in
    time_since_last_peak: Optional[float] = None  # None before the first step


@dataclass(frozen=True)
class StepEvent:
    """A detected step."""
    timestamp: float
    confidence: float
    accepted: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'timestamp': json_number(self.timestamp),
            'confidence': json_number(self.confidence, 4),
            'accepted': self.accepted,
        }
