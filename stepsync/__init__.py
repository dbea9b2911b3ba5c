"""
Step Detection System

A lightweight fixed-threshold step classifier for streams of tri-axial
acceleration samples, with a step aggregator for counting.
"""

from .config import (
    ClassifierConfig,
    ConfidenceWeights,
    DetectorState,
    InvalidConfig,
    TrackerConfig,
    DEFAULT_CONFIG,
)
from .detectors import (
    InvalidSample,
    Sample,
    StepDecision,
    StepEvent,
    StepSignature,
    StepClassifier,
    detect_steps,
)
from .tracker import ActivityEntry, StepTracker

__version__ = "1.0.0"
__all__ = [
    # Config
    "ClassifierConfig",
    "ConfidenceWeights",
    "DetectorState",
    "InvalidConfig",
    "TrackerConfig",
    "DEFAULT_CONFIG",
    # Detection
    "InvalidSample",
    "Sample",
    "StepDecision",
    "StepEvent",
    "StepSignature",
    "StepClassifier",
    "detect_steps",
    # Aggregation
    "ActivityEntry",
    "StepTracker",
]
