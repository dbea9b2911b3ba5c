"""Step detection backends."""

from .base import InvalidSample, Sample, StepDecision, StepEvent, StepSignature
from .step_classifier import StepClassifier, detect_steps

__all__ = [
    "InvalidSample",
    "Sample",
    "StepDecision",
    "StepEvent",
    "StepSignature",
    "StepClassifier",
    "detect_steps",
]
