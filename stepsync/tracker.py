"""
Step aggregator.

Consumes the events of a StepClassifier and keeps the user-facing totals:
cumulative step count (automatic and manual), a short activity log and
progress toward a daily goal. Rendering and persistence are left to the
caller; summary() returns plain data for either.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .config import ClassifierConfig, InvalidConfig, TrackerConfig
from .detectors import Sample, StepClassifier, StepEvent
from .detectors.base import json_number


STEP_DETECTED = "Step detected"
MANUAL_STEP_ADDED = "Manual step added"


@dataclass(frozen=True)
class ActivityEntry:
    """One line of the activity log."""
    timestamp: float  # ms, from the sample or the manual entry
    message: str

    def to_dict(self) -> dict:
        return {'timestamp': json_number(self.timestamp), 'message': self.message}


class StepTracker:
    """
    Count steps detected by a classifier plus manually entered ones.

    Manual steps do not reset the classifier cooldown.
    """

    def __init__(
        self,
        classifier_config: ClassifierConfig = None,
        tracker_config: TrackerConfig = None
    ):
        self.classifier = StepClassifier(classifier_config)
        self.tracker_config = (tracker_config or TrackerConfig()).validate()
        self.daily_goal = self.tracker_config.daily_goal

        self.auto_steps = 0
        self.manual_steps = 0
        self._activity_log = deque(maxlen=self.tracker_config.activity_log_size)

    @property
    def steps(self) -> int:
        return self.auto_steps + self.manual_steps

    @property
    def progress_percent(self) -> float:
        """Progress toward the daily goal, capped at 100."""
        return min(self.steps / self.daily_goal * 100.0, 100.0)

    @property
    def activity_log(self) -> List[ActivityEntry]:
        """Activity log, newest first."""
        return list(reversed(self._activity_log))

    def process(self, sample: Sample) -> Optional[StepEvent]:
        event = self.classifier.process(sample)
        if event is not None:
            self.auto_steps += 1
            self._log(event.timestamp, STEP_DETECTED)
        return event

    def process_many(self, samples: Iterable[Sample]) -> List[StepEvent]:
        """Process samples in order and return the accepted events."""
        events = []
        for sample in samples:
            event = self.process(sample)
            if event is not None:
                events.append(event)
        return events

    def add_manual_step(self, timestamp: float) -> int:
        """
        Record a step entered by hand.

        Returns:
            New total step count
        """
        self.manual_steps += 1
        self._log(timestamp, MANUAL_STEP_ADDED)
        return self.steps

    def set_daily_goal(self, goal: int) -> None:
        if isinstance(goal, bool) or not isinstance(goal, int) or goal < 1:
            raise InvalidConfig(f"daily_goal must be a positive int, got {goal!r}")
        self.daily_goal = goal

    def reset(self) -> None:
        """Zero the counters and clear the log and classifier state."""
        self.auto_steps = 0
        self.manual_steps = 0
        self._activity_log.clear()
        self.classifier.reset()

    def summary(self) -> Dict[str, Any]:
        """Convert current totals to a dictionary for JSON serialization."""
        return {
            'steps': self.steps,
            'auto_steps': self.auto_steps,
            'manual_steps': self.manual_steps,
            'daily_goal': self.daily_goal,
            'progress_percent': round(self.progress_percent, 1),
            'last_step_timestamp': self.classifier.last_peak_timestamp,
            'activity_log': [entry.to_dict() for entry in self.activity_log],
        }

    def _log(self, timestamp: float, message: str) -> None:
        self._activity_log.append(ActivityEntry(timestamp=timestamp, message=message))
