"""Unit tests for the step tracker."""

import pytest

from stepsync.config import ClassifierConfig, InvalidConfig, TrackerConfig
from stepsync.detectors import Sample
from stepsync.tracker import ActivityEntry, StepTracker, MANUAL_STEP_ADDED, STEP_DETECTED


def strong(t: float) -> Sample:
    return Sample(x=0.0, y=10.0, z=9.9, timestamp=t)


def quiet(t: float) -> Sample:
    return Sample(x=0.0, y=0.0, z=9.8, timestamp=t)


class TestStepTracker:
    """Tests for step aggregation."""

    def test_initial_state(self):
        tracker = StepTracker()
        assert tracker.steps == 0
        assert tracker.daily_goal == 10000
        assert tracker.progress_percent == 0.0
        assert tracker.activity_log == []

    def test_counts_accepted_steps(self):
        tracker = StepTracker()
        samples = [quiet(0), strong(1000), strong(1100), strong(1300)]
        events = tracker.process_many(samples)

        assert [e.timestamp for e in events] == [1000, 1300]
        assert tracker.steps == 2
        assert tracker.auto_steps == 2
        assert tracker.activity_log[0] == ActivityEntry(timestamp=1300, message=STEP_DETECTED)

    def test_process_returns_event(self):
        tracker = StepTracker()
        assert tracker.process(quiet(0)) is None
        assert tracker.process(strong(10)).timestamp == 10

    def test_manual_step(self):
        tracker = StepTracker()
        total = tracker.add_manual_step(500)

        assert total == 1
        assert tracker.manual_steps == 1
        assert tracker.auto_steps == 0
        assert tracker.activity_log == [ActivityEntry(timestamp=500, message=MANUAL_STEP_ADDED)]

    def test_manual_step_does_not_touch_cooldown(self):
        tracker = StepTracker()
        tracker.add_manual_step(0)
        assert tracker.process(strong(100)) is not None
        assert tracker.steps == 2

    def test_activity_log_newest_first_and_capped(self):
        tracker = StepTracker()
        for i in range(15):
            tracker.add_manual_step(i * 100)

        log = tracker.activity_log
        assert len(log) == 10
        assert [entry.timestamp for entry in log] == [i * 100 for i in range(14, 4, -1)]

    def test_custom_log_size(self):
        tracker = StepTracker(tracker_config=TrackerConfig(activity_log_size=2))
        for i in range(5):
            tracker.add_manual_step(i)
        assert [entry.timestamp for entry in tracker.activity_log] == [4, 3]

    def test_progress_capped(self):
        tracker = StepTracker(tracker_config=TrackerConfig(daily_goal=4))
        tracker.add_manual_step(0)
        assert tracker.progress_percent == pytest.approx(25.0)
        for t in range(1, 10):
            tracker.add_manual_step(t)
        assert tracker.progress_percent == 100.0

    def test_set_daily_goal(self):
        tracker = StepTracker()
        tracker.add_manual_step(0)
        tracker.set_daily_goal(10)
        assert tracker.daily_goal == 10
        assert tracker.progress_percent == pytest.approx(10.0)

    @pytest.mark.parametrize("goal", [0, -1, 2.5, None, True])
    def test_set_daily_goal_invalid(self, goal):
        tracker = StepTracker()
        with pytest.raises(InvalidConfig):
            tracker.set_daily_goal(goal)
        assert tracker.daily_goal == 10000

    def test_classifier_config_passed_through(self):
        tracker = StepTracker(ClassifierConfig(cooldown_ms=50))
        tracker.process_many([strong(1000), strong(1100)])
        assert tracker.steps == 2

    def test_invalid_configs(self):
        with pytest.raises(InvalidConfig):
            StepTracker(ClassifierConfig(confidence_threshold=-1))
        with pytest.raises(InvalidConfig):
            StepTracker(tracker_config=TrackerConfig(daily_goal=0))

    def test_reset(self):
        tracker = StepTracker()
        tracker.process(strong(1000))
        tracker.add_manual_step(1001)
        tracker.reset()

        assert tracker.steps == 0
        assert tracker.activity_log == []
        assert tracker.classifier.last_peak_timestamp is None
        assert tracker.process(strong(1002)) is not None

    def test_summary(self):
        tracker = StepTracker(tracker_config=TrackerConfig(daily_goal=8))
        tracker.process(strong(1000))
        tracker.add_manual_step(1500)

        summary = tracker.summary()
        assert summary['steps'] == 2
        assert summary['auto_steps'] == 1
        assert summary['manual_steps'] == 1
        assert summary['daily_goal'] == 8
        assert summary['progress_percent'] == 25.0
        assert summary['last_step_timestamp'] == 1000
        assert summary['activity_log'][0] == {'timestamp': 1500, 'message': MANUAL_STEP_ADDED}
