#!/usr/bin/env python3
"""
Replay an accelerometer recording through the step classifier.

Usage:
    python tools/replay_recording.py <recording.csv>
    python tools/replay_recording.py walk.csv --cooldown-ms 300 --plot walk.png
    python tools/replay_recording.py walk.csv --json

The recording is a CSV file with a timestamp_ms,x,y,z header.
"""

import sys
import os
import argparse
import json

import numpy as np

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stepsync.config import ClassifierConfig, InvalidConfig
from stepsync.detectors import InvalidSample, detect_steps
from stepsync.utils.recording import read_recording


def build_config(args) -> ClassifierConfig:
    overrides = {}
    for key in ('cooldown_ms', 'confidence_threshold', 'movement_threshold', 'vertical_threshold'):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value
    return ClassifierConfig.from_dict(overrides)


def summarize(events, recording) -> dict:
    timestamps = np.array([e.timestamp for e in events])
    summary = {
        'n_samples': recording.n_samples,
        'duration_ms': recording.duration_ms,
        'sample_rate_hz': round(recording.sample_rate_hz, 2),
        'steps': len(events),
        'mean_confidence': float(np.mean([e.confidence for e in events])) if events else None,
        'mean_interval_ms': float(np.mean(np.diff(timestamps))) if len(events) > 1 else None,
    }
    if recording.duration_ms > 0:
        summary['cadence_spm'] = round(len(events) / (recording.duration_ms / 60000.0), 1)
    return summary


def main():
    parser = argparse.ArgumentParser(description='Replay a recording through the step classifier')
    parser.add_argument('recording', help='Path to CSV recording')
    parser.add_argument('--cooldown-ms', type=float, help='Minimum time between steps (ms)')
    parser.add_argument('--confidence-threshold', type=float, help='Confidence needed to accept a step')
    parser.add_argument('--movement-threshold', type=float, help='Magnitude threshold (m/s^2)')
    parser.add_argument('--vertical-threshold', type=float, help='|y| threshold (m/s^2)')
    parser.add_argument('--json', action='store_true', help='Print events and summary as JSON')
    parser.add_argument('--plot', help='Save a timeline plot to this path')

    args = parser.parse_args()

    if not os.path.isfile(args.recording):
        print(f"Error: {args.recording} is not a file")
        sys.exit(1)

    try:
        config = build_config(args)
        recording = read_recording(args.recording)
    except (InvalidConfig, InvalidSample) as e:
        print(f"Error: {e}")
        sys.exit(1)

    samples = recording.as_array()
    events = detect_steps(samples, config)
    summary = summarize(events, recording)

    if args.json:
        print(json.dumps({
            'summary': summary,
            'events': [e.to_dict() for e in events],
            'config': config.to_dict(),
        }, indent=2))
    else:
        print(f"Recording: {args.recording}")
        print(f"  Samples: {summary['n_samples']} @ {summary['sample_rate_hz']} Hz")
        print(f"  Duration: {summary['duration_ms'] / 1000.0:.1f}s")
        print(f"  Steps: {summary['steps']}")
        if 'cadence_spm' in summary:
            print(f"  Cadence: {summary['cadence_spm']} steps/min")
        for event in events:
            print(f"    step @ {event.timestamp:.0f} ms (confidence {event.confidence:.2f})")

    if args.plot:
        from stepsync.utils.visualization import plot_step_timeline
        plot_step_timeline(samples, events, config, save_path=args.plot)


if __name__ == '__main__':
    main()
