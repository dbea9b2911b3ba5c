#!/usr/bin/env python3
"""
Generate a synthetic walking recording.

Usage:
    python tools/generate_walk.py walk.csv
    python tools/generate_walk.py walk.csv --steps 40 --cadence-hz 2.0 --seed 7
"""

import sys
import os
import argparse

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stepsync.config import InvalidConfig
from stepsync.utils.recording import write_recording
from stepsync.utils.synthetic import WalkConfig, generate_walking_samples


def main():
    parser = argparse.ArgumentParser(description='Generate a synthetic walking recording')
    parser.add_argument('output', help='Output CSV path')
    parser.add_argument('--steps', type=int, default=20, help='Number of steps')
    parser.add_argument('--cadence-hz', type=float, default=1.8, help='Steps per second')
    parser.add_argument('--rate-hz', type=float, default=50.0, help='Sample rate')
    parser.add_argument('--noise', type=float, default=0.2, help='Noise std (m/s^2)')
    parser.add_argument('--seed', type=int, help='Random seed')

    args = parser.parse_args()

    config = WalkConfig(
        n_steps=args.steps,
        cadence_hz=args.cadence_hz,
        rate_hz=args.rate_hz,
        noise_std=args.noise,
        seed=args.seed,
    )

    try:
        samples = generate_walking_samples(config)
    except InvalidConfig as e:
        print(f"Error: {e}")
        sys.exit(1)

    write_recording(args.output, samples)
    print(f"Wrote {len(samples)} samples ({args.steps} steps) to {args.output}")


if __name__ == '__main__':
    main()
