"""
Visualization utilities for step detection.

Plots an acceleration stream against the classifier thresholds with the
accepted steps marked.
"""

from typing import Any, List, Optional, Tuple
import numpy as np

try:
    import matplotlib.pyplot as plt
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from ..config import ClassifierConfig, DEFAULT_CONFIG
from ..detectors.base import StepEvent


STEP_COLOR = '#F44336'        # Red
MAGNITUDE_COLOR = '#2196F3'   # Blue
VERTICAL_COLOR = '#4CAF50'    # Green


def _check_matplotlib():
    if not HAS_MATPLOTLIB:
        raise ImportError("matplotlib required for visualization. Install with: pip install matplotlib")


def plot_step_timeline(
    samples: np.ndarray,
    events: List[StepEvent],
    config: ClassifierConfig = None,
    figsize: Tuple[int, int] = (14, 7),
    save_path: Optional[str] = None
) -> Optional[Any]:
    """
    Plot acceleration magnitude and vertical movement with detected steps.

    Args:
        samples: (N, 4) array of timestamp_ms, x, y, z rows
        events: Accepted step events
        config: Classifier configuration used for the thresholds
        figsize: Figure size
        save_path: Path to save figure (optional)

    Returns:
        matplotlib figure object
    """
    _check_matplotlib()
    cfg = config or DEFAULT_CONFIG

    samples = np.asarray(samples, dtype=float)
    time_s = samples[:, 0] / 1000.0
    magnitude = np.linalg.norm(samples[:, 1:4], axis=1)
    vertical = np.abs(samples[:, 2])
    step_times_s = [e.timestamp / 1000.0 for e in events]

    fig, axes = plt.subplots(2, 1, figsize=figsize, sharex=True)

    # 1. Magnitude
    ax = axes[0]
    ax.plot(time_s, magnitude, color=MAGNITUDE_COLOR, linewidth=1.2)
    ax.axhline(y=cfg.movement_threshold, color='orange', linestyle=':', alpha=0.8,
               label='Movement threshold')
    ax.set_ylabel('|a| (m/s²)')
    ax.set_title('Acceleration Magnitude')
    ax.grid(True, alpha=0.3)

    # 2. Vertical movement
    ax = axes[1]
    ax.plot(time_s, vertical, color=VERTICAL_COLOR, linewidth=1.2)
    ax.axhline(y=cfg.vertical_threshold, color='orange', linestyle=':', alpha=0.8,
               label='Vertical threshold')
    ax.set_ylabel('|y| (m/s²)')
    ax.set_xlabel('Time (s)')
    ax.set_title('Vertical Movement')
    ax.grid(True, alpha=0.3)

    for ax in axes:
        for t in step_times_s:
            ax.axvline(x=t, color=STEP_COLOR, linestyle='-', alpha=0.5, linewidth=1)
        ax.legend(loc='upper right')

    axes[0].text(
        0.02, 0.95, f"{len(events)} steps",
        transform=axes[0].transAxes,
        fontsize=12,
        fontweight='bold',
        verticalalignment='top',
        bbox=dict(boxstyle='round', facecolor='white', alpha=0.8)
    )

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Saved figure to {save_path}")

    return fig
