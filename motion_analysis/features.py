"""
Feature extraction from wrist coordinate series.

Features per series:
- Mean, variance, std: two-pass statistics
- Range: max - min (peak-to-peak excursion)
- Dominant frequency: zero-crossing rate around the mean

Engineering approach:
- Zero-crossing rate around the mean, O(n); downstream only the coarse
  periodicity band is used
- Short series return `sufficient=False` ("no opinion"), never an error
"""

import logging
from typing import Dict, Optional, Sequence

import numpy as np

from .data_models import WindowFeatures

logger = logging.getLogger(__name__)

MIN_SAMPLES = 20
MIN_STATS_SAMPLES = 2

# Deviations within this fraction of the largest one are treated as on the mean
ZERO_CROSSING_TOLERANCE = 1e-9


def extract_features(series: Sequence[float], frame_rate_hz: float) -> WindowFeatures:
    """
    Compute window features for one coordinate series.

    Args:
        series: Ordered coordinate values
        frame_rate_hz: Sampling rate of the series

    Returns:
        WindowFeatures; `sufficient` is False below MIN_SAMPLES values

    Raises:
        ValueError: If frame_rate_hz is not positive
    """
    if not frame_rate_hz > 0:
        raise ValueError(f"frame_rate_hz must be positive, got {frame_rate_hz}")

    values = np.asarray(series, dtype=float).ravel()
    sample_count = int(values.size)

    if sample_count < MIN_SAMPLES:
        return WindowFeatures.insufficient(sample_count)

    mean = float(np.mean(values))
    value_range = float(np.max(values) - np.min(values))

    if value_range == 0.0:
        # Perfectly static signal: no variance, no oscillation
        return WindowFeatures(
            mean=float(values[0]),
            variance=0.0,
            std_dev=0.0,
            range=0.0,
            dominant_frequency_hz=0.0,
            sample_count=sample_count,
            sufficient=True,
        )

    deviations = values - mean
    variance = float(np.mean(deviations ** 2))

    return WindowFeatures(
        mean=mean,
        variance=variance,
        std_dev=float(np.sqrt(variance)),
        range=value_range,
        dominant_frequency_hz=_zero_crossing_frequency(deviations, frame_rate_hz),
        sample_count=sample_count,
        sufficient=True,
    )


def count_zero_crossings(deviations: np.ndarray) -> int:
    """
    Count sign changes in a mean-centered series.

    Samples on the mean carry no sign and are skipped, so a crossing that
    lands on a sample is counted once. "On the mean" means within
    ZERO_CROSSING_TOLERANCE of the largest deviation, so the rounding left
    by mean subtraction cannot give such a sample a sign that changes with
    amplitude or offset.
    """
    deviations = np.asarray(deviations, dtype=float).ravel()
    if deviations.size < 2:
        return 0

    magnitudes = np.abs(deviations)
    signs = np.sign(deviations)
    signs[magnitudes <= ZERO_CROSSING_TOLERANCE * np.max(magnitudes)] = 0
    signs = signs[signs != 0]
    if signs.size < 2:
        return 0
    return int(np.count_nonzero(signs[1:] != signs[:-1]))


def _zero_crossing_frequency(deviations: np.ndarray, frame_rate_hz: float) -> float:
    """Half the crossing count per second of series duration."""
    duration = deviations.size / frame_rate_hz
    if duration <= 0:
        return 0.0
    cycles = count_zero_crossings(deviations) / 2.0
    return float(cycles / duration)


def compute_movement_stats(series: Sequence[float]) -> Optional[Dict[str, float]]:
    """
    Descriptive statistics of a coordinate series for display.

    Unlike extract_features, this only needs two values.

    Returns:
        Dict with mean, variance, std_dev, range, count; None below two values
    """
    values = np.asarray(series, dtype=float).ravel()
    if values.size < MIN_STATS_SAMPLES:
        return None

    mean = float(np.mean(values))
    variance = float(np.mean((values - mean) ** 2))

    return {
        'mean': mean,
        'variance': variance,
        'std_dev': float(np.sqrt(variance)),
        'range': float(np.max(values) - np.min(values)),
        'count': int(values.size),
    }
