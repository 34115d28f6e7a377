"""
Real-time analysis of a single coordinate series.

Scores the trailing window of a caller-supplied series for low-latency
feedback (e.g. a live indicator), bypassing the sample buffer and the
session aggregator. It calls the same extract_features/classify functions
as the session cycle, so both paths agree on the score for the same slice.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from .classification import classify
from .config import ClassifierSettings
from .data_models import RealTimeScore
from .features import extract_features

logger = logging.getLogger(__name__)

REAL_TIME_SERIES_LABEL = 'series'


def analyze_real_time(
    coordinates: Sequence[float],
    window: int = 50,
    frame_rate_hz: float = 25.0,
    timestamp: float = 0.0,
    settings: Optional[ClassifierSettings] = None
) -> RealTimeScore:
    """
    Score the trailing `window` values of a coordinate series.

    Args:
        coordinates: Ordered coordinate values (oldest first)
        window: Number of trailing values to analyze
        frame_rate_hz: Sampling rate of the series
        timestamp: Time to stamp the score with (seconds)
        settings: Classification calibration (defaults if None)

    Returns:
        RealTimeScore (sufficient=False when fewer than MIN_SAMPLES values)

    Raises:
        ValueError: If window is not positive
    """
    if window <= 0:
        raise ValueError(f"window must be positive, got {window}")

    values = np.asarray(coordinates, dtype=float).ravel()
    recent = values[-int(window):]

    features = extract_features(recent, frame_rate_hz)
    result = classify(
        {REAL_TIME_SERIES_LABEL: features},
        timestamp=timestamp,
        settings=settings
    )

    return RealTimeScore(
        score=result.score,
        timestamp=float(timestamp),
        tier=result.tier,
        dominant_frequency_hz=features.dominant_frequency_hz,
        sufficient=features.sufficient,
    )
