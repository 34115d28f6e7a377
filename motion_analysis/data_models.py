"""
Core data models for the repetitive motion detection engine.

Input samples (WristSample, HandFrame) come from the external hand-tracking
collaborator. Results (WindowFeatures, ClassificationResult, SessionAnalysis,
RealTimeScore, DetectionStats) are frozen value objects, safe to hand to UI and
reporting code without defensive copies.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .enums import Axis, Limb, MotionTier


def _read_only(mapping: Optional[Mapping] = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class WristSample:
    """Single wrist landmark position reported by the tracker."""
    x: float
    y: float
    z: float
    confidence: float  # Landmark confidence (0-1)
    timestamp: float = 0.0  # Seconds

    def coordinate(self, axis: Axis) -> float:
        """Return the coordinate on the given axis."""
        return getattr(self, Axis(axis).value)

    def is_valid(self) -> bool:
        """Check that coordinates are finite and confidence lies in [0, 1]."""
        try:
            values = [float(v) for v in (self.x, self.y, self.z, self.confidence, self.timestamp)]
        except (TypeError, ValueError):
            return False
        if not all(math.isfinite(v) for v in values):
            return False
        return 0.0 <= values[3] <= 1.0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]], timestamp: float = 0.0) -> Optional['WristSample']:
        """Build a sample from a tracker payload; None stays None (occluded)."""
        if data is None:
            return None
        return cls(
            x=float(data['x']),
            y=float(data['y']),
            z=float(data.get('z', 0.0)),
            confidence=float(data.get('confidence', 1.0)),
            timestamp=float(data.get('timestamp', timestamp)),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            'x': self.x,
            'y': self.y,
            'z': self.z,
            'confidence': self.confidence,
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class HandFrame:
    """
    Both wrists for one tracker frame.

    A limb that was not detected is None, never a zero-valued sample, so
    "missing" stays distinguishable from "measured at the origin".
    """
    left_wrist: Optional[WristSample]
    right_wrist: Optional[WristSample]
    timestamp: float  # Seconds

    def wrist(self, limb: Limb) -> Optional[WristSample]:
        """Return the sample for a limb, or None if it was occluded."""
        if Limb(limb) is Limb.LEFT:
            return self.left_wrist
        return self.right_wrist

    def is_valid(self) -> bool:
        """A frame is valid when its timestamp is finite and every present wrist is valid."""
        try:
            if not math.isfinite(float(self.timestamp)):
                return False
        except (TypeError, ValueError):
            return False
        for sample in (self.left_wrist, self.right_wrist):
            if sample is None:
                continue
            if not isinstance(sample, WristSample) or not sample.is_valid():
                return False
        return True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'HandFrame':
        """
        Build a frame from a tracker payload.

        Accepts both the browser collaborator's camelCase keys
        (leftWrist/rightWrist) and snake_case keys.
        """
        timestamp = float(data['timestamp'])
        left = data.get('left_wrist', data.get('leftWrist'))
        right = data.get('right_wrist', data.get('rightWrist'))
        return cls(
            left_wrist=WristSample.from_dict(left, timestamp),
            right_wrist=WristSample.from_dict(right, timestamp),
            timestamp=timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'left_wrist': self.left_wrist.to_dict() if self.left_wrist else None,
            'right_wrist': self.right_wrist.to_dict() if self.right_wrist else None,
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class WindowFeatures:
    """
    Statistical and frequency features of one coordinate series.

    Attributes:
        mean: Series mean
        variance: Population variance
        std_dev: Standard deviation
        range: Max minus min
        dominant_frequency_hz: Zero-crossing frequency estimate
        sample_count: Number of values in the series
        sufficient: False when the series was too short to form an opinion
    """
    mean: float
    variance: float
    std_dev: float
    range: float
    dominant_frequency_hz: float
    sample_count: int
    sufficient: bool

    @classmethod
    def insufficient(cls, sample_count: int) -> 'WindowFeatures':
        """Features for a series too short to analyze; all derived fields zeroed."""
        return cls(
            mean=0.0,
            variance=0.0,
            std_dev=0.0,
            range=0.0,
            dominant_frequency_hz=0.0,
            sample_count=int(sample_count),
            sufficient=False,
        )


@dataclass(frozen=True)
class ClassificationResult:
    """
    Motion severity classification for one analysis window (or a session summary).

    Attributes:
        score: Normalized severity score (0-1)
        tier: Discrete severity tier
        description: Human-readable interpretation
        dominant_frequencies: Dominant frequency (Hz) per limb label
        recommendations: Tier-keyed recommendation texts
        timestamp: Time of the newest frame the result covers (seconds)
        sufficient: False when no limb had enough data
        sample_count: Samples that went into the result
        patterns: Motion pattern label per limb label
    """
    score: float
    tier: MotionTier
    description: str
    dominant_frequencies: Mapping[str, float] = field(default_factory=_read_only)
    recommendations: Tuple[str, ...] = ()
    timestamp: float = 0.0
    sufficient: bool = True
    sample_count: int = 0
    patterns: Mapping[str, str] = field(default_factory=_read_only)

    def __post_init__(self):
        # Freeze container fields so callers cannot mutate a handed-out result
        object.__setattr__(self, 'dominant_frequencies', _read_only(self.dominant_frequencies))
        object.__setattr__(self, 'patterns', _read_only(self.patterns))
        object.__setattr__(self, 'recommendations', tuple(self.recommendations))

    def to_dict(self) -> Dict[str, Any]:
        """Flat, JSON-serializable view with the tier as a string."""
        return {
            'score': float(self.score),
            'tier': self.tier.value,
            'description': self.description,
            'dominant_frequencies': {k: float(v) for k, v in self.dominant_frequencies.items()},
            'patterns': dict(self.patterns),
            'recommendations': list(self.recommendations),
            'timestamp': float(self.timestamp),
            'sufficient_data': bool(self.sufficient),
            'sample_count': int(self.sample_count),
        }


@dataclass(frozen=True)
class SessionAnalysis:
    """Snapshot of a session: every recorded window plus the current summary."""
    window_results: Tuple[ClassificationResult, ...] = ()
    summary: Optional[ClassificationResult] = None


@dataclass(frozen=True)
class RealTimeScore:
    """Low-latency score for a single coordinate series."""
    score: float
    timestamp: float
    tier: MotionTier = MotionTier.NONE
    dominant_frequency_hz: float = 0.0
    sufficient: bool = False


@dataclass(frozen=True)
class DetectionStats:
    """
    Session-level detection statistics for clinical reporting.

    Attributes:
        active_fraction: Fraction of windows at tier LOW or above
        frames_processed: Frames accepted and analyzed over the session,
            including those of windows too sparse to record
        window_count: Number of recorded windows
        severity: Maximum tier observed
        has_repetitive_motion: True when severity is above NONE
        recommendations: Recommendations of the maximum-tier window
    """
    active_fraction: float
    frames_processed: int
    window_count: int
    severity: MotionTier
    has_repetitive_motion: bool
    recommendations: Tuple[str, ...] = ()
