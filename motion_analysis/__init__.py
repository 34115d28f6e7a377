"""
Repetitive motion detection for autism screening sessions.

This package turns per-frame wrist positions from a hand-tracking model
into an explainable motion-severity signal:
- Sample buffering (bounded sliding window, malformed frames dropped)
- Feature extraction (variance, range, zero-crossing frequency)
- Classification (normalized score -> NONE/LOW/MEDIUM/HIGH + recommendations)
- Real-time scoring of a single coordinate series
- Session aggregation (smoothed score, worst observed tier)

Clinical rationale:
- Stereotyped hand movements (e.g. flapping) are a core restricted/repetitive
  behavior marker
- Variance combined with a plausible 2-5 Hz oscillation is stronger evidence
  than either alone
- Non-diagnostic (observation only, requires clinical interpretation)
"""

from .enums import Axis, Limb, MotionPattern, MotionTier

from .data_models import (
    ClassificationResult,
    DetectionStats,
    HandFrame,
    RealTimeScore,
    SessionAnalysis,
    WindowFeatures,
    WristSample,
)

from .config import (
    ClassifierSettings,
    ConfigurationError,
    EngineConfig,
    load_engine_config,
)

from .buffer import BufferSnapshot, SampleBuffer
from .features import MIN_SAMPLES, compute_movement_stats, extract_features
from .classification import classify, classify_motion_pattern, classify_tier
from .realtime import analyze_real_time
from .session import SessionAggregator
from .engine import MotionEngine
from .report import build_session_record, save_session_report

__all__ = [
    # Enums
    'Axis',
    'Limb',
    'MotionPattern',
    'MotionTier',

    # Data models
    'ClassificationResult',
    'DetectionStats',
    'HandFrame',
    'RealTimeScore',
    'SessionAnalysis',
    'WindowFeatures',
    'WristSample',

    # Configuration
    'ClassifierSettings',
    'ConfigurationError',
    'EngineConfig',
    'load_engine_config',

    # Pipeline
    'BufferSnapshot',
    'SampleBuffer',
    'MIN_SAMPLES',
    'compute_movement_stats',
    'extract_features',
    'classify',
    'classify_motion_pattern',
    'classify_tier',
    'analyze_real_time',
    'SessionAggregator',
    'MotionEngine',

    # Reporting
    'build_session_record',
    'save_session_report',
]
