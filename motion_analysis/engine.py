"""
Repetitive motion detection engine for one screening session.

Owns one SampleBuffer and one SessionAggregator. Frames are pushed in by
the hand-tracking collaborator; analysis runs when the caller asks for it,
either directly (analyze) or from its own scheduling loop (tick). Results
are delivered to registered observers and are also available by polling.

Engineering approach:
- No global state: each session constructs, resets and closes its own engine
- Snapshot at the start of every cycle so frames arriving mid-cycle
  cannot change an in-flight result
- Window timestamp comes from the newest buffered frame, which makes a
  repeated cycle without new frames return an identical result
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .buffer import BufferSnapshot, SampleBuffer
from .classification import classify
from .config import EngineConfig
from .data_models import (
    ClassificationResult,
    DetectionStats,
    HandFrame,
    RealTimeScore,
    SessionAnalysis,
)
from .enums import Limb
from .features import compute_movement_stats, extract_features
from .realtime import analyze_real_time
from .session import SessionAggregator

logger = logging.getLogger(__name__)

MIN_FRAMES_FOR_STATS = 10

ResultListener = Callable[[ClassificationResult, SessionAnalysis], None]


class MotionEngine:
    """
    Per-session repetitive motion detector.

    Usage:
        engine = MotionEngine(EngineConfig(window_size=100))
        engine.on_result(lambda result, session: print(result.tier))
        engine.push_frame(frame)          # from the tracker callback
        engine.tick(now_ms)               # from the caller's loop
        report = engine.detection_stats()
        engine.reset()                    # between sessions
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.buffer = SampleBuffer(capacity=self.config.window_size)
        self.aggregator = SessionAggregator(ema_alpha=self.config.ema_alpha)

        self._listeners: List[ResultListener] = []
        self._latest_result: Optional[ClassificationResult] = None
        self._frames_since_cycle = 0
        self._last_tick_ms: Optional[float] = None

        logger.info(
            f"Motion engine initialized: window={self.config.window_size} frames, "
            f"interval={self.config.analysis_interval_ms}ms, fps={self.config.frame_rate_hz}, "
            f"axis={self.config.axis.value}"
        )

    @classmethod
    def from_config(cls, config: Dict) -> 'MotionEngine':
        """Build an engine from a full configuration dict (see load_config)."""
        return cls(EngineConfig.from_dict(config))

    # Input

    def push_frame(self, frame: HandFrame) -> bool:
        """
        Ingest one tracker frame.

        Returns:
            True if stored, False if dropped as malformed
        """
        accepted = self.buffer.append(frame)
        if accepted:
            self._frames_since_cycle += 1
        return accepted

    # Observers

    def on_result(self, callback: ResultListener) -> ResultListener:
        """Register a callback invoked with (window_result, session_analysis) after each cycle."""
        self._listeners.append(callback)
        return callback

    def remove_listener(self, callback: ResultListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, result: ClassificationResult) -> None:
        session = self.aggregator.analysis()
        for callback in list(self._listeners):
            try:
                callback(result, session)
            except Exception:
                logger.exception(f"Result listener {callback!r} failed")

    # Analysis

    def analyze_window(self, snapshot: Optional[BufferSnapshot] = None) -> ClassificationResult:
        """
        Classify a buffer snapshot without recording it.

        Each limb's configured-axis series is extracted and classified;
        limbs without enough confident samples sit out.
        """
        if snapshot is None:
            snapshot = self.buffer.snapshot()

        features_by_limb = {
            limb: extract_features(
                snapshot.series(limb, self.config.axis, self.config.min_confidence),
                self.config.frame_rate_hz
            )
            for limb in Limb
        }

        return classify(
            features_by_limb,
            timestamp=snapshot.latest_timestamp,
            settings=self.config.classifier
        )

    def analyze(self) -> ClassificationResult:
        """
        Run one analysis cycle.

        Windows with sufficient data are recorded in the session; an
        insufficient window is returned and published but not recorded.
        """
        snapshot = self.buffer.snapshot()
        result = self.analyze_window(snapshot)

        if result.sufficient:
            self.aggregator.record(result, frame_count=self._frames_since_cycle)
        else:
            self.aggregator.add_frames(self._frames_since_cycle)
            logger.debug(f"Insufficient data in window of {len(snapshot)} frames")
        self._frames_since_cycle = 0

        self._latest_result = result
        self._notify(result)
        return result

    def tick(self, now_ms: float) -> Optional[ClassificationResult]:
        """
        Scheduled-cycle hook for the caller's loop.

        The first call only starts the clock; afterwards a cycle runs
        whenever at least `analysis_interval_ms` has passed since the
        previous one.

        Returns:
            The window result if a cycle ran, else None
        """
        if self._last_tick_ms is None:
            self._last_tick_ms = now_ms
            return None
        if now_ms - self._last_tick_ms < self.config.analysis_interval_ms:
            return None

        self._last_tick_ms = now_ms
        return self.analyze()

    def analyze_real_time(self, coordinates: Sequence[float], timestamp: float = 0.0) -> RealTimeScore:
        """Real-time score of a caller-supplied series using this engine's settings."""
        return analyze_real_time(
            coordinates,
            window=self.config.real_time_window,
            frame_rate_hz=self.config.frame_rate_hz,
            timestamp=timestamp,
            settings=self.config.classifier
        )

    # Read-only views

    @property
    def latest_result(self) -> Optional[ClassificationResult]:
        return self._latest_result

    def session_analysis(self) -> SessionAnalysis:
        return self.aggregator.analysis()

    def detection_stats(self) -> DetectionStats:
        return self.aggregator.get_detection_stats()

    @property
    def has_data(self) -> bool:
        return len(self.buffer) > 0

    @property
    def data_count(self) -> int:
        return len(self.buffer)

    @property
    def dropped_count(self) -> int:
        return self.buffer.dropped_count

    def current_wrist_positions(self) -> Optional[HandFrame]:
        """Latest accepted frame, or None before any data."""
        return self.buffer.latest()

    def movement_stats(self) -> Optional[Dict]:
        """
        Descriptive statistics per limb on the configured axis.

        Returns:
            Dict with 'left_wrist', 'right_wrist' (stats dict or None) and
            'total_frames'; None while fewer than 10 frames are buffered
        """
        snapshot = self.buffer.snapshot()
        if len(snapshot) < MIN_FRAMES_FOR_STATS:
            return None

        stats = {}
        for limb in Limb:
            series = snapshot.series(limb, self.config.axis, self.config.min_confidence)
            stats[f'{limb.value}_wrist'] = compute_movement_stats(series)
        stats['total_frames'] = len(snapshot)
        return stats

    # Lifecycle

    def reset(self) -> None:
        """Clear buffered frames and session state for a new session."""
        self.buffer.clear()
        self.aggregator.reset()
        self._latest_result = None
        self._frames_since_cycle = 0
        self._last_tick_ms = None
        logger.info("Motion engine reset")

    def close(self) -> None:
        """Tear the engine down at the end of a session."""
        self.reset()
        self._listeners.clear()
