"""
Session-level aggregation of window classifications.

Combination rule ("worst observed, smoothed confidence"):
- Summary score: exponential moving average of window scores, so the
  trend follows recent behavior
- Summary tier: maximum tier ever observed in the session, so a single
  high-severity window is not diluted away by calmer windows afterwards

Clinical rationale:
- Stereotypies are often episodic; a conservative summary keeps brief
  episodes visible for clinician review
- The smoothed score still shows whether the episode persisted
"""

import logging
from typing import List, Optional

from .config import ConfigurationError
from .data_models import ClassificationResult, DetectionStats, SessionAnalysis
from .enums import MotionTier

logger = logging.getLogger(__name__)


def _peak_key(result: ClassificationResult):
    # Within a tier, a window with data outranks an insufficient one
    return (result.tier.rank, result.sufficient)


class SessionAggregator:
    """
    Accumulate window results for one screening session.

    `window_results` is append-only until reset(); the summary is
    recomputed on every record().

    Usage:
        aggregator = SessionAggregator(ema_alpha=0.3)
        aggregator.record(window_result, frame_count=25)
        summary = aggregator.summary
        stats = aggregator.get_detection_stats()
    """

    def __init__(self, ema_alpha: float = 0.3):
        if not 0.0 < ema_alpha <= 1.0:
            raise ConfigurationError(f"ema_alpha must lie in (0, 1], got {ema_alpha}")

        self.ema_alpha = float(ema_alpha)
        self._results: List[ClassificationResult] = []
        self._summary: Optional[ClassificationResult] = None
        self._peak: Optional[ClassificationResult] = None
        self._smoothed_score: Optional[float] = None
        self._frames_processed = 0

    @property
    def summary(self) -> Optional[ClassificationResult]:
        return self._summary

    @property
    def window_count(self) -> int:
        return len(self._results)

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    def record(self, result: ClassificationResult, frame_count: int = 0) -> ClassificationResult:
        """
        Append a window result and recompute the summary.

        Args:
            result: Window classification
            frame_count: Frames accepted since the previous analysis cycle

        Returns:
            The new session summary
        """
        self._results.append(result)
        self._frames_processed += int(frame_count)

        if self._smoothed_score is None:
            self._smoothed_score = result.score
        else:
            self._smoothed_score = (
                self.ema_alpha * result.score
                + (1.0 - self.ema_alpha) * self._smoothed_score
            )

        if self._peak is None or _peak_key(result) >= _peak_key(self._peak):
            self._peak = result

        self._summary = self._build_summary(latest=result)

        logger.debug(
            f"Window {len(self._results)}: tier={result.tier.value}, score={result.score:.3f}; "
            f"session tier={self._summary.tier.value}, smoothed={self._smoothed_score:.3f}"
        )

        return self._summary

    def add_frames(self, frame_count: int) -> None:
        """Count frames analyzed in a cycle that produced no recorded window."""
        self._frames_processed += int(frame_count)
        if self._results:
            self._summary = self._build_summary(latest=self._results[-1])

    def _build_summary(self, latest: ClassificationResult) -> ClassificationResult:
        """
        Summary combining the EMA score with the peak window's tier and text.

        For the summary, `sample_count` is the number of frames processed
        over the session.
        """
        peak = self._peak
        return ClassificationResult(
            score=float(self._smoothed_score),
            tier=peak.tier,
            description=peak.description,
            dominant_frequencies=peak.dominant_frequencies,
            recommendations=peak.recommendations,
            timestamp=latest.timestamp,
            sufficient=peak.sufficient,
            sample_count=self._frames_processed,
            patterns=peak.patterns,
        )

    def analysis(self) -> SessionAnalysis:
        """Immutable snapshot of the session so far."""
        return SessionAnalysis(
            window_results=tuple(self._results),
            summary=self._summary
        )

    def get_detection_stats(self) -> DetectionStats:
        """Derived statistics for clinical reporting."""
        if not self._results:
            return DetectionStats(
                active_fraction=0.0,
                frames_processed=self._frames_processed,
                window_count=0,
                severity=MotionTier.NONE,
                has_repetitive_motion=False,
            )

        active = sum(1 for r in self._results if r.tier >= MotionTier.LOW)
        severity = self._peak.tier

        return DetectionStats(
            active_fraction=active / len(self._results),
            frames_processed=self._frames_processed,
            window_count=len(self._results),
            severity=severity,
            has_repetitive_motion=severity is not MotionTier.NONE,
            recommendations=self._peak.recommendations,
        )

    def reset(self) -> None:
        """Discard all session state. Results already returned stay valid."""
        self._results = []
        self._summary = None
        self._peak = None
        self._smoothed_score = None
        self._frames_processed = 0
        logger.info("Session aggregator reset")
