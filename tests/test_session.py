"""
Unit tests for session aggregation.
"""

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from motion_analysis.classification import TIER_DESCRIPTIONS, TIER_RECOMMENDATIONS
from motion_analysis.config import ConfigurationError
from motion_analysis.data_models import ClassificationResult
from motion_analysis.enums import MotionTier
from motion_analysis.session import SessionAggregator


def make_result(score: float, tier: MotionTier, timestamp: float = 0.0, sufficient: bool = True) -> ClassificationResult:
    return ClassificationResult(
        score=score,
        tier=tier,
        description=TIER_DESCRIPTIONS[tier],
        dominant_frequencies={'left': 3.0} if tier is not MotionTier.NONE else {'left': 0.0},
        recommendations=TIER_RECOMMENDATIONS[tier],
        timestamp=timestamp,
        sufficient=sufficient,
        sample_count=100,
    )


class TestSummary:
    """Test the summary combination rule."""

    def test_session_conservatism(self):
        """One HIGH window followed by nine NONE windows stays HIGH, score decays."""
        aggregator = SessionAggregator(ema_alpha=0.3)

        aggregator.record(make_result(0.9, MotionTier.HIGH, timestamp=1.0))
        scores = []
        for i in range(9):
            summary = aggregator.record(make_result(0.0, MotionTier.NONE, timestamp=2.0 + i))
            scores.append(summary.score)

        summary = aggregator.summary
        assert summary.tier == MotionTier.HIGH
        assert summary.recommendations == TIER_RECOMMENDATIONS[MotionTier.HIGH]
        assert summary.score == pytest.approx(0.9 * 0.7 ** 9)
        assert all(later < earlier for earlier, later in zip(scores, scores[1:]))
        assert summary.timestamp == 10.0

    def test_ema_sequence(self):
        aggregator = SessionAggregator(ema_alpha=0.5)

        aggregator.record(make_result(0.2, MotionTier.LOW))
        aggregator.record(make_result(0.6, MotionTier.MEDIUM))
        summary = aggregator.record(make_result(0.2, MotionTier.LOW))

        # 0.2 -> 0.4 -> 0.3
        assert summary.score == pytest.approx(0.3)
        assert summary.tier == MotionTier.MEDIUM

    def test_first_window_seeds_ema(self):
        aggregator = SessionAggregator()

        summary = aggregator.record(make_result(0.5, MotionTier.MEDIUM))

        assert summary.score == pytest.approx(0.5)

    def test_invalid_alpha(self):
        with pytest.raises(ConfigurationError):
            SessionAggregator(ema_alpha=0.0)
        with pytest.raises(ConfigurationError):
            SessionAggregator(ema_alpha=1.5)


class TestWindowResults:
    """Test append-only window history."""

    def test_results_kept_in_order(self):
        aggregator = SessionAggregator()
        first = make_result(0.1, MotionTier.NONE, timestamp=1.0)
        second = make_result(0.5, MotionTier.MEDIUM, timestamp=2.0)

        aggregator.record(first)
        aggregator.record(second)

        assert aggregator.analysis().window_results == (first, second)

    def test_snapshot_is_not_affected_by_later_records(self):
        aggregator = SessionAggregator()
        aggregator.record(make_result(0.1, MotionTier.NONE))

        snapshot = aggregator.analysis()
        aggregator.record(make_result(0.9, MotionTier.HIGH))

        assert len(snapshot.window_results) == 1
        assert snapshot.summary.tier == MotionTier.NONE


class TestDetectionStats:
    """Test derived detection statistics."""

    def test_stats_fields(self):
        aggregator = SessionAggregator()
        aggregator.record(make_result(0.05, MotionTier.NONE), frame_count=25)
        aggregator.record(make_result(0.3, MotionTier.LOW), frame_count=25)
        aggregator.record(make_result(0.5, MotionTier.MEDIUM), frame_count=25)
        aggregator.record(make_result(0.05, MotionTier.NONE), frame_count=25)

        stats = aggregator.get_detection_stats()

        assert stats.active_fraction == pytest.approx(0.5)
        assert stats.frames_processed == 100
        assert stats.window_count == 4
        assert stats.severity == MotionTier.MEDIUM
        assert stats.has_repetitive_motion is True
        assert stats.recommendations == TIER_RECOMMENDATIONS[MotionTier.MEDIUM]

    def test_unrecorded_frames_are_counted(self):
        aggregator = SessionAggregator()
        aggregator.add_frames(12)

        assert aggregator.summary is None
        assert aggregator.get_detection_stats().frames_processed == 12

        aggregator.record(make_result(0.3, MotionTier.LOW), frame_count=25)
        aggregator.add_frames(5)

        assert aggregator.frames_processed == 42
        assert aggregator.summary.sample_count == 42
        assert aggregator.summary.tier == MotionTier.LOW

    def test_empty_session(self):
        stats = SessionAggregator().get_detection_stats()

        assert stats.window_count == 0
        assert stats.active_fraction == 0.0
        assert stats.severity == MotionTier.NONE
        assert stats.has_repetitive_motion is False

    def test_sufficient_window_outranks_insufficient_at_same_tier(self):
        aggregator = SessionAggregator()
        confirmed = make_result(0.0, MotionTier.NONE, sufficient=True)
        aggregator.record(confirmed)
        aggregator.record(make_result(0.0, MotionTier.NONE, sufficient=False))

        assert aggregator.summary.sufficient is True
        assert aggregator.summary.description == confirmed.description


class TestReset:
    """Test session reset."""

    def test_reset_clears_state(self):
        aggregator = SessionAggregator()
        aggregator.record(make_result(0.9, MotionTier.HIGH), frame_count=50)

        aggregator.reset()

        assert aggregator.summary is None
        assert aggregator.window_count == 0
        assert aggregator.frames_processed == 0
        assert aggregator.analysis().window_results == ()

    def test_reset_does_not_touch_returned_results(self):
        aggregator = SessionAggregator()
        summary = aggregator.record(make_result(0.9, MotionTier.HIGH))
        snapshot = aggregator.analysis()

        aggregator.reset()
        aggregator.record(make_result(0.0, MotionTier.NONE))

        assert summary.tier == MotionTier.HIGH
        assert summary.score == pytest.approx(0.9)
        assert len(snapshot.window_results) == 1
