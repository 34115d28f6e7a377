"""
Unit tests for the sample buffer.

Tests cover:
- Capacity and eviction order
- Dropping malformed frames
- Series extraction (absent / low-confidence samples skipped)
- Snapshot isolation
"""

import math

import numpy as np
import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from motion_analysis.buffer import SampleBuffer
from motion_analysis.config import ConfigurationError
from motion_analysis.data_models import HandFrame, WristSample
from motion_analysis.enums import Axis, Limb


def make_frame(t: float, left_y=None, right_y=None, confidence: float = 0.9) -> HandFrame:
    """Create a frame with optional wrists at the given heights."""
    left = None
    right = None
    if left_y is not None:
        left = WristSample(x=1.0, y=left_y, z=-1.0, confidence=confidence, timestamp=t)
    if right_y is not None:
        right = WristSample(x=2.0, y=right_y, z=-2.0, confidence=confidence, timestamp=t)
    return HandFrame(left_wrist=left, right_wrist=right, timestamp=t)


class TestCapacity:
    """Test sliding window capacity."""

    def test_evicts_oldest_frames(self):
        """After capacity + k appends only the newest frames remain, in order."""
        buffer = SampleBuffer(capacity=10)

        for i in range(13):
            buffer.append(make_frame(float(i), left_y=float(i)))

        assert len(buffer) == 10
        assert [f.timestamp for f in buffer.to_list()] == [float(i) for i in range(3, 13)]

    def test_below_capacity_keeps_everything(self):
        buffer = SampleBuffer(capacity=10)
        for i in range(4):
            buffer.append(make_frame(float(i), left_y=0.0))

        assert len(buffer) == 4
        assert buffer.accepted_count == 4

    @pytest.mark.parametrize('capacity', [0, -5, 2.5, float('nan'), float('inf'), None, 'ten'])
    def test_invalid_capacity_rejected(self, capacity):
        with pytest.raises(ConfigurationError):
            SampleBuffer(capacity=capacity)


class TestMalformedFrames:
    """Test silent dropping of malformed frames."""

    def test_out_of_range_confidence_dropped(self):
        buffer = SampleBuffer(capacity=10)

        assert buffer.append(make_frame(0.0, left_y=1.0, confidence=1.5)) is False
        assert buffer.append(make_frame(0.1, left_y=1.0, confidence=-0.1)) is False

        assert len(buffer) == 0
        assert buffer.dropped_count == 2

    def test_non_finite_coordinates_dropped(self):
        buffer = SampleBuffer(capacity=10)

        assert buffer.append(make_frame(0.0, left_y=math.nan)) is False
        assert buffer.append(make_frame(0.1, right_y=math.inf)) is False
        assert buffer.append(make_frame(0.2, left_y=1.0)) is True

        assert len(buffer) == 1
        assert buffer.dropped_count == 2

    def test_non_frame_input_dropped(self):
        buffer = SampleBuffer(capacity=10)

        assert buffer.append({'timestamp': 0.0}) is False
        assert buffer.dropped_count == 1

    def test_frame_without_wrists_is_accepted(self):
        """Occlusion of both hands is valid data, not a malformed frame."""
        buffer = SampleBuffer(capacity=10)

        assert buffer.append(make_frame(0.0)) is True
        assert buffer.dropped_count == 0


class TestSeries:
    """Test per-limb coordinate series extraction."""

    def test_absent_samples_are_skipped_not_zero_filled(self):
        buffer = SampleBuffer(capacity=10)
        buffer.append(make_frame(0.0, left_y=5.0))
        buffer.append(make_frame(0.1))
        buffer.append(make_frame(0.2, left_y=7.0, right_y=1.0))

        left = buffer.series(Limb.LEFT, Axis.Y)
        right = buffer.series(Limb.RIGHT, Axis.Y)

        np.testing.assert_array_equal(left, [5.0, 7.0])
        np.testing.assert_array_equal(right, [1.0])

    def test_low_confidence_samples_are_skipped(self):
        buffer = SampleBuffer(capacity=10)
        buffer.append(make_frame(0.0, left_y=1.0, confidence=0.9))
        buffer.append(make_frame(0.1, left_y=2.0, confidence=0.1))
        buffer.append(make_frame(0.2, left_y=3.0, confidence=0.3))

        series = buffer.series(Limb.LEFT, Axis.Y, min_confidence=0.3)

        np.testing.assert_array_equal(series, [1.0, 3.0])

    def test_axis_selection(self):
        buffer = SampleBuffer(capacity=10)
        buffer.append(make_frame(0.0, left_y=4.0))

        assert buffer.series(Limb.LEFT, Axis.X)[0] == 1.0
        assert buffer.series('left', 'z')[0] == -1.0


class TestSnapshot:
    """Test snapshot isolation."""

    def test_snapshot_unaffected_by_later_appends(self):
        buffer = SampleBuffer(capacity=5)
        for i in range(5):
            buffer.append(make_frame(float(i), left_y=float(i)))

        snapshot = buffer.snapshot()
        buffer.append(make_frame(5.0, left_y=5.0))
        buffer.append(make_frame(6.0, left_y=6.0))

        assert len(snapshot) == 5
        assert snapshot.latest_timestamp == 4.0
        np.testing.assert_array_equal(snapshot.series(Limb.LEFT, Axis.Y), [0.0, 1.0, 2.0, 3.0, 4.0])

    def test_clear_resets_frames_and_counters(self):
        buffer = SampleBuffer(capacity=5)
        buffer.append(make_frame(0.0, left_y=1.0))
        buffer.append(make_frame(0.1, left_y=math.nan))

        buffer.clear()

        assert len(buffer) == 0
        assert buffer.dropped_count == 0
        assert buffer.latest() is None
