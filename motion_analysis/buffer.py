"""Fixed-capacity sliding window of hand-tracking frames."""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

import numpy as np

from .config import positive_int
from .data_models import HandFrame
from .enums import Axis, Limb

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.3


def _extract_series(
    frames: Tuple[HandFrame, ...],
    limb: Limb,
    axis: Axis,
    min_confidence: float
) -> np.ndarray:
    """Coordinate values of a limb, skipping absent and low-confidence samples."""
    limb = Limb(limb)
    axis = Axis(axis)
    values = []
    for frame in frames:
        sample = frame.wrist(limb)
        if sample is None or sample.confidence < min_confidence:
            continue
        values.append(sample.coordinate(axis))
    return np.array(values, dtype=float)


@dataclass(frozen=True)
class BufferSnapshot:
    """Immutable copy of the buffer taken at the start of an analysis cycle."""
    frames: Tuple[HandFrame, ...] = ()

    def __len__(self) -> int:
        return len(self.frames)

    def series(
        self,
        limb: Limb,
        axis: Axis,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE
    ) -> np.ndarray:
        """Ordered coordinate series for one limb and axis."""
        return _extract_series(self.frames, limb, axis, min_confidence)

    @property
    def latest_timestamp(self) -> float:
        """Timestamp of the newest frame (0.0 when empty)."""
        return float(self.frames[-1].timestamp) if self.frames else 0.0


class SampleBuffer:
    """
    Sliding window of HandFrames with bounded capacity.

    Once full, each append evicts the oldest frame. Frames with a
    non-finite coordinate or a confidence outside [0, 1] are dropped
    without raising and counted in `dropped_count`.

    Usage:
        buffer = SampleBuffer(capacity=100)
        buffer.append(frame)
        snapshot = buffer.snapshot()
        left_y = snapshot.series(Limb.LEFT, Axis.Y)
    """

    def __init__(self, capacity: int = 100):
        self.capacity = positive_int(capacity, 'capacity')
        self.lock = threading.Lock()
        self.frames: Deque[HandFrame] = deque(maxlen=self.capacity)
        self.accepted_count = 0
        self.dropped_count = 0

    def __len__(self) -> int:
        with self.lock:
            return len(self.frames)

    def append(self, frame: HandFrame) -> bool:
        """
        Add a frame, evicting the oldest one at capacity.

        Returns:
            True if the frame was stored, False if it was dropped
        """
        if not isinstance(frame, HandFrame) or not frame.is_valid():
            with self.lock:
                self.dropped_count += 1
                dropped = self.dropped_count
            logger.debug(f"Dropped malformed frame ({dropped} dropped so far)")
            return False

        with self.lock:
            self.frames.append(frame)
            self.accepted_count += 1
        return True

    def snapshot(self) -> BufferSnapshot:
        """Copy the current contents; later appends do not affect the copy."""
        with self.lock:
            return BufferSnapshot(frames=tuple(self.frames))

    def series(
        self,
        limb: Limb,
        axis: Axis,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE
    ) -> np.ndarray:
        """Ordered coordinate series for one limb and axis over the current window."""
        return self.snapshot().series(limb, axis, min_confidence)

    def to_list(self) -> List[HandFrame]:
        """Frames in arrival order, oldest first."""
        with self.lock:
            return list(self.frames)

    def latest(self) -> Optional[HandFrame]:
        """Most recent frame, or None when empty."""
        with self.lock:
            return self.frames[-1] if self.frames else None

    def clear(self) -> None:
        """Drop all frames and reset the counters."""
        with self.lock:
            self.frames.clear()
            self.accepted_count = 0
            self.dropped_count = 0
