"""
Enumerations for the repetitive motion detection engine.
"""

from enum import Enum


class Limb(Enum):
    """Tracked limbs (wrist landmarks)."""
    LEFT = "left"
    RIGHT = "right"


class Axis(Enum):
    """Coordinate axes of a wrist sample."""
    X = "x"
    Y = "y"  # Vertical: the up-down axis hand flapping shows up on
    Z = "z"


class MotionTier(Enum):
    """Discrete motion severity, ordered NONE < LOW < MEDIUM < HIGH."""
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        """Position of the tier in severity order (NONE = 0)."""
        return _TIER_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, MotionTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, MotionTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, MotionTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, MotionTier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_ORDER = [MotionTier.NONE, MotionTier.LOW, MotionTier.MEDIUM, MotionTier.HIGH]


class MotionPattern(Enum):
    """Coarse label of a limb's oscillation, from its dominant frequency."""
    HAND_FLAPPING = "hand_flapping"  # Fast flapping band
    REPETITIVE = "repetitive"  # General repetitive band
    STATIC = "static"  # No oscillation at all
    IRREGULAR = "irregular"  # Outside any repetitive band
