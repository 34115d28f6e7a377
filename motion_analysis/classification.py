"""
Motion severity classification.

Maps per-limb window features to a normalized score, a severity tier and
tier-keyed clinical text.

Scoring:
- raw = min(mean limb variance / normalization constant, 1.0)
- If any limb oscillates inside the stereotypy band (2-5 Hz by default)
  the score is boosted (x1.2, capped at 1.0), otherwise dampened (x0.8).
  Variance alone may be incidental movement; variance together with a
  plausible oscillation frequency is stronger evidence.

Tiers (inclusive lower bounds):
- score < 0.15: NONE
- 0.15-0.40: LOW
- 0.40-0.70: MEDIUM
- >= 0.70: HIGH

Non-diagnostic: the tier is a bounded motion-severity signal for display,
not a clinical finding.
"""

import logging
from typing import Dict, Mapping, Optional, Tuple, Union

import numpy as np

from .config import ClassifierSettings
from .data_models import ClassificationResult, WindowFeatures
from .enums import Limb, MotionPattern, MotionTier

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = ClassifierSettings()

TIER_DESCRIPTIONS: Dict[MotionTier, str] = {
    MotionTier.HIGH: "Strong repetitive motion patterns detected",
    MotionTier.MEDIUM: "Moderate repetitive motion patterns detected",
    MotionTier.LOW: "Weak repetitive motion patterns detected",
    MotionTier.NONE: "No significant repetitive motion detected",
}

TIER_RECOMMENDATIONS: Dict[MotionTier, Tuple[str, ...]] = {
    MotionTier.HIGH: (
        "Consider clinical follow-up with a developmental specialist",
        "Consider occupational therapy for motor skills development",
        "Monitor for other repetitive behaviors",
        "Consult with behavioral specialist",
    ),
    MotionTier.MEDIUM: (
        "Continue monitoring for pattern changes",
        "Consider gentle redirection strategies",
        "Document frequency and triggers",
    ),
    MotionTier.LOW: (
        "Normal developmental variation observed",
        "Continue routine monitoring",
    ),
    MotionTier.NONE: (
        "No specific action needed at this time",
        "Continue routine developmental monitoring",
    ),
}

INSUFFICIENT_DATA_DESCRIPTION = "Insufficient data for repetitive motion analysis"
INSUFFICIENT_DATA_RECOMMENDATIONS: Tuple[str, ...] = (
    "Keep both hands visible to the camera to collect more tracking data",
)

LimbKey = Union[Limb, str]


def _limb_label(limb: LimbKey) -> str:
    return limb.value if isinstance(limb, Limb) else str(limb)


def classify_tier(score: float, settings: Optional[ClassifierSettings] = None) -> MotionTier:
    """Map a score in [0, 1] to its severity tier."""
    settings = settings or DEFAULT_SETTINGS
    if score >= settings.high_threshold:
        return MotionTier.HIGH
    if score >= settings.medium_threshold:
        return MotionTier.MEDIUM
    if score >= settings.low_threshold:
        return MotionTier.LOW
    return MotionTier.NONE


def classify_motion_pattern(
    frequency_hz: float,
    settings: Optional[ClassifierSettings] = None
) -> MotionPattern:
    """
    Label a limb's oscillation from its dominant frequency.

    - hand_flapping: fast flapping band (1.5-3.5 Hz)
    - repetitive: general repetitive band (0.5-5 Hz)
    - static: no oscillation
    - irregular: anything else
    """
    settings = settings or DEFAULT_SETTINGS
    if frequency_hz <= 0:
        return MotionPattern.STATIC

    flap_low, flap_high = settings.hand_flapping_range_hz
    if flap_low <= frequency_hz <= flap_high:
        return MotionPattern.HAND_FLAPPING

    rep_low, rep_high = settings.repetitive_range_hz
    if rep_low <= frequency_hz <= rep_high:
        return MotionPattern.REPETITIVE

    return MotionPattern.IRREGULAR


def classify(
    features_by_limb: Mapping[LimbKey, WindowFeatures],
    timestamp: float = 0.0,
    settings: Optional[ClassifierSettings] = None
) -> ClassificationResult:
    """
    Classify motion severity from per-limb window features.

    Only limbs with sufficient data take part. When no limb has enough
    data the result is tier NONE with an "insufficient data" description,
    which is distinct from a confirmed absence of motion.

    Args:
        features_by_limb: WindowFeatures keyed by Limb (or a series label)
        timestamp: Time of the newest frame covered (seconds)
        settings: Calibration constants (defaults if None)

    Returns:
        ClassificationResult
    """
    settings = settings or DEFAULT_SETTINGS

    total_samples = sum(f.sample_count for f in features_by_limb.values())
    usable = {
        _limb_label(limb): features
        for limb, features in features_by_limb.items()
        if features.sufficient
    }

    if not usable:
        return ClassificationResult(
            score=0.0,
            tier=MotionTier.NONE,
            description=INSUFFICIENT_DATA_DESCRIPTION,
            recommendations=INSUFFICIENT_DATA_RECOMMENDATIONS,
            timestamp=float(timestamp),
            sufficient=False,
            sample_count=total_samples,
        )

    mean_variance = float(np.mean([f.variance for f in usable.values()]))
    raw_score = min(mean_variance / settings.normalization_constant, 1.0)

    frequencies = {label: f.dominant_frequency_hz for label, f in usable.items()}
    band_low, band_high = settings.stereotypy_band_hz
    in_band = any(band_low <= freq <= band_high for freq in frequencies.values())

    if in_band:
        score = min(raw_score * settings.boost_factor, 1.0)
    else:
        score = raw_score * settings.dampen_factor
    score = float(score)

    tier = classify_tier(score, settings)
    patterns = {
        label: classify_motion_pattern(freq, settings).value
        for label, freq in frequencies.items()
    }

    logger.debug(
        f"Classified window: variance={mean_variance:.2f}, raw={raw_score:.3f}, "
        f"in_band={in_band}, score={score:.3f}, tier={tier.value}"
    )

    return ClassificationResult(
        score=score,
        tier=tier,
        description=TIER_DESCRIPTIONS[tier],
        dominant_frequencies=frequencies,
        recommendations=TIER_RECOMMENDATIONS[tier],
        timestamp=float(timestamp),
        sufficient=True,
        sample_count=total_samples,
        patterns=patterns,
    )
