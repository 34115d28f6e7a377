"""
Engine configuration.

Settings are read from the `motion_analysis` section of the YAML config
(see configs/motion_analysis.yaml). Invalid values raise ConfigurationError
at construction time; nothing is silently clamped.

Calibration note:
- Normalization constant, stereotypy band and tier thresholds are
  calibration defaults inferred from limited evidence, not values
  validated against clinical data. They are exposed here to be tuned.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from utils.config_loader import get_nested_config, load_config

from .enums import Axis

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when the engine is constructed with invalid parameters."""


def positive_int(value, name: str) -> int:
    """Convert a count setting, raising ConfigurationError for anything but a positive whole number."""
    try:
        as_int = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    if as_int != value or as_int <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return as_int


def _number(value, name: str) -> float:
    try:
        as_float = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(as_float):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return as_float


def _band(value, name: str) -> Tuple[float, float]:
    try:
        low, high = (float(v) for v in value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a [low, high] pair, got {value!r}")
    if not 0 <= low <= high:
        raise ConfigurationError(f"{name} must satisfy 0 <= low <= high, got {value!r}")
    return low, high


@dataclass(frozen=True)
class ClassifierSettings:
    """
    Calibration constants of the classification engine.

    Attributes:
        normalization_constant: Variance mapped to a raw score of 1.0
        stereotypy_band_hz: Frequency band that boosts the score
        boost_factor: Multiplier when a limb oscillates inside the band
        dampen_factor: Multiplier otherwise
        low_threshold: Lowest score classified LOW
        medium_threshold: Lowest score classified MEDIUM
        high_threshold: Lowest score classified HIGH
        hand_flapping_range_hz: Band labelled as hand flapping
        repetitive_range_hz: Band labelled as general repetitive motion
    """
    normalization_constant: float = 1000.0
    stereotypy_band_hz: Tuple[float, float] = (2.0, 5.0)
    boost_factor: float = 1.2
    dampen_factor: float = 0.8
    low_threshold: float = 0.15
    medium_threshold: float = 0.40
    high_threshold: float = 0.70
    hand_flapping_range_hz: Tuple[float, float] = (1.5, 3.5)
    repetitive_range_hz: Tuple[float, float] = (0.5, 5.0)

    def __post_init__(self):
        for name in ('normalization_constant', 'boost_factor', 'dampen_factor',
                     'low_threshold', 'medium_threshold', 'high_threshold'):
            object.__setattr__(self, name, _number(getattr(self, name), name))

        if not self.normalization_constant > 0:
            raise ConfigurationError(
                f"normalization_constant must be positive, got {self.normalization_constant}"
            )
        if self.boost_factor < 0 or self.dampen_factor < 0:
            raise ConfigurationError("boost_factor and dampen_factor must be non-negative")
        if not 0.0 < self.low_threshold < self.medium_threshold < self.high_threshold <= 1.0:
            raise ConfigurationError(
                "Tier thresholds must satisfy 0 < low < medium < high <= 1, got "
                f"{self.low_threshold}/{self.medium_threshold}/{self.high_threshold}"
            )
        object.__setattr__(self, 'stereotypy_band_hz', _band(self.stereotypy_band_hz, 'stereotypy_band_hz'))
        object.__setattr__(self, 'hand_flapping_range_hz', _band(self.hand_flapping_range_hz, 'hand_flapping_range_hz'))
        object.__setattr__(self, 'repetitive_range_hz', _band(self.repetitive_range_hz, 'repetitive_range_hz'))

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]]) -> 'ClassifierSettings':
        """Build settings from the `motion_analysis.classification` section."""
        section = section or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"classification must be a mapping, got {section!r}")
        thresholds = section.get('tier_thresholds') or {}
        if not isinstance(thresholds, dict):
            raise ConfigurationError(f"tier_thresholds must be a mapping, got {thresholds!r}")
        defaults = cls()
        return cls(
            normalization_constant=section.get('normalization_constant', defaults.normalization_constant),
            stereotypy_band_hz=section.get('stereotypy_band_hz', defaults.stereotypy_band_hz),
            boost_factor=section.get('boost_factor', defaults.boost_factor),
            dampen_factor=section.get('dampen_factor', defaults.dampen_factor),
            low_threshold=thresholds.get('low', defaults.low_threshold),
            medium_threshold=thresholds.get('medium', defaults.medium_threshold),
            high_threshold=thresholds.get('high', defaults.high_threshold),
            hand_flapping_range_hz=section.get('hand_flapping_range_hz', defaults.hand_flapping_range_hz),
            repetitive_range_hz=section.get('repetitive_range_hz', defaults.repetitive_range_hz),
        )


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings for one screening-session engine.

    Attributes:
        window_size: Capacity of the sample buffer (frames)
        analysis_interval_ms: Period of scheduled analysis cycles
        frame_rate_hz: Tracker frame rate, used for frequency conversion
        real_time_window: Trailing values used by real-time analysis
        min_confidence: Minimum wrist confidence kept in a series
        axis: Coordinate axis analyzed per limb
        ema_alpha: Smoothing factor of the session score
        classifier: Classification calibration
    """
    window_size: int = 100
    analysis_interval_ms: float = 1000.0
    frame_rate_hz: float = 25.0
    real_time_window: int = 50
    min_confidence: float = 0.3
    axis: Axis = Axis.Y
    ema_alpha: float = 0.3
    classifier: ClassifierSettings = field(default_factory=ClassifierSettings)

    def __post_init__(self):
        object.__setattr__(self, 'window_size', positive_int(self.window_size, 'window_size'))
        object.__setattr__(self, 'real_time_window', positive_int(self.real_time_window, 'real_time_window'))
        for name in ('analysis_interval_ms', 'frame_rate_hz', 'min_confidence', 'ema_alpha'):
            object.__setattr__(self, name, _number(getattr(self, name), name))

        if not self.analysis_interval_ms > 0:
            raise ConfigurationError(f"analysis_interval_ms must be positive, got {self.analysis_interval_ms}")
        if not self.frame_rate_hz > 0:
            raise ConfigurationError(f"frame_rate_hz must be positive, got {self.frame_rate_hz}")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ConfigurationError(f"min_confidence must lie in [0, 1], got {self.min_confidence}")
        if not 0.0 < self.ema_alpha <= 1.0:
            raise ConfigurationError(f"ema_alpha must lie in (0, 1], got {self.ema_alpha}")
        try:
            object.__setattr__(self, 'axis', Axis(self.axis))
        except ValueError:
            raise ConfigurationError(f"axis must be one of x, y, z, got {self.axis!r}")

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> 'EngineConfig':
        """
        Build engine settings from a full configuration dict.

        Missing keys fall back to defaults.

        Example:
            config = load_config('configs/motion_analysis.yaml')
            engine_config = EngineConfig.from_dict(config)
        """
        config = config or {}
        defaults = cls()

        def option(key, default):
            return get_nested_config(config, f'motion_analysis.{key}', default=default)

        return cls(
            window_size=option('window_size', defaults.window_size),
            analysis_interval_ms=option('analysis_interval_ms', defaults.analysis_interval_ms),
            frame_rate_hz=option('frame_rate_hz', defaults.frame_rate_hz),
            real_time_window=option('real_time_window', defaults.real_time_window),
            min_confidence=option('min_confidence', defaults.min_confidence),
            axis=str(option('axis', defaults.axis.value)).lower(),
            ema_alpha=option('ema_alpha', defaults.ema_alpha),
            classifier=ClassifierSettings.from_dict(option('classification', {})),
        )


def load_engine_config(config_path) -> EngineConfig:
    """Load and validate engine settings from a YAML file."""
    config = load_config(config_path)
    engine_config = EngineConfig.from_dict(config)
    logger.info(
        f"Engine config: window={engine_config.window_size}, "
        f"interval={engine_config.analysis_interval_ms}ms, "
        f"fps={engine_config.frame_rate_hz}, axis={engine_config.axis.value}"
    )
    return engine_config
