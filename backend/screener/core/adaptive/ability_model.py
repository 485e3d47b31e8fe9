"""
Ability scale mapping for the adaptive screener.

Maps the five ordinal difficulty levels onto the theta (ability) scale and
converts theta back into the bands and percentiles shown to educators.

Difficulty anchors:
    level:  1     2     3    4    5
    theta: -2.0  -1.0  0.0  1.0  2.0

Performance bands (lower bound inclusive):
    theta < -1.0          far_below
    -1.0 <= theta < 0.0   below
    0.0 <= theta < 1.0    on_level
    theta >= 1.0          above

Percentile:
    percentile = 50 + 50 * erf(theta / sqrt(2))

    i.e. Phi(theta) * 100 for a standard normal ability distribution, clamped
    to [1, 99] and rounded. erf uses the Abramowitz & Stegun 7.1.26 rational
    approximation (max absolute error 1.5e-7).

Confidence interval:
    CI = theta ± z * SE, z = Phi^-1(0.5 + level / 2)
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Union

from scipy.stats import norm

from screener.models.enums import DifficultyLevel, PerformanceLevel

logger = logging.getLogger(__name__)

DIFFICULTY_THETA_ANCHORS: Dict[DifficultyLevel, float] = {
    DifficultyLevel.VERY_EASY: -2.0,
    DifficultyLevel.EASY: -1.0,
    DifficultyLevel.MEDIUM: 0.0,
    DifficultyLevel.HARD: 1.0,
    DifficultyLevel.VERY_HARD: 2.0,
}

# Band thresholds; a value equal to a threshold falls in the higher band
FAR_BELOW_THRESHOLD = -1.0
BELOW_THRESHOLD = 0.0
ON_LEVEL_THRESHOLD = 1.0

PERCENTILE_MIN = 1
PERCENTILE_MAX = 99

# Abramowitz & Stegun 7.1.26 coefficients
_ERF_A1 = 0.254829592
_ERF_A2 = -0.284496736
_ERF_A3 = 1.421413741
_ERF_A4 = -1.453152027
_ERF_A5 = 1.061405429
_ERF_P = 0.3275911


@dataclass(frozen=True)
class ConfidenceInterval:
    """Symmetric confidence interval around a theta estimate."""

    lower: float
    upper: float
    level: float


def difficulty_to_theta(level: Union[DifficultyLevel, int]) -> float:
    """
    Map an ordinal difficulty level to its theta anchor.

    Args:
        level: DifficultyLevel or plain int in 1..5.

    Returns:
        Theta anchor in [-2.0, 2.0].

    Raises:
        ValueError: If level is not one of the five difficulty levels.
    """
    try:
        key = DifficultyLevel(level)
    except ValueError as exc:
        raise ValueError(f"Unknown difficulty level: {level!r}") from exc
    return DIFFICULTY_THETA_ANCHORS[key]


def theta_to_performance_level(theta: float) -> PerformanceLevel:
    """Map theta onto one of the four contiguous performance bands."""
    if theta < FAR_BELOW_THRESHOLD:
        return PerformanceLevel.FAR_BELOW
    if theta < BELOW_THRESHOLD:
        return PerformanceLevel.BELOW
    if theta < ON_LEVEL_THRESHOLD:
        return PerformanceLevel.ON_LEVEL
    return PerformanceLevel.ABOVE


def erf(x: float) -> float:
    """
    Error function via the Abramowitz & Stegun rational approximation.

    Odd in x and monotonically increasing; |erf(x)| < 1 for finite x up to
    floating point rounding.
    """
    sign = -1.0 if x < 0 else 1.0
    x = abs(x)

    t = 1.0 / (1.0 + _ERF_P * x)
    poly = ((((_ERF_A5 * t + _ERF_A4) * t + _ERF_A3) * t + _ERF_A2) * t + _ERF_A1) * t
    y = 1.0 - poly * math.exp(-x * x)

    return sign * y


def ability_to_percentile(theta: float) -> int:
    """
    Convert theta to a percentile rank in [1, 99].

    Args:
        theta: Ability estimate.

    Returns:
        Integer percentile; ability_to_percentile(0.0) == 50.
    """
    percentile = 50.0 + 50.0 * erf(theta / math.sqrt(2.0))
    clamped = max(PERCENTILE_MIN, min(PERCENTILE_MAX, percentile))
    # Half-up rounding keeps the mapping non-decreasing at .5 boundaries
    return int(math.floor(clamped + 0.5))


def ability_confidence_interval(
    theta: float,
    standard_error: float,
    level: float = 0.95,
) -> ConfidenceInterval:
    """
    Compute a normal-theory confidence interval for a theta estimate.

    Args:
        theta: Point estimate.
        standard_error: Standard error of the estimate (non-negative).
        level: Coverage level in (0, 1), e.g. 0.95.

    Returns:
        ConfidenceInterval centred on theta.

    Raises:
        ValueError: If level is outside (0, 1) or standard_error is negative.
    """
    if not (0.0 < level < 1.0):
        raise ValueError(f"level must be in (0, 1), got {level}")
    if standard_error < 0:
        raise ValueError(f"standard_error must be non-negative, got {standard_error}")

    z = float(norm.ppf(0.5 + level / 2.0))
    margin = z * standard_error
    return ConfidenceInterval(lower=theta - margin, upper=theta + margin, level=level)
