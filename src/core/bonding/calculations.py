"""유대 포인트 / 감쇠 계산 - 순수 함수"""

import math
from typing import Optional, Sequence

from src.core.personality.models import BondingStyle

SLOW_STEADY_MULTIPLIER = 0.8
ACTIVITY_MULTIPLIER = 1.3
EMOTIONAL_MULTIPLIER = 1.2
TRUST_BASED_MULTIPLIER = 1.1
EMOTIONAL_EXPERIENCES = ("comfort", "learning")

MAJOR_IMPACT = 20
MODERATE_IMPACT = 10

TIME_POINT_MS = 60_000  # 함께한 시간 1분당 1포인트


def apply_bonding_style(
    style: BondingStyle,
    preferred_activities: Sequence[str],
    points: int,
    experience_type: Optional[str] = None,
) -> int:
    """유대 스타일 배율 적용 (내림).

    - slow_steady: 항상 ×0.8
    - activity_based: 경험 유형이 선호 활동이면 ×1.3
    - emotional: comfort / learning 경험이면 ×1.2
    - trust_based: 항상 ×1.1
    """
    if style == BondingStyle.SLOW_STEADY:
        return math.floor(points * SLOW_STEADY_MULTIPLIER)
    if style == BondingStyle.ACTIVITY_BASED:
        if experience_type is not None and experience_type in preferred_activities:
            return math.floor(points * ACTIVITY_MULTIPLIER)
        return points
    if style == BondingStyle.EMOTIONAL:
        if experience_type in EMOTIONAL_EXPERIENCES:
            return math.floor(points * EMOTIONAL_MULTIPLIER)
        return points
    return math.floor(points * TRUST_BASED_MULTIPLIER)


def impact_significance(points: int) -> str:
    if points > MAJOR_IMPACT:
        return "major"
    if points > MODERATE_IMPACT:
        return "moderate"
    return "minor"


def time_bonus_points(elapsed_ms: int) -> int:
    return elapsed_ms // TIME_POINT_MS if elapsed_ms > 0 else 0


def decay_amount(decay_rate: float, idle_ms: int, idle_threshold_ms: int) -> int:
    """방치 시간이 임계값을 넘었을 때만 floor(rate × 경과 분)."""
    if idle_ms <= idle_threshold_ms:
        return 0
    return math.floor(decay_rate * (idle_ms / 60_000))
