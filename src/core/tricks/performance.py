"""트릭 공연 점수 - 품질, 관객 반응, 메시지"""

import math
import random

BASE_QUALITY = 0.6
MASTERY_WEIGHT = 0.3
RANDOM_SPREAD = 0.1
PERFECT_THRESHOLD = 0.95

MASTERY_GAIN_THRESHOLD = 0.8  # 초과 시 숙련도 획득
BOND_REWARD_THRESHOLD = 0.7  # 초과 시 유대 포인트 전달
MAX_MASTERY = 100
LEARNED_BASE_MASTERY = 60

REACTION_TIERS = (
    (0.9, "spectacular"),
    (0.7, "excellent"),
    (0.5, "good"),
)


def roll_quality_variance() -> float:
    """±0.1 균등 분포."""
    return random.uniform(-RANDOM_SPREAD, RANDOM_SPREAD)


def calculate_performance_quality(
    average_quality: float, mastery_level: int, variance: float
) -> float:
    """clamp(평균 품질 + 숙련 보너스 + 편차, 0, 1). 평균이 0이면 기본 0.6."""
    base = average_quality or BASE_QUALITY
    mastery_bonus = mastery_level / MAX_MASTERY * MASTERY_WEIGHT
    return max(0.0, min(1.0, base + mastery_bonus + variance))


def audience_reaction(quality: float) -> str:
    for threshold, reaction in REACTION_TIERS:
        if quality >= threshold:
            return reaction
    return "poor"


def points_earned(performance_value: int, quality: float) -> int:
    return math.floor(performance_value * quality)


def mastery_gain(quality: float, current_mastery: int) -> int:
    """고품질 공연의 숙련도 증가량. 포화 상태면 0."""
    if current_mastery >= MAX_MASTERY or quality <= MASTERY_GAIN_THRESHOLD:
        return 0
    return math.floor(quality * 10)


def performance_bond_points(quality: float) -> int:
    if quality <= BOND_REWARD_THRESHOLD:
        return 0
    return math.floor(quality * 10)


def performance_message(trick_name: str, reaction: str) -> str:
    if reaction == "spectacular":
        return f"Spectacular performance of {trick_name}! The audience is amazed!"
    if reaction == "excellent":
        return f"Excellent {trick_name}! Everyone is impressed."
    if reaction == "good":
        return f"Good {trick_name}. The audience enjoyed it."
    return f"The {trick_name} needs more practice, but it's a good effort."
