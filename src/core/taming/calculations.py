"""신뢰 변동 / 성공 확률 계산

전부 순수 함수 - 외부 의존 없음 (random 제외).
"""

import logging
import math
import random
from typing import List, Optional, Sequence

from src.core.taming.interactions import TRUST_LEVELS
from src.core.taming.models import (
    TamingInteraction,
    TamingInteractionResult,
    TamingProgress,
    TrustLevel,
)

logger = logging.getLogger(__name__)

# === 반복 / 연속 성공 보정 ===
REPETITION_WINDOW_MS = 60_000
REPETITION_PRIOR_COUNT = 2  # 이전 2회 + 이번 시도 = 3회째부터 감쇠
REPETITION_MULTIPLIER = 0.7
STREAK_WINDOW = 5
STREAK_MIN_SUCCESSES = 3
STREAK_MULTIPLIER = 1.2
FAILURE_MULTIPLIER = 0.3

# === 성공 확률 ===
BASE_SUCCESS_PROBABILITY = 0.6
TRUST_TIER_WEIGHT = 0.3
EXPERIENCE_STEP = 0.05
EXPERIENCE_CAP = 0.2
PERSONALITY_BONUS_PROBABILITY = 0.1
PERSONALITY_PENALTY_PROBABILITY = 0.15
MIN_SUCCESS_PROBABILITY = 0.1
MAX_SUCCESS_PROBABILITY = 0.95

# === 선호 학습 ===
FAVORITE_SUCCESS_COUNT = 3
DISLIKE_FAILURE_COUNT = 3

# 레거시 유대 카운터 (trust, 총 상호작용 수) - 높은 단계부터 판정
LEGACY_BOND_THRESHOLDS = (
    (5, 90, 40),
    (4, 75, 25),
    (3, 50, 15),
    (2, 30, 8),
    (1, 15, 3),
)

ANIMAL_REACTIONS = {
    True: {
        "low": ("sniffs cautiously", "takes a small step closer", "tilts head curiously"),
        "medium": ("wags tail slightly", "makes eye contact", "seems more relaxed"),
        "high": ("approaches eagerly", "shows clear happiness", "nuzzles affectionately"),
    },
    False: {
        "low": ("backs away nervously", "shows signs of stress", "becomes more alert"),
        "medium": ("hesitates uncertainly", "maintains distance", "watches warily"),
        "high": ("looks disappointed", "seems confused", "turns away briefly"),
    },
}


def clamp_trust(value: float) -> float:
    """0 ~ 100 클램프."""
    return max(0.0, min(100.0, value))


def get_trust_level_info(trust: float) -> TrustLevel:
    """threshold ≤ trust 인 가장 높은 단계."""
    for level in reversed(TRUST_LEVELS):
        if trust >= level.level:
            return level
    return TRUST_LEVELS[0]


def personality_modifier(interaction: TamingInteraction, personality: Optional[str]) -> int:
    """성격 보너스 + 페널티 합산. 성격 미지정이면 0."""
    if personality is None:
        return 0
    req = interaction.requirements
    return req.personality_bonus.get(personality, 0) + req.personality_penalty.get(
        personality, 0
    )


def apply_context_modifiers(
    history: Sequence[TamingInteractionResult],
    interaction_id: str,
    base_modifier: int,
    now_ms: int,
) -> int:
    """반복 페널티(×0.7) → 연속 성공 보너스(×1.2) 순서로 적용.

    반복: 최근 60초 내 같은 상호작용 이전 기록이 2회 이상 (3회째 시도부터).
    연속 성공: 직전 5회 중 3회 이상 성공.
    """
    modifier = base_modifier

    recent_same = sum(
        1
        for h in history
        if h.interaction_id == interaction_id and now_ms - h.timestamp < REPETITION_WINDOW_MS
    )
    if recent_same >= REPETITION_PRIOR_COUNT:
        modifier = math.floor(modifier * REPETITION_MULTIPLIER)

    recent_successes = sum(1 for h in history[-STREAK_WINDOW:] if h.success)
    if recent_successes >= STREAK_MIN_SUCCESSES:
        modifier = math.floor(modifier * STREAK_MULTIPLIER)

    return modifier


def apply_failure_modifier(modifier: int) -> int:
    """실패 시 변동량 ×0.3."""
    return math.floor(modifier * FAILURE_MULTIPLIER)


def calculate_success_probability(
    trust: float,
    history: Sequence[TamingInteractionResult],
    interaction: TamingInteraction,
    personality: Optional[str],
) -> float:
    """0.6 + 단계/100×0.3 + 경험(최대 0.2) ± 성격 궁합, [0.1, 0.95] 클램프."""
    probability = BASE_SUCCESS_PROBABILITY

    tier = get_trust_level_info(trust)
    probability += (tier.level / 100) * TRUST_TIER_WEIGHT

    experience = sum(1 for h in history if h.interaction_id == interaction.id)
    probability += min(experience * EXPERIENCE_STEP, EXPERIENCE_CAP)

    if personality is not None:
        if personality in interaction.requirements.personality_bonus:
            probability += PERSONALITY_BONUS_PROBABILITY
        if personality in interaction.requirements.personality_penalty:
            probability -= PERSONALITY_PENALTY_PROBABILITY

    return max(MIN_SUCCESS_PROBABILITY, min(MAX_SUCCESS_PROBABILITY, probability))


def roll_interaction_success(probability: float) -> bool:
    """성공 판정."""
    return random.random() < probability


def generate_animal_reaction(success: bool, trust_after: float) -> str:
    band = "low" if trust_after < 30 else "medium" if trust_after < 70 else "high"
    return random.choice(ANIMAL_REACTIONS[success][band])


def generate_player_feedback(
    interaction: TamingInteraction, success: bool, modifier: int
) -> str:
    if success and modifier > 5:
        return f"{interaction.name} was very effective! The animal seems much more trusting."
    if success:
        return f"{interaction.name} worked well. You're making progress."
    if modifier > 0:
        return f"{interaction.name} had some effect, but the animal is still cautious."
    return f"{interaction.name} didn't work as hoped. Try a different approach."


def update_preferences(progress: TamingProgress, interaction_id: str, success: bool) -> None:
    """기록 기반 선호/비선호 갱신. 기록에 이번 결과가 이미 포함된 상태에서 호출.

    성공 누적 3회 → 선호. 같은 상호작용의 최근 3회가 모두 실패 → 비선호.
    """
    prefs = progress.preferences
    same: List[TamingInteractionResult] = [
        h for h in progress.interaction_history if h.interaction_id == interaction_id
    ]

    if success:
        if interaction_id not in prefs.favorite_interactions:
            successes = sum(1 for h in same if h.success)
            if successes >= FAVORITE_SUCCESS_COUNT:
                prefs.favorite_interactions.append(interaction_id)
                logger.debug("Favorite interaction learned: %s", interaction_id)
        return

    last = same[-DISLIKE_FAILURE_COUNT:]
    if (
        len(last) >= DISLIKE_FAILURE_COUNT
        and not any(h.success for h in last)
        and interaction_id not in prefs.disliked_interactions
    ):
        prefs.disliked_interactions.append(interaction_id)
        logger.debug("Disliked interaction learned: %s", interaction_id)


def calculate_legacy_bond_level(trust: float, total_interactions: int) -> int:
    """레거시 유대 카운터 0 ~ 5."""
    for level, min_trust, min_interactions in LEGACY_BOND_THRESHOLDS:
        if trust >= min_trust and total_interactions >= min_interactions:
            return level
    return 0
