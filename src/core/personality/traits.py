"""성격 → 고정 보정치 도출 테이블

모든 테이블은 PersonalityTrait 전체를 키로 가진다.
import 시점에 누락 검사를 수행하므로 새 특성을 추가하면
모든 테이블을 채우기 전까지 모듈이 로드되지 않는다.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple, TypeVar

from src.core.personality.models import (
    BondingStyle,
    PersonalityProfile,
    PersonalityTrait,
)

T = TypeVar("T")


@dataclass(frozen=True)
class TrickModifierRule:
    """성격별 트릭 학습 보정. categories가 있으면 해당 카테고리에만 적용."""

    difficulty_adjustment: float = 0.0
    learning_speed_multiplier: float = 1.0
    gesture_tolerance_bonus: float = 0.0
    categories: Optional[Tuple[str, ...]] = None


NO_TRICK_MODIFIER = TrickModifierRule()

# 유대 감쇠율 (분당 포인트)
BOND_DECAY_RATES: Dict[PersonalityTrait, float] = {
    PersonalityTrait.FRIENDLY: 0.1,
    PersonalityTrait.SHY: 0.5,
    PersonalityTrait.AGGRESSIVE: 0.7,
    PersonalityTrait.PLAYFUL: 0.3,
    PersonalityTrait.LAZY: 0.2,
    PersonalityTrait.CURIOUS: 0.3,
    PersonalityTrait.ENERGETIC: 0.3,
    PersonalityTrait.CAUTIOUS: 0.3,
    PersonalityTrait.BOLD: 0.3,
    PersonalityTrait.SOCIAL: 0.3,
    PersonalityTrait.SOLITARY: 0.3,
    PersonalityTrait.PATIENT: 0.3,
    PersonalityTrait.RESTLESS: 0.3,
}

_TRUST_BASED = (BondingStyle.TRUST_BASED, ("consistent_interaction", "routine"))

# 유대 스타일 + 선호 활동. 활동 태그는 SharedExperience.type과 같은 어휘를 포함한다.
BONDING_STYLES: Dict[PersonalityTrait, Tuple[BondingStyle, Tuple[str, ...]]] = {
    PersonalityTrait.PLAYFUL: (
        BondingStyle.ACTIVITY_BASED,
        ("play", "adventure", "games"),
    ),
    PersonalityTrait.SHY: (
        BondingStyle.SLOW_STEADY,
        ("quiet_time", "gentle_interaction"),
    ),
    PersonalityTrait.FRIENDLY: (
        BondingStyle.EMOTIONAL,
        ("social_time", "affection", "communication"),
    ),
    PersonalityTrait.CURIOUS: (
        BondingStyle.ACTIVITY_BASED,
        ("exploration", "learning", "discovery"),
    ),
    PersonalityTrait.AGGRESSIVE: _TRUST_BASED,
    PersonalityTrait.LAZY: _TRUST_BASED,
    PersonalityTrait.ENERGETIC: _TRUST_BASED,
    PersonalityTrait.CAUTIOUS: _TRUST_BASED,
    PersonalityTrait.BOLD: _TRUST_BASED,
    PersonalityTrait.SOCIAL: _TRUST_BASED,
    PersonalityTrait.SOLITARY: _TRUST_BASED,
    PersonalityTrait.PATIENT: _TRUST_BASED,
    PersonalityTrait.RESTLESS: _TRUST_BASED,
}

TRICK_MODIFIERS: Dict[PersonalityTrait, TrickModifierRule] = {
    PersonalityTrait.CURIOUS: TrickModifierRule(
        learning_speed_multiplier=1.2, gesture_tolerance_bonus=0.1
    ),
    PersonalityTrait.PLAYFUL: TrickModifierRule(
        learning_speed_multiplier=1.3, categories=("movement", "performance")
    ),
    PersonalityTrait.PATIENT: TrickModifierRule(gesture_tolerance_bonus=0.2),
    PersonalityTrait.ENERGETIC: TrickModifierRule(
        learning_speed_multiplier=1.4, categories=("movement",)
    ),
    PersonalityTrait.SHY: TrickModifierRule(
        difficulty_adjustment=0.1, learning_speed_multiplier=0.8
    ),
    PersonalityTrait.AGGRESSIVE: NO_TRICK_MODIFIER,
    PersonalityTrait.FRIENDLY: NO_TRICK_MODIFIER,
    PersonalityTrait.LAZY: NO_TRICK_MODIFIER,
    PersonalityTrait.CAUTIOUS: NO_TRICK_MODIFIER,
    PersonalityTrait.BOLD: NO_TRICK_MODIFIER,
    PersonalityTrait.SOCIAL: NO_TRICK_MODIFIER,
    PersonalityTrait.SOLITARY: NO_TRICK_MODIFIER,
    PersonalityTrait.RESTLESS: NO_TRICK_MODIFIER,
}


def _require_exhaustive(table: Mapping[PersonalityTrait, T], name: str) -> None:
    missing = [t.value for t in PersonalityTrait if t not in table]
    if missing:
        raise RuntimeError(f"{name} missing personality traits: {missing}")


for _name, _table in (
    ("BOND_DECAY_RATES", BOND_DECAY_RATES),
    ("BONDING_STYLES", BONDING_STYLES),
    ("TRICK_MODIFIERS", TRICK_MODIFIERS),
):
    _require_exhaustive(_table, _name)


# ── 도출 함수 ────────────────────────────────────────────────


def bond_decay_rate(profile: PersonalityProfile) -> float:
    return BOND_DECAY_RATES[profile.primary]


def bonding_style(profile: PersonalityProfile) -> Tuple[BondingStyle, Tuple[str, ...]]:
    return BONDING_STYLES[profile.primary]


def trick_modifier_rule(
    profile: Optional[PersonalityProfile], trick_category: str
) -> TrickModifierRule:
    """트릭 카테고리에 적용되는 보정 규칙. 프로필 없거나 카테고리 불일치면 무보정."""
    if profile is None:
        return NO_TRICK_MODIFIER
    rule = TRICK_MODIFIERS[profile.primary]
    if rule.categories is not None and trick_category not in rule.categories:
        return NO_TRICK_MODIFIER
    return rule
