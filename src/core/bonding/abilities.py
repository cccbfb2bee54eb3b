"""동반자 능력 정의 (8종)"""

from typing import Dict, List, Optional

from src.core.bonding.levels import level_number
from src.core.bonding.models import AbilityEffect, BondLevel, CompanionAbility

COMPANION_ABILITIES: Dict[str, CompanionAbility] = {
    "recognize_player": CompanionAbility(
        id="recognize_player",
        name="Player Recognition",
        description="The animal can recognize and remember you",
        type="passive",
        bond_level_required=BondLevel.ACQUAINTANCE,
        effects=(
            AbilityEffect(
                type="social",
                target="companion",
                value=1,
                description="Animal approaches you more readily",
            ),
        ),
    ),
    "follow_player": CompanionAbility(
        id="follow_player",
        name="Following",
        description="The animal will follow you around",
        type="active",
        bond_level_required=BondLevel.FRIEND,
        cooldown=5_000,
        effects=(
            AbilityEffect(
                type="special_action",
                target="companion",
                value=1,
                description="Animal follows within 2 tiles of player",
            ),
        ),
    ),
    "simple_commands": CompanionAbility(
        id="simple_commands",
        name="Simple Commands",
        description="The animal responds to basic commands",
        type="active",
        bond_level_required=BondLevel.FRIEND,
        cooldown=3_000,
        effects=(
            AbilityEffect(
                type="skill_enhancement",
                target="companion",
                value=1,
                description="Animal can perform sit, stay, come commands",
            ),
        ),
    ),
    "empathetic_response": CompanionAbility(
        id="empathetic_response",
        name="Empathetic Response",
        description="The animal responds to your emotional state",
        type="triggered",
        bond_level_required=BondLevel.CLOSE_FRIEND,
        effects=(
            AbilityEffect(
                type="stat_boost",
                target="player",
                value=10,
                duration=30_000,
                description="Provides comfort when player is stressed",
            ),
        ),
    ),
    "skill_assistance": CompanionAbility(
        id="skill_assistance",
        name="Skill Assistance",
        description="The animal helps you with various tasks",
        type="active",
        bond_level_required=BondLevel.CLOSE_FRIEND,
        cooldown=15_000,
        energy_cost=5,
        effects=(
            AbilityEffect(
                type="skill_enhancement",
                target="player",
                value=20,
                duration=60_000,
                description="Improves success rate of interactions",
            ),
        ),
    ),
    "intuitive_assistance": CompanionAbility(
        id="intuitive_assistance",
        name="Intuitive Assistance",
        description="The animal anticipates your needs",
        type="passive",
        bond_level_required=BondLevel.COMPANION,
        effects=(
            AbilityEffect(
                type="stat_boost",
                target="player",
                value=15,
                description="Reduces energy cost of all actions",
            ),
        ),
    ),
    "emotional_healing": CompanionAbility(
        id="emotional_healing",
        name="Emotional Healing",
        description="The animal can heal emotional wounds",
        type="active",
        bond_level_required=BondLevel.COMPANION,
        cooldown=60_000,
        energy_cost=10,
        effects=(
            AbilityEffect(
                type="stat_boost",
                target="player",
                value=50,
                duration=300_000,
                description="Significantly reduces stress and increases happiness",
            ),
        ),
    ),
    "soul_synchronization": CompanionAbility(
        id="soul_synchronization",
        name="Soul Synchronization",
        description="Your souls are perfectly synchronized",
        type="passive",
        bond_level_required=BondLevel.SOUL_MATE,
        effects=(
            AbilityEffect(
                type="stat_boost",
                target="both",
                value=25,
                description="All stats boosted when together",
            ),
        ),
    ),
}


def get_ability(ability_id: str) -> Optional[CompanionAbility]:
    return COMPANION_ABILITIES.get(ability_id)


def abilities_for_level(level: BondLevel) -> List[str]:
    """해당 단계 이하에서 해금되는 능력 ID (정의 순서)."""
    current = level_number(level)
    return [
        ability.id
        for ability in COMPANION_ABILITIES.values()
        if level_number(ability.bond_level_required) <= current
    ]


def newly_unlocked(level: BondLevel, already: List[str]) -> List[CompanionAbility]:
    """현재 단계에서 사용 가능하지만 아직 기록되지 않은 능력."""
    current = level_number(level)
    return [
        ability
        for ability in COMPANION_ABILITIES.values()
        if level_number(ability.bond_level_required) <= current and ability.id not in already
    ]
