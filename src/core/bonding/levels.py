"""유대 단계 정의 + 단계 판정

단계는 (bond_points, time_spent_together)의 순수 함수로만 결정된다.
"""

from typing import Dict, Tuple

from src.core.bonding.models import BondLevel, BondLevelDefinition

BOND_LEVELS: Dict[BondLevel, BondLevelDefinition] = {
    BondLevel.STRANGER: BondLevelDefinition(
        level=0,
        name="Stranger",
        description="You are unknown to this animal",
        points_required=0,
        time_required=0,
        unlocks=("basic_observation", "cautious_approach"),
    ),
    BondLevel.ACQUAINTANCE: BondLevelDefinition(
        level=1,
        name="Acquaintance",
        description="The animal recognizes and tolerates you",
        points_required=100,
        time_required=300_000,  # 5분
        special_requirements=("successful_interactions:3",),
        unlocks=("gentle_interaction", "food_offering", "name_assignment"),
        abilities=("recognize_player",),
        privileges=("approach_tolerance",),
    ),
    BondLevel.FRIEND: BondLevelDefinition(
        level=2,
        name="Friend",
        description="The animal enjoys your company",
        points_required=300,
        time_required=900_000,  # 15분
        special_requirements=("trust_level:50", "shared_experiences:2"),
        unlocks=("play_interactions", "basic_tricks", "emotional_support"),
        abilities=("follow_player", "simple_commands"),
        privileges=("priority_attention", "protective_behavior"),
    ),
    BondLevel.CLOSE_FRIEND: BondLevelDefinition(
        level=3,
        name="Close Friend",
        description="You have formed a meaningful bond",
        points_required=600,
        time_required=1_800_000,  # 30분
        special_requirements=(
            "trust_level:75",
            "shared_experiences:5",
            "milestone_achievements:2",
        ),
        unlocks=("advanced_tricks", "emotional_communication", "cooperative_activities"),
        abilities=("empathetic_response", "skill_assistance", "mood_synchronization"),
        privileges=("exclusive_interactions", "special_locations"),
    ),
    BondLevel.COMPANION: BondLevelDefinition(
        level=4,
        name="Companion",
        description="This animal is your loyal companion",
        points_required=850,
        time_required=3_600_000,  # 1시간
        special_requirements=(
            "trust_level:90",
            "shared_experiences:10",
            "milestone_achievements:5",
            "special_bond_event",
        ),
        unlocks=("companionship_privileges", "advanced_cooperation", "telepathic_connection"),
        abilities=("intuitive_assistance", "emotional_healing", "enhanced_abilities"),
        privileges=("permanent_companionship", "shared_adventures", "mutual_growth"),
    ),
    BondLevel.SOUL_MATE: BondLevelDefinition(
        level=5,
        name="Soul Mate",
        description="You and this animal share an unbreakable bond",
        points_required=1000,
        time_required=7_200_000,  # 2시간
        special_requirements=(
            "trust_level:100",
            "shared_experiences:20",
            "milestone_achievements:10",
            "legendary_bond_event",
        ),
        unlocks=("soul_bond_abilities", "perfect_harmony", "transcendent_connection"),
        abilities=("soul_synchronization", "shared_consciousness", "miraculous_abilities"),
        privileges=("eternal_bond", "legendary_status", "unique_experiences"),
    ),
}

MAX_BOND_POINTS = 1000

# 높은 단계부터 스캔
_LEVELS_DESCENDING: Tuple[BondLevel, ...] = tuple(reversed(list(BondLevel)))


def calculate_bond_level(points: int, time_spent_ms: int) -> BondLevel:
    """포인트와 누적 시간이 모두 충족되는 가장 높은 단계."""
    for level in _LEVELS_DESCENDING:
        definition = BOND_LEVELS[level]
        if points >= definition.points_required and time_spent_ms >= definition.time_required:
            return level
    return BondLevel.STRANGER


def level_number(level: BondLevel) -> int:
    return BOND_LEVELS[level].level


def clamp_bond_points(value: int) -> int:
    """0 ~ 1000 클램프."""
    return max(0, min(MAX_BOND_POINTS, value))
