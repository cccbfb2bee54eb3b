"""유대 Core 패키지 - 공개 API"""

from src.core.bonding.models import (
    AbilityEffect,
    AbilityUseResult,
    BondingMilestone,
    BondingPreferences,
    BondingProgress,
    BondingRequirement,
    BondingReward,
    BondLevel,
    BondLevelDefinition,
    BondPointsResult,
    CompanionAbility,
    RelationshipEvent,
    SharedExperience,
)
from src.core.bonding.levels import (
    BOND_LEVELS,
    MAX_BOND_POINTS,
    calculate_bond_level,
    clamp_bond_points,
    level_number,
)
from src.core.bonding.abilities import (
    COMPANION_ABILITIES,
    abilities_for_level,
    get_ability,
    newly_unlocked,
)
from src.core.bonding.milestones import create_initial_milestones, evaluate_milestones
from src.core.bonding.calculations import (
    apply_bonding_style,
    decay_amount,
    impact_significance,
    time_bonus_points,
)

__all__ = [
    "AbilityEffect",
    "AbilityUseResult",
    "BondingMilestone",
    "BondingPreferences",
    "BondingProgress",
    "BondingRequirement",
    "BondingReward",
    "BondLevel",
    "BondLevelDefinition",
    "BondPointsResult",
    "CompanionAbility",
    "RelationshipEvent",
    "SharedExperience",
    "BOND_LEVELS",
    "MAX_BOND_POINTS",
    "calculate_bond_level",
    "clamp_bond_points",
    "level_number",
    "COMPANION_ABILITIES",
    "abilities_for_level",
    "get_ability",
    "newly_unlocked",
    "create_initial_milestones",
    "evaluate_milestones",
    "apply_bonding_style",
    "decay_amount",
    "impact_significance",
    "time_bonus_points",
]
