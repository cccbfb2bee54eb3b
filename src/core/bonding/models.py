"""유대 시스템 도메인 모델

DB 무관 순수 데이터 클래스.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from src.core.personality.models import BondingStyle


class BondLevel(str, Enum):
    """유대 단계 6단계 (순서 있음)"""

    STRANGER = "stranger"
    ACQUAINTANCE = "acquaintance"
    FRIEND = "friend"
    CLOSE_FRIEND = "close_friend"
    COMPANION = "companion"
    SOUL_MATE = "soul_mate"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]


_LEVEL_RANK = {level: i for i, level in enumerate(BondLevel)}


@dataclass(frozen=True)
class BondLevelDefinition:
    level: int
    name: str
    description: str
    points_required: int
    time_required: int  # ms
    special_requirements: Tuple[str, ...] = ()
    unlocks: Tuple[str, ...] = ()
    abilities: Tuple[str, ...] = ()
    privileges: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AbilityEffect:
    type: str  # "stat_boost" | "skill_enhancement" | "special_action" | "environmental" | "social"
    target: str  # "player" | "companion" | "both" | "environment"
    value: float
    description: str
    duration: Optional[int] = None  # ms, None이면 영구


@dataclass(frozen=True)
class CompanionAbility:
    id: str
    name: str
    description: str
    type: str  # "passive" | "active" | "triggered"
    bond_level_required: BondLevel
    effects: Tuple[AbilityEffect, ...]
    cooldown: Optional[int] = None  # ms
    energy_cost: Optional[int] = None


@dataclass
class SharedExperience:
    """함께한 경험. id/timestamp는 엔진이 기록 시점에 채운다."""

    type: str  # "exploration" | "play" | "learning" | "challenge" | "comfort" | "adventure"
    description: str
    bond_value_gained: int
    emotional_impact: str = "low"  # "low" | "medium" | "high" | "profound"
    location: Optional[str] = None
    participants: List[str] = field(default_factory=list)
    id: str = ""
    timestamp: int = 0


@dataclass
class BondingRequirement:
    type: str  # "time_spent" | "shared_experiences" | "trust_level" | "activities_completed" | "special_event"
    value: float
    description: str
    current_progress: float = 0.0
    completed: bool = False


@dataclass
class BondingReward:
    type: str  # "ability" | "interaction" | "privilege" | "knowledge" | "item" | "access"
    id: str
    name: str
    description: str
    permanent: bool = True


@dataclass
class BondingMilestone:
    id: str
    name: str
    description: str
    bond_level_required: BondLevel
    requirements: List[BondingRequirement]
    rewards: List[BondingReward]
    achieved: bool = False
    achieved_date: Optional[int] = None
    is_special: bool = False


@dataclass
class RelationshipEvent:
    timestamp: int
    type: str  # "bond_increase" | "bond_decrease" | "milestone_achieved" | "ability_unlocked" | ...
    description: str
    bond_impact: int
    significance: str  # "minor" | "moderate" | "major" | "life_changing"


@dataclass
class BondingPreferences:
    bonding_style: BondingStyle = BondingStyle.TRUST_BASED
    preferred_activities: List[str] = field(default_factory=list)
    favorite_interactions: List[str] = field(default_factory=list)


@dataclass
class BondingProgress:
    """동물별 유대 진행 상태"""

    animal_id: str
    current_bond_level: BondLevel = BondLevel.STRANGER
    bond_points: int = 0  # 0 ~ 1000
    bond_level_number: int = 0
    time_spent_together: int = 0  # ms 누적
    shared_experiences: List[SharedExperience] = field(default_factory=list)
    bonding_milestones: List[BondingMilestone] = field(default_factory=list)
    companionship_date: Optional[int] = None
    last_bonding_activity: int = 0
    bond_decay_rate: float = 0.3  # 생성 시 성격에서 한 번 도출
    special_abilities: List[str] = field(default_factory=list)
    unlocked_rewards: List[str] = field(default_factory=list)
    bonding_preferences: BondingPreferences = field(default_factory=BondingPreferences)
    relationship_history: List[RelationshipEvent] = field(default_factory=list)


@dataclass
class BondPointsResult:
    level_up: bool
    new_level: Optional[BondLevel] = None
    points_added: int = 0
    milestones_achieved: List[BondingMilestone] = field(default_factory=list)
    abilities_unlocked: List[CompanionAbility] = field(default_factory=list)


@dataclass
class AbilityUseResult:
    success: bool
    message: str
    effects: List[AbilityEffect] = field(default_factory=list)
    cooldown_until: Optional[int] = None
    energy_cost: Optional[int] = None
