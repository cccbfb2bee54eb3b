"""길들이기 도메인 모델

DB 무관 순수 데이터 클래스.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class TrustLevel:
    """신뢰 단계 (threshold 이상이면 해당 단계)"""

    level: int  # 0 ~ 100 하한
    name: str
    description: str
    requirements: int  # 권장 최소 상호작용 수 (표시용)
    unlocks: Tuple[str, ...]
    color: str


@dataclass(frozen=True)
class InteractionRequirements:
    min_trust_level: Optional[float] = None
    max_trust_level: Optional[float] = None
    required_items: Tuple[str, ...] = ()
    # 성격 → 보정치 (bonus는 양수, penalty는 음수로 저장)
    personality_bonus: Dict[str, int] = field(default_factory=dict)
    personality_penalty: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class TamingInteraction:
    """상호작용 정의 (정적 테이블, 런타임 불변)"""

    id: str
    type: str  # "approach" | "observe" | "offer_food" | ...
    name: str
    description: str
    trust_modifier: int  # 기본 신뢰 변동
    energy_cost: int
    duration: int  # ms, 프레젠테이션 연출용
    requirements: InteractionRequirements = field(
        default_factory=InteractionRequirements
    )
    cooldown: Optional[int] = None  # ms
    stress_effect: int = 0  # -10 ~ +10
    icon: str = ""


@dataclass
class TamingInteractionResult:
    interaction_id: str
    timestamp: int
    trust_before: float
    trust_after: float
    modifier: int
    success: bool
    animal_reaction: str
    player_feedback: str


@dataclass
class TamingSession:
    animal_id: str
    start_time: int
    initial_trust: float
    interactions: List[TamingInteractionResult] = field(default_factory=list)
    end_time: Optional[int] = None
    final_trust: Optional[float] = None
    successful: bool = False
    notes: List[str] = field(default_factory=list)


@dataclass
class TamingPreferences:
    favorite_interactions: List[str] = field(default_factory=list)
    disliked_interactions: List[str] = field(default_factory=list)
    optimal_approach_distance: int = 3
    best_times_of_day: List[str] = field(default_factory=list)


@dataclass
class TamingProgress:
    """동물별 길들이기 진행 상태"""

    animal_id: str
    current_trust: float = 0.0  # 0 ~ 100
    total_interactions: int = 0
    successful_interactions: int = 0
    last_interaction: int = 0
    interaction_history: List[TamingInteractionResult] = field(default_factory=list)
    personality_learned: bool = False
    bond_level: int = 0  # 0 ~ 5, BondingEngine과 별개로 유지되는 레거시 카운터
    taming_started: int = 0
    taming_completed: Optional[int] = None
    sessions: List[TamingSession] = field(default_factory=list)
    preferences: TamingPreferences = field(default_factory=TamingPreferences)


@dataclass
class GateResult:
    """UI 게이팅 결과. 실패는 예외가 아니라 표시 가능한 값이다."""

    allowed: bool
    reason: Optional[str] = None
