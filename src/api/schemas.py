"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from src.core.animal import Animal, AnimalStats
from src.core.personality.models import PersonalityProfile, PersonalityTrait


# === Shared Payloads ===


class AnimalPayload(BaseModel):
    """동물 디스크립터"""

    id: str = Field(..., min_length=1, max_length=50, description="동물 ID")
    species: str = Field(..., min_length=1, description="종: rabbit, fox, bird, ...")
    trust: float = Field(0.0, ge=0, le=100)
    energy: float = Field(100.0, ge=0, le=100)

    def to_core(self) -> Animal:
        return Animal(
            id=self.id,
            species=self.species,
            stats=AnimalStats(trust=self.trust, energy=self.energy),
        )


class PersonalityPayload(BaseModel):
    """성격 프로필"""

    primary: PersonalityTrait
    secondary: Optional[PersonalityTrait] = None
    activity_level: str = "moderate"
    social_preference: str = "small_groups"
    preferred_interactions: list[str] = []

    def to_core(self) -> PersonalityProfile:
        return PersonalityProfile(
            primary=self.primary,
            secondary=self.secondary,
            activity_level=self.activity_level,
            social_preference=self.social_preference,
            preferred_interactions=list(self.preferred_interactions),
        )


# === Taming ===


class StartSessionRequest(BaseModel):
    """길들이기 세션 시작 요청"""

    animal: AnimalPayload


class SessionResponse(BaseModel):
    """길들이기 세션"""

    animal_id: str
    start_time: int
    initial_trust: float
    end_time: Optional[int] = None
    final_trust: Optional[float] = None
    successful: bool = False
    interaction_count: int = 0


class InteractionRequest(BaseModel):
    """상호작용 시도 요청"""

    animal_id: str
    interaction_id: str = Field(..., description="observe, approach_slow, offer_food, ...")
    items: list[str] = Field(default_factory=list, description="플레이어 보유 아이템")
    personality: Optional[PersonalityTrait] = None


class InteractionResponse(BaseModel):
    """상호작용 결과"""

    interaction_id: str
    success: bool
    trust_before: float
    trust_after: float
    modifier: int
    trust_level: str
    animal_reaction: str
    player_feedback: str


class TamingStatusResponse(BaseModel):
    """길들이기 진행 상태"""

    animal_id: str
    current_trust: float
    trust_level: str
    total_interactions: int
    successful_interactions: int
    bond_level: int
    favorite_interactions: list[str] = []
    disliked_interactions: list[str] = []
    available_interactions: list[str] = []
    session_active: bool = False


# === Bonding ===


class BondingInitRequest(BaseModel):
    """유대 초기화 요청"""

    animal: AnimalPayload
    personality: PersonalityPayload


class BondPointsRequest(BaseModel):
    """유대 포인트 추가 요청"""

    animal_id: str
    points: int = Field(..., ge=0, le=1000)
    reason: str = Field(..., min_length=1)
    experience_type: Optional[str] = Field(
        None, description="exploration, play, learning, challenge, comfort, adventure"
    )


class BondPointsResponse(BaseModel):
    """유대 포인트 추가 결과"""

    level_up: bool
    new_level: Optional[str] = None
    points_added: int
    milestones_achieved: list[str] = []
    abilities_unlocked: list[str] = []


class MilestoneInfo(BaseModel):
    id: str
    name: str
    achieved: bool
    achieved_date: Optional[int] = None


class BondingStatusResponse(BaseModel):
    """유대 진행 상태"""

    animal_id: str
    bond_level: str
    bond_points: int
    time_spent_together: int
    bonding_style: str
    special_abilities: list[str] = []
    milestones: list[MilestoneInfo] = []
    companionship_date: Optional[int] = None


class AbilityUseRequest(BaseModel):
    """동반자 능력 사용 요청"""

    animal_id: str
    ability_id: str


class AbilityUseResponse(BaseModel):
    """동반자 능력 사용 결과"""

    success: bool
    message: str
    effects: list[dict[str, Any]] = []
    cooldown_until: Optional[int] = None
    energy_cost: Optional[int] = None


# === Tricks ===


class LearnTrickRequest(BaseModel):
    """트릭 학습 시작 요청"""

    animal: AnimalPayload
    trick_id: str
    personality: Optional[PersonalityPayload] = None


class LearnTrickResponse(BaseModel):
    """트릭 학습 시작 결과"""

    success: bool
    message: str
    session_id: Optional[str] = None
    requirements: Optional[list[str]] = None


class GesturePayload(BaseModel):
    """제스처 입력"""

    type: str = Field(..., description="tap, swipe, hold, double_tap, circle, sequence")
    accuracy: float = Field(..., ge=0, le=1)
    timing: float = Field(1.0, ge=0, le=1)
    direction: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)


class GestureRequest(BaseModel):
    """제스처 시도 요청"""

    animal_id: str
    trick_id: str
    gesture: GesturePayload


class GestureResponse(BaseModel):
    """제스처 시도 결과"""

    success: bool
    feedback: str
    phase_advanced: bool
    trick_learned: bool
    gesture_accuracy: float
    next_phase: Optional[str] = None


class PerformRequest(BaseModel):
    """트릭 공연 요청"""

    animal_id: str
    trick_id: str


class PerformResponse(BaseModel):
    """트릭 공연 결과"""

    success: bool
    message: str
    mastery_gained: bool = False
    quality: Optional[float] = None
    audience_reaction: Optional[str] = None
    points_earned: Optional[int] = None
    perfect_execution: bool = False


class TrickProgressInfo(BaseModel):
    trick_id: str
    current_phase: str
    phase_progress: float
    mastery_level: int
    is_learned: bool
    is_mastered: bool


class TrickStatusResponse(BaseModel):
    """트릭 학습 현황"""

    animal_id: str
    learning: list[TrickProgressInfo] = []
    learned: list[str] = []
    performance_count: int = 0


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
