"""트릭 학습 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


# ── 정적 정의 (tricks.json) ──────────────────────────────────


@dataclass(frozen=True)
class TrickGesture:
    type: str  # "tap" | "swipe" | "hold" | "double_tap" | "circle" | "sequence"
    tolerance: float  # 0~1
    description: str = ""
    direction: Optional[str] = None
    duration: Optional[int] = None  # ms, hold 제스처용


@dataclass(frozen=True)
class PhaseFeedback:
    success: tuple[str, ...] = ()
    failure: tuple[str, ...] = ()
    encouragement: tuple[str, ...] = ()


@dataclass(frozen=True)
class TeachingPhase:
    id: str
    name: str
    description: str
    duration: int  # 연출용 예상 시간
    required_success: float  # 이 정확도 이상이면 1회 성공
    gestures: tuple[TrickGesture, ...]
    feedback: PhaseFeedback = PhaseFeedback()


@dataclass(frozen=True)
class TrickRequirement:
    type: str  # "trust_level" | "bond_level" | "prerequisite_trick" | "energy_level" | "personality"
    value: Union[str, float]
    description: str = ""


@dataclass(frozen=True)
class TrickReward:
    type: str  # "bond_points" | "trust_points" | "experience" | "unlock" | "ability"
    value: Union[str, float]
    description: str = ""


@dataclass(frozen=True)
class SpeciesCompatibility:
    difficulty: str
    success_rate: float
    special_notes: Optional[str] = None


@dataclass(frozen=True)
class TrickDefinition:
    """트릭 원형 - 불변. tricks.json에서 로드."""

    id: str
    name: str
    description: str
    category: str  # "basic" | "movement" | "performance" | "utility" | "social" | "advanced"
    difficulty: str
    requirements: tuple[TrickRequirement, ...]
    learning_time: int
    practice_attempts: int  # 단계 진행 1.0까지 필요한 성공 횟수
    gestures: tuple[TrickGesture, ...]
    teaching_phases: tuple[TeachingPhase, ...]
    species_compatibility: dict[str, SpeciesCompatibility]
    performance_value: int
    energy_cost: int
    cooldown: int
    mastery_rewards: tuple[TrickReward, ...] = ()
    unlocks: tuple[str, ...] = ()
    flavor_text: str = ""
    performance_description: str = ""
    mastery_description: str = ""
    tags: tuple[str, ...] = ()

    def phase_index(self, phase_id: str) -> int:
        """단계 인덱스. 없으면 -1."""
        for i, phase in enumerate(self.teaching_phases):
            if phase.id == phase_id:
                return i
        return -1

    @property
    def bond_point_reward(self) -> int:
        """학습 완료 시 유대 포인트 보상 합계."""
        return int(
            sum(
                r.value
                for r in self.mastery_rewards
                if r.type == "bond_points" and isinstance(r.value, (int, float))
            )
        )


# ── 동물별 진행 상태 ─────────────────────────────────────────


@dataclass
class PersonalityModifiers:
    difficulty_adjustment: float = 0.0
    learning_speed_multiplier: float = 1.0
    gesture_tolerance_bonus: float = 0.0


@dataclass
class TrickLearningProgress:
    trick_id: str
    animal_id: str
    current_phase: str
    started_learning: int
    last_attempt: int
    phase_progress: float = 0.0  # 0~1
    phase_successes: int = 0  # 현재 단계 성공 횟수
    attempts_in_phase: int = 0
    successful_attempts: int = 0
    total_attempts: int = 0
    mastery_level: int = 0  # 0~100
    is_learned: bool = False
    is_mastered: bool = False
    personality_modifiers: PersonalityModifiers = field(default_factory=PersonalityModifiers)


@dataclass
class TrickAttempt:
    trick_id: str
    animal_id: str
    phase_id: str
    timestamp: int
    gesture_accuracy: float
    timing_accuracy: float
    success: bool
    feedback: str
    energy_used: int
    bond_points_gained: int


@dataclass
class TrickPerformance:
    trick_id: str
    animal_id: str
    timestamp: int
    performance_quality: float
    audience_reaction: str  # "poor" | "good" | "excellent" | "spectacular"
    points_earned: int
    energy_used: int
    perfect_execution: bool


@dataclass
class LearnedTrick:
    trick_id: str
    animal_id: str
    learned_date: int
    mastered_date: Optional[int] = None
    times_performed: int = 0
    average_performance_quality: float = 0.6
    personal_best: float = 0.0
    customizations: list[str] = field(default_factory=list)


@dataclass
class TrickTeachingSession:
    session_id: str
    trick_id: str
    animal_id: str
    start_time: int
    end_time: Optional[int] = None
    attempts: list[TrickAttempt] = field(default_factory=list)
    phase_advancement: bool = False
    session_success: bool = False
    energy_expended: int = 0
    bonding_gained: int = 0
    notes: list[str] = field(default_factory=list)


@dataclass
class AnimalTrickRecord:
    """영속화 단위 - 동물 하나의 트릭 상태 전부."""

    learning: dict[str, TrickLearningProgress] = field(default_factory=dict)
    learned: list[LearnedTrick] = field(default_factory=list)
    performances: list[TrickPerformance] = field(default_factory=list)

    def find_learned(self, trick_id: str) -> Optional[LearnedTrick]:
        for learned in self.learned:
            if learned.trick_id == trick_id:
                return learned
        return None


# ── 입력 / 결과 ──────────────────────────────────────────────


@dataclass
class GestureInput:
    type: str
    accuracy: float  # 0~1, 입력 인식기가 측정한 원시 정확도
    timing: float = 1.0
    direction: Optional[str] = None
    duration: Optional[int] = None


@dataclass
class StartLearningResult:
    success: bool
    message: str
    session: Optional[TrickTeachingSession] = None
    requirements: Optional[list[str]] = None


@dataclass
class GestureAttemptResult:
    success: bool
    feedback: str
    phase_advanced: bool
    trick_learned: bool
    gesture_accuracy: float
    next_phase: Optional[str] = None


@dataclass
class PerformTrickResult:
    success: bool
    message: str
    mastery_gained: bool = False
    performance: Optional[TrickPerformance] = None
