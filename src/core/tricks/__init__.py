"""트릭 학습 Core 패키지 - 공개 API"""

from src.core.tricks.models import (
    AnimalTrickRecord,
    GestureAttemptResult,
    GestureInput,
    LearnedTrick,
    PerformTrickResult,
    PersonalityModifiers,
    SpeciesCompatibility,
    StartLearningResult,
    TeachingPhase,
    TrickAttempt,
    TrickDefinition,
    TrickGesture,
    TrickLearningProgress,
    TrickPerformance,
    TrickRequirement,
    TrickReward,
    TrickTeachingSession,
)
from src.core.tricks.registry import TrickRegistry, parse_trick
from src.core.tricks.gestures import acceptance_threshold, evaluate_gesture_accuracy
from src.core.tricks.performance import (
    audience_reaction,
    calculate_performance_quality,
    mastery_gain,
    performance_bond_points,
    performance_message,
    points_earned,
    roll_quality_variance,
)

__all__ = [
    "AnimalTrickRecord",
    "GestureAttemptResult",
    "GestureInput",
    "LearnedTrick",
    "PerformTrickResult",
    "PersonalityModifiers",
    "SpeciesCompatibility",
    "StartLearningResult",
    "TeachingPhase",
    "TrickAttempt",
    "TrickDefinition",
    "TrickGesture",
    "TrickLearningProgress",
    "TrickPerformance",
    "TrickRequirement",
    "TrickReward",
    "TrickTeachingSession",
    "TrickRegistry",
    "parse_trick",
    "acceptance_threshold",
    "evaluate_gesture_accuracy",
    "audience_reaction",
    "calculate_performance_quality",
    "mastery_gain",
    "performance_bond_points",
    "performance_message",
    "points_earned",
    "roll_quality_variance",
]
