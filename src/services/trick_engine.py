"""트릭 학습 엔진 - 단계별 교육, 제스처 평가, 공연

Service 계층: 트릭 원형은 TrickRegistry, 계산은 src.core.tricks에 위임.
유대 단계는 주입된 bond_level_of 공급자로 읽고, 보상은 이벤트로만 전달한다.
"""

import logging
import random
from typing import Callable, Dict, List, Optional

from src.core.animal import Animal
from src.core.bonding.models import BondLevel
from src.core.clock import Clock
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.personality.models import PersonalityProfile
from src.core.personality.traits import trick_modifier_rule
from src.core.tricks.gestures import evaluate_gesture_accuracy
from src.core.tricks.models import (
    AnimalTrickRecord,
    GestureAttemptResult,
    GestureInput,
    LearnedTrick,
    PerformTrickResult,
    PersonalityModifiers,
    StartLearningResult,
    TeachingPhase,
    TrickAttempt,
    TrickDefinition,
    TrickLearningProgress,
    TrickPerformance,
    TrickTeachingSession,
)
from src.core.tricks.performance import (
    LEARNED_BASE_MASTERY,
    MAX_MASTERY,
    PERFECT_THRESHOLD,
    audience_reaction,
    calculate_performance_quality,
    mastery_gain,
    performance_message,
    points_earned,
    roll_quality_variance,
)
from src.core.tricks.registry import TrickRegistry
from src.db.store import Store, read_entries, write_entries
from src.services.codecs import trick_codec
from src.services.errors import TrickLearningError

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "feral-friends-trick-progress"

MIN_LEARNABLE_SUCCESS_RATE = 0.1
MIN_AVAILABLE_SUCCESS_RATE = 0.3


class TrickLearningEngine:
    """동물별 트릭 학습/공연 관리"""

    def __init__(
        self,
        registry: TrickRegistry,
        store: Store,
        event_bus: EventBus,
        clock: Clock,
        bond_level_of: Optional[Callable[[str], Optional[BondLevel]]] = None,
        store_key: str = DEFAULT_STORE_KEY,
    ):
        self._registry = registry
        self._store = store
        self._bus = event_bus
        self._clock = clock
        self._bond_level_of = bond_level_of
        self._store_key = store_key
        self._records: Dict[str, AnimalTrickRecord] = trick_codec.decode_entries(
            read_entries(store, store_key)
        )
        self._sessions: Dict[str, TrickTeachingSession] = {}
        logger.info("TrickLearningEngine loaded %d animal records", len(self._records))

    # === 학습 시작 ===

    def start_learning_trick(
        self,
        animal: Animal,
        trick_id: str,
        personality: Optional[PersonalityProfile] = None,
    ) -> StartLearningResult:
        """트릭 학습 시작. UI 게이팅 경로이므로 거절은 결과로 돌려준다.

        이미 학습 중인 트릭이면 기존 진행을 이어간다 (단계는 되돌리지 않음).
        """
        trick = self._registry.get(trick_id)
        if trick is None:
            return StartLearningResult(success=False, message="Trick not found")

        record = self._records.get(animal.id)
        existing = record.learning.get(trick_id) if record is not None else None
        if existing is not None and existing.is_learned:
            return StartLearningResult(success=False, message="Trick already learned")

        missing = self.check_requirements(animal, trick, personality)
        if missing:
            logger.debug("Trick %s rejected for %s: %s", trick_id, animal.id, missing)
            return StartLearningResult(
                success=False, message="Requirements not met", requirements=missing
            )

        compat = trick.species_compatibility.get(animal.species)
        if compat is None or compat.success_rate < MIN_LEARNABLE_SUCCESS_RATE:
            return StartLearningResult(
                success=False,
                message=f"{animal.species} cannot learn this trick effectively",
            )

        now = self._clock.now_ms()
        if existing is not None:
            session = self._start_session(animal.id, trick_id, now)
            return StartLearningResult(
                success=True, message=f"Resumed learning {trick.name}", session=session
            )

        rule = trick_modifier_rule(personality, trick.category)
        progress = TrickLearningProgress(
            trick_id=trick_id,
            animal_id=animal.id,
            current_phase=trick.teaching_phases[0].id,
            started_learning=now,
            last_attempt=now,
            personality_modifiers=PersonalityModifiers(
                difficulty_adjustment=rule.difficulty_adjustment,
                learning_speed_multiplier=rule.learning_speed_multiplier,
                gesture_tolerance_bonus=rule.gesture_tolerance_bonus,
            ),
        )
        self._records.setdefault(animal.id, AnimalTrickRecord()).learning[trick_id] = progress
        session = self._start_session(animal.id, trick_id, now)
        self._save()

        logger.info("Trick learning started: %s %s", animal.id, trick_id)
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.TRICK_LEARNING_STARTED,
                data={"animal_id": animal.id, "trick_id": trick_id},
                source="trick_engine",
            )
        )
        return StartLearningResult(
            success=True, message=f"Started learning {trick.name}", session=session
        )

    def check_requirements(
        self,
        animal: Animal,
        trick: TrickDefinition,
        personality: Optional[PersonalityProfile] = None,
    ) -> List[str]:
        """미충족 요구조건 설명 목록. 빈 목록이면 학습 가능."""
        missing: List[str] = []
        record = self._records.get(animal.id)

        for req in trick.requirements:
            if req.type == "trust_level":
                if animal.stats.trust < float(req.value):
                    missing.append(
                        f"Trust level {req.value} required (current: {animal.stats.trust:g})"
                    )
            elif req.type == "bond_level":
                level = self._bond_level_of(animal.id) if self._bond_level_of else None
                if level is None or level.value != req.value:
                    missing.append(f"Bond level {req.value} required")
            elif req.type == "prerequisite_trick":
                if record is None or record.find_learned(str(req.value)) is None:
                    missing.append(f"Must learn {req.value} first")
            elif req.type == "energy_level":
                if animal.stats.energy < float(req.value):
                    missing.append(
                        f"Energy level {req.value} required (current: {animal.stats.energy:g})"
                    )
            elif req.type == "personality":
                if personality is None or personality.primary.value != req.value:
                    missing.append(f"Personality {req.value} required")

        return missing

    # === 제스처 ===

    def attempt_trick_gesture(
        self, animal_id: str, trick_id: str, gesture_input: GestureInput
    ) -> GestureAttemptResult:
        """현재 단계의 기대 제스처와 비교해 1회 시도를 평가한다.

        성공 시 phase_progress = 성공 횟수 / practice_attempts (최대 1).
        1에 도달하면 다음 단계로 한 칸 이동하거나, 마지막 단계면 학습 완료.

        Raises:
            TrickLearningError: 알 수 없는 트릭, 학습 중이 아닌 트릭, 잘못된 단계
        """
        trick = self._require_trick(trick_id)
        record = self._records.get(animal_id)
        progress = record.learning.get(trick_id) if record is not None else None
        if progress is None or progress.is_learned:
            raise TrickLearningError(f"Trick {trick_id} is not being learned by {animal_id}")

        phase_index = trick.phase_index(progress.current_phase)
        if phase_index < 0:
            raise TrickLearningError(f"Invalid learning phase: {progress.current_phase}")
        phase = trick.teaching_phases[phase_index]

        now = self._clock.now_ms()
        accuracy = evaluate_gesture_accuracy(
            gesture_input,
            phase.gestures[0],
            progress.personality_modifiers.gesture_tolerance_bonus,
        )
        success = accuracy >= phase.required_success

        progress.total_attempts += 1
        progress.attempts_in_phase += 1
        progress.last_attempt = now
        if success:
            progress.successful_attempts += 1
            progress.phase_successes += 1
            progress.phase_progress = min(
                1.0, progress.phase_successes / trick.practice_attempts
            )

        feedback = _pick_feedback(phase, success)
        phase_advanced = False
        trick_learned = False
        next_phase: Optional[str] = None

        if progress.phase_progress >= 1.0:
            if phase_index < len(trick.teaching_phases) - 1:
                next_phase = trick.teaching_phases[phase_index + 1].id
                progress.current_phase = next_phase
                progress.phase_progress = 0.0
                progress.phase_successes = 0
                progress.attempts_in_phase = 0
                phase_advanced = True
                logger.info("Phase advanced: %s %s → %s", animal_id, trick_id, next_phase)
            else:
                progress.is_learned = True
                progress.mastery_level = LEARNED_BASE_MASTERY
                record.learned.append(
                    LearnedTrick(trick_id=trick_id, animal_id=animal_id, learned_date=now)
                )
                trick_learned = True
                logger.info("Trick learned: %s %s", animal_id, trick_id)

        attempt = TrickAttempt(
            trick_id=trick_id,
            animal_id=animal_id,
            phase_id=phase.id,
            timestamp=now,
            gesture_accuracy=accuracy,
            timing_accuracy=gesture_input.timing,
            success=success,
            feedback=feedback,
            energy_used=trick.energy_cost,
            bond_points_gained=2 if success else 1,
        )
        session = self._sessions.get(animal_id)
        if session is not None and session.trick_id == trick_id:
            session.attempts.append(attempt)
            session.energy_expended += trick.energy_cost
            session.phase_advancement = session.phase_advancement or phase_advanced
            session.session_success = session.session_success or trick_learned

        self._save()

        if phase_advanced:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.PHASE_ADVANCED,
                    data={"animal_id": animal_id, "trick_id": trick_id, "phase": next_phase},
                    source="trick_engine",
                )
            )
        if trick_learned:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.TRICK_LEARNED,
                    data={
                        "animal_id": animal_id,
                        "trick_id": trick_id,
                        "trick_name": trick.name,
                        "bond_points": trick.bond_point_reward,
                    },
                    source="trick_engine",
                )
            )

        return GestureAttemptResult(
            success=success,
            feedback=feedback,
            phase_advanced=phase_advanced,
            trick_learned=trick_learned,
            gesture_accuracy=accuracy,
            next_phase=next_phase,
        )

    # === 공연 ===

    def perform_trick(self, animal_id: str, trick_id: str) -> PerformTrickResult:
        """학습 완료된 트릭 공연.

        Raises:
            TrickLearningError: 알 수 없는 트릭
        """
        trick = self._require_trick(trick_id)
        record = self._records.get(animal_id)
        learned = record.find_learned(trick_id) if record is not None else None
        if learned is None:
            return PerformTrickResult(success=False, message="Trick not learned")

        now = self._clock.now_ms()
        progress = record.learning.get(trick_id)
        mastery = progress.mastery_level if progress is not None else 0

        quality = calculate_performance_quality(
            learned.average_performance_quality, mastery, roll_quality_variance()
        )
        reaction = audience_reaction(quality)
        performance = TrickPerformance(
            trick_id=trick_id,
            animal_id=animal_id,
            timestamp=now,
            performance_quality=quality,
            audience_reaction=reaction,
            points_earned=points_earned(trick.performance_value, quality),
            energy_used=trick.energy_cost,
            perfect_execution=quality >= PERFECT_THRESHOLD,
        )

        learned.times_performed += 1
        learned.average_performance_quality = (
            learned.average_performance_quality * (learned.times_performed - 1) + quality
        ) / learned.times_performed
        learned.personal_best = max(learned.personal_best, quality)

        mastered_now = False
        gain = mastery_gain(quality, mastery)
        if gain > 0 and progress is not None:
            progress.mastery_level = min(MAX_MASTERY, progress.mastery_level + gain)
            if progress.mastery_level >= MAX_MASTERY and not progress.is_mastered:
                progress.is_mastered = True
                learned.mastered_date = now
                mastered_now = True
                logger.info("Trick mastered: %s %s", animal_id, trick_id)

        record.performances.append(performance)
        self._save()

        if mastered_now:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.TRICK_MASTERED,
                    data={"animal_id": animal_id, "trick_id": trick_id},
                    source="trick_engine",
                )
            )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.PERFORMANCE_COMPLETE,
                data={
                    "animal_id": animal_id,
                    "trick_id": trick_id,
                    "trick_name": trick.name,
                    "quality": quality,
                    "audience_reaction": reaction,
                    "points_earned": performance.points_earned,
                    "timestamp": now,
                },
                source="trick_engine",
            )
        )

        return PerformTrickResult(
            success=True,
            message=performance_message(trick.name, reaction),
            mastery_gained=gain > 0,
            performance=performance,
        )

    # === 세션 ===

    def end_teaching_session(self, animal_id: str) -> Optional[TrickTeachingSession]:
        session = self._sessions.pop(animal_id, None)
        if session is not None:
            session.end_time = self._clock.now_ms()
        return session

    def get_teaching_session(self, animal_id: str) -> Optional[TrickTeachingSession]:
        return self._sessions.get(animal_id)

    # === 조회 ===

    def get_available_tricks(
        self, animal: Animal, personality: Optional[PersonalityProfile] = None
    ) -> List[TrickDefinition]:
        """종 성공률 0.3 이상이고 요구조건을 모두 만족하는 트릭."""
        return [
            trick
            for trick in self._registry.for_species(animal.species, MIN_AVAILABLE_SUCCESS_RATE)
            if not self.check_requirements(animal, trick, personality)
        ]

    def get_learning_progress(
        self, animal_id: str, trick_id: str
    ) -> Optional[TrickLearningProgress]:
        record = self._records.get(animal_id)
        return record.learning.get(trick_id) if record is not None else None

    def get_all_learning_progress(self, animal_id: str) -> List[TrickLearningProgress]:
        record = self._records.get(animal_id)
        return list(record.learning.values()) if record is not None else []

    def get_mastery_level(self, animal_id: str, trick_id: str) -> int:
        progress = self.get_learning_progress(animal_id, trick_id)
        return progress.mastery_level if progress is not None else 0

    def get_learned_tricks(self, animal_id: str) -> List[LearnedTrick]:
        record = self._records.get(animal_id)
        return list(record.learned) if record is not None else []

    def get_performance_history(self, animal_id: str) -> List[TrickPerformance]:
        record = self._records.get(animal_id)
        return list(record.performances) if record is not None else []

    # === 내부 ===

    def _require_trick(self, trick_id: str) -> TrickDefinition:
        trick = self._registry.get(trick_id)
        if trick is None:
            raise TrickLearningError(f"Unknown trick: {trick_id}")
        return trick

    def _start_session(self, animal_id: str, trick_id: str, now: int) -> TrickTeachingSession:
        if animal_id in self._sessions:
            self.end_teaching_session(animal_id)
        session = TrickTeachingSession(
            session_id=f"{animal_id}_{trick_id}_{now}",
            trick_id=trick_id,
            animal_id=animal_id,
            start_time=now,
        )
        self._sessions[animal_id] = session
        return session

    def _save(self) -> None:
        try:
            entries = trick_codec.encode_entries(self._records)
        except (TypeError, ValueError):
            logger.exception("Failed to encode trick progress")
            return
        write_entries(self._store, self._store_key, entries)


def _pick_feedback(phase: TeachingPhase, success: bool) -> str:
    messages = phase.feedback.success if success else phase.feedback.failure
    if not messages:
        return "Good job!" if success else "Try again."
    return random.choice(messages)
