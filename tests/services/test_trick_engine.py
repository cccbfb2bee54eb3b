"""TrickLearningEngine 테스트 - 요구조건, 단계 진행, 학습 완료, 공연, 숙련"""

from dataclasses import asdict
from unittest.mock import patch

import pytest

from src.core.animal import Animal, AnimalStats
from src.core.bonding.models import BondLevel
from src.core.event_types import EventTypes
from src.core.personality.models import PersonalityProfile, PersonalityTrait
from src.core.tricks.models import GestureInput
from src.services.errors import TrickLearningError
from src.services.trick_engine import TrickLearningEngine

VARIANCE = "src.services.trick_engine.roll_quality_variance"

GOOD_TAP = GestureInput(type="tap", accuracy=0.95, direction="down")
BAD_TAP = GestureInput(type="tap", accuracy=0.1, direction="down")


@pytest.fixture()
def engine(registry, store, bus, clock) -> TrickLearningEngine:
    return TrickLearningEngine(
        registry, store, bus, clock, bond_level_of=lambda _id: BondLevel.ACQUAINTANCE
    )


def _learn_sit(engine: TrickLearningEngine, animal: Animal) -> None:
    engine.start_learning_trick(animal, "sit")
    for _ in range(15):
        engine.attempt_trick_gesture(animal.id, "sit", GOOD_TAP)


def _collect(bus, event_type: str) -> list:
    events: list = []
    bus.subscribe(event_type, events.append)
    return events


# ── 학습 시작 / 요구조건 ────────────────────────────────


class TestStartLearning:
    def test_start_sit(self, engine, fox, bus) -> None:
        started = _collect(bus, EventTypes.TRICK_LEARNING_STARTED)
        result = engine.start_learning_trick(fox, "sit")
        assert result.success is True
        assert result.message == "Started learning Sit"
        assert result.session is not None
        progress = engine.get_learning_progress(fox.id, "sit")
        assert progress.current_phase == "introduction"
        assert progress.phase_progress == 0.0
        assert len(started) == 1

    def test_unknown_trick(self, engine, fox) -> None:
        result = engine.start_learning_trick(fox, "moonwalk")
        assert result.success is False
        assert result.message == "Trick not found"

    def test_low_trust(self, engine) -> None:
        timid = Animal(id="fox_2", species="fox", stats=AnimalStats(trust=10.0))
        result = engine.start_learning_trick(timid, "sit")
        assert result.success is False
        assert result.message == "Requirements not met"
        assert result.requirements == ["Trust level 30 required (current: 10)"]

    def test_bond_level_must_match(self, registry, store, bus, clock, fox) -> None:
        engine = TrickLearningEngine(registry, store, bus, clock)
        result = engine.start_learning_trick(fox, "sit")
        assert result.requirements == ["Bond level acquaintance required"]

    def test_prerequisite(self, engine, fox) -> None:
        result = engine.start_learning_trick(fox, "stay")
        assert result.requirements == ["Must learn sit first"]

    def test_energy(self, engine) -> None:
        tired = Animal(id="fox_3", species="fox", stats=AnimalStats(trust=80.0, energy=50.0))
        result = engine.start_learning_trick(tired, "spin")
        assert result.requirements == ["Energy level 60 required (current: 50)"]

    def test_species_incompatible(self, engine) -> None:
        dragon = Animal(id="dragon_1", species="dragon", stats=AnimalStats(trust=90.0))
        result = engine.start_learning_trick(dragon, "sit")
        assert result.success is False
        assert result.message == "dragon cannot learn this trick effectively"

    def test_resume_keeps_progress(self, engine, fox) -> None:
        engine.start_learning_trick(fox, "sit")
        engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP)
        engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP)

        result = engine.start_learning_trick(fox, "sit")
        assert result.success is True
        assert result.message == "Resumed learning Sit"
        assert engine.get_learning_progress(fox.id, "sit").phase_successes == 2

    def test_already_learned(self, engine, fox) -> None:
        _learn_sit(engine, fox)
        result = engine.start_learning_trick(fox, "sit")
        assert result.success is False
        assert result.message == "Trick already learned"

    def test_prerequisite_satisfied_after_learning(self, engine, fox) -> None:
        _learn_sit(engine, fox)
        assert engine.start_learning_trick(fox, "stay").success is True

    def test_personality_modifiers_stored(self, engine, fox) -> None:
        patient = PersonalityProfile(primary=PersonalityTrait.PATIENT)
        engine.start_learning_trick(fox, "sit", patient)
        modifiers = engine.get_learning_progress(fox.id, "sit").personality_modifiers
        assert modifiers.gesture_tolerance_bonus == 0.2


class TestAvailableTricks:
    def test_available_for_fox(self, engine, fox) -> None:
        assert [t.id for t in engine.get_available_tricks(fox)] == ["sit", "spin", "jump"]

    def test_after_learning_sit(self, engine, fox) -> None:
        _learn_sit(engine, fox)
        assert "stay" in [t.id for t in engine.get_available_tricks(fox)]


# ── 제스처 ──────────────────────────────────────────────


class TestGestures:
    def test_not_learning(self, engine, fox) -> None:
        with pytest.raises(TrickLearningError):
            engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP)

    def test_unknown_trick(self, engine, fox) -> None:
        with pytest.raises(TrickLearningError):
            engine.attempt_trick_gesture(fox.id, "moonwalk", GOOD_TAP)

    def test_progress_per_success(self, engine, fox) -> None:
        engine.start_learning_trick(fox, "sit")
        result = engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP)
        assert result.success is True
        assert result.phase_advanced is False
        assert engine.get_learning_progress(fox.id, "sit").phase_progress == pytest.approx(0.2)

    def test_failure_does_not_progress(self, engine, fox) -> None:
        engine.start_learning_trick(fox, "sit")
        result = engine.attempt_trick_gesture(fox.id, "sit", BAD_TAP)
        assert result.success is False
        assert result.gesture_accuracy == pytest.approx(0.05)
        progress = engine.get_learning_progress(fox.id, "sit")
        assert progress.phase_progress == 0.0
        assert progress.total_attempts == 1
        assert progress.successful_attempts == 0

    def test_phase_advances_once(self, engine, fox, bus) -> None:
        advanced = _collect(bus, EventTypes.PHASE_ADVANCED)
        engine.start_learning_trick(fox, "sit")
        results = [engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP) for _ in range(5)]

        assert [r.phase_advanced for r in results] == [False, False, False, False, True]
        assert results[-1].next_phase == "practice"
        progress = engine.get_learning_progress(fox.id, "sit")
        assert progress.current_phase == "practice"
        assert progress.phase_progress == 0.0
        assert progress.phase_successes == 0
        assert [e.data["phase"] for e in advanced] == ["practice"]

    def test_learned_after_last_phase(self, engine, fox, bus, clock) -> None:
        learned = _collect(bus, EventTypes.TRICK_LEARNED)
        _learn_sit(engine, fox)

        progress = engine.get_learning_progress(fox.id, "sit")
        assert progress.is_learned is True
        assert progress.current_phase == "mastery"
        assert progress.mastery_level == 60
        assert engine.get_mastery_level(fox.id, "sit") == 60
        assert [t.trick_id for t in engine.get_learned_tricks(fox.id)] == ["sit"]
        assert learned[0].data == {
            "animal_id": fox.id,
            "trick_id": "sit",
            "trick_name": "Sit",
            "bond_points": 10,
        }

    def test_attempt_after_learned_raises(self, engine, fox) -> None:
        _learn_sit(engine, fox)
        with pytest.raises(TrickLearningError):
            engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP)

    def test_tolerance_bonus_applies(self, engine, fox) -> None:
        sloppy = GestureInput(type="tap", accuracy=0.75, direction="down")
        patient = PersonalityProfile(primary=PersonalityTrait.PATIENT)
        engine.start_learning_trick(fox, "sit", patient)
        result = engine.attempt_trick_gesture(fox.id, "sit", sloppy)
        assert result.gesture_accuracy == pytest.approx(0.75)

    def test_feedback_from_phase(self, engine, fox) -> None:
        engine.start_learning_trick(fox, "sit")
        with patch("src.services.trick_engine.random.choice", side_effect=lambda seq: seq[0]):
            ok = engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP)
            bad = engine.attempt_trick_gesture(fox.id, "sit", BAD_TAP)
        assert ok.feedback == "Good! The animal is starting to understand."
        assert bad.feedback == "Try a gentler approach."

    def test_session_records_attempts(self, engine, fox, clock) -> None:
        engine.start_learning_trick(fox, "sit")
        for _ in range(5):
            engine.attempt_trick_gesture(fox.id, "sit", GOOD_TAP)
        session = engine.get_teaching_session(fox.id)
        assert len(session.attempts) == 5
        assert session.phase_advancement is True
        assert session.energy_expended == 10

        clock.advance(1000)
        ended = engine.end_teaching_session(fox.id)
        assert ended is session
        assert ended.end_time == clock.now_ms()
        assert engine.get_teaching_session(fox.id) is None


# ── 공연 ────────────────────────────────────────────────


class TestPerformance:
    def test_not_learned(self, engine, fox) -> None:
        result = engine.perform_trick(fox.id, "sit")
        assert result.success is False
        assert result.message == "Trick not learned"

    def test_unknown_trick(self, engine, fox) -> None:
        with pytest.raises(TrickLearningError):
            engine.perform_trick(fox.id, "moonwalk")

    def test_first_performance(self, engine, fox, bus) -> None:
        completed = _collect(bus, EventTypes.PERFORMANCE_COMPLETE)
        _learn_sit(engine, fox)
        with patch(VARIANCE, return_value=0.0):
            result = engine.perform_trick(fox.id, "sit")

        assert result.success is True
        assert result.mastery_gained is False
        assert result.performance.performance_quality == pytest.approx(0.78)
        assert result.performance.audience_reaction == "excellent"
        assert result.performance.points_earned == 11
        assert result.performance.perfect_execution is False
        assert result.message == "Excellent Sit! Everyone is impressed."

        learned = engine.get_learned_tricks(fox.id)[0]
        assert learned.times_performed == 1
        assert learned.average_performance_quality == pytest.approx(0.78)
        assert learned.personal_best == pytest.approx(0.78)
        assert completed[0].data["audience_reaction"] == "excellent"
        assert len(engine.get_performance_history(fox.id)) == 1

    def test_mastery_progression(self, engine, fox, bus) -> None:
        mastered = _collect(bus, EventTypes.TRICK_MASTERED)
        _learn_sit(engine, fox)

        levels = []
        with patch(VARIANCE, return_value=0.1):
            for _ in range(6):
                engine.perform_trick(fox.id, "sit")
                levels.append(engine.get_mastery_level(fox.id, "sit"))

        assert levels == [68, 78, 88, 98, 100, 100]
        progress = engine.get_learning_progress(fox.id, "sit")
        assert progress.is_mastered is True
        assert len(mastered) == 1
        assert engine.get_learned_tricks(fox.id)[0].mastered_date is not None

    def test_no_mastery_gain_when_mastered(self, engine, fox) -> None:
        _learn_sit(engine, fox)
        engine.get_learning_progress(fox.id, "sit").mastery_level = 100
        with patch(VARIANCE, return_value=0.1):
            result = engine.perform_trick(fox.id, "sit")
        assert result.mastery_gained is False
        assert result.performance.perfect_execution is True


# ── 영속화 ──────────────────────────────────────────────


class TestPersistence:
    def test_reload(self, engine, registry, store, bus, clock, fox) -> None:
        _learn_sit(engine, fox)
        with patch(VARIANCE, return_value=0.0):
            engine.perform_trick(fox.id, "sit")

        reloaded = TrickLearningEngine(registry, store, bus, clock)
        assert reloaded.get_mastery_level(fox.id, "sit") == 60
        assert [t.trick_id for t in reloaded.get_learned_tricks(fox.id)] == ["sit"]
        assert len(reloaded.get_performance_history(fox.id)) == 1
        assert reloaded.get_teaching_session(fox.id) is None

    def test_unknown_animal_queries(self, engine) -> None:
        assert engine.get_learning_progress("ghost", "sit") is None
        assert engine.get_all_learning_progress("ghost") == []
        assert engine.get_mastery_level("ghost", "sit") == 0
        assert engine.get_learned_tricks("ghost") == []

    def test_queries_are_read_only(self, engine, fox) -> None:
        _learn_sit(engine, fox)
        with patch(VARIANCE, return_value=0.0):
            engine.perform_trick(fox.id, "sit")

        progress = asdict(engine.get_learning_progress(fox.id, "sit"))
        learned = [asdict(t) for t in engine.get_learned_tricks(fox.id)]
        history = [asdict(p) for p in engine.get_performance_history(fox.id)]
        available = engine.get_available_tricks(fox)

        assert asdict(engine.get_learning_progress(fox.id, "sit")) == progress
        assert [asdict(t) for t in engine.get_learned_tricks(fox.id)] == learned
        assert [asdict(p) for p in engine.get_performance_history(fox.id)] == history
        assert engine.get_available_tricks(fox) == available
