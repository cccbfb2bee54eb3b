"""BondingEngine 테스트 - 포인트, 단계, 마일스톤, 능력, 감쇠, 이벤트 구독"""

import random
from dataclasses import asdict

import pytest

from src.core.animal import Animal
from src.core.bonding.levels import calculate_bond_level
from src.core.bonding.models import BondLevel, SharedExperience
from src.core.event_bus import GameEvent
from src.core.event_types import EventTypes
from src.core.personality.models import BondingStyle, PersonalityProfile, PersonalityTrait
from src.services.bonding_engine import DECAY_JOB_NAME, BondingEngine
from src.services.errors import BondingError

MINUTE = 60_000

CURIOUS = PersonalityProfile(primary=PersonalityTrait.CURIOUS)
SHY = PersonalityProfile(primary=PersonalityTrait.SHY)
AGGRESSIVE = PersonalityProfile(primary=PersonalityTrait.AGGRESSIVE)
PLAYFUL = PersonalityProfile(primary=PersonalityTrait.PLAYFUL)


@pytest.fixture()
def engine(store, bus, clock, scheduler) -> BondingEngine:
    return BondingEngine(store, bus, clock, scheduler=scheduler)


@pytest.fixture()
def rabbit() -> Animal:
    return Animal(id="rabbit_1", species="rabbit")


def _collect(bus, event_type: str) -> list:
    events: list = []
    bus.subscribe(event_type, events.append)
    return events


def _reach_friend(engine: BondingEngine, animal_id: str) -> None:
    """curious 기준 315 포인트 + 15분"""
    engine.add_bond_points(animal_id, 300, "Training")
    engine.update_time_spent_together(animal_id, 15 * MINUTE)


# ── 초기화 ──────────────────────────────────────────────


class TestInitialize:
    def test_creates_progress(self, engine, rabbit, clock) -> None:
        progress = engine.initialize_bonding(rabbit, SHY)
        assert progress.current_bond_level == BondLevel.STRANGER
        assert progress.bond_points == 0
        assert progress.bond_decay_rate == 0.5
        assert progress.bonding_preferences.bonding_style == BondingStyle.SLOW_STEADY
        assert progress.last_bonding_activity == clock.now_ms()
        assert [m.id for m in progress.bonding_milestones] == [
            "first_interaction",
            "trusted_friend",
            "lifelong_companion",
        ]
        assert progress.relationship_history[0].description == (
            "First meeting - relationship begins"
        )

    def test_idempotent(self, engine, rabbit) -> None:
        first = engine.initialize_bonding(rabbit, SHY)
        second = engine.initialize_bonding(rabbit, CURIOUS)
        assert second is first
        assert second.bond_decay_rate == 0.5
        assert len(second.relationship_history) == 1

    def test_registers_decay_job(self, engine, scheduler) -> None:
        assert DECAY_JOB_NAME in scheduler.jobs


# ── 포인트 / 단계 ───────────────────────────────────────


class TestBondPoints:
    def test_unknown_animal(self, engine) -> None:
        with pytest.raises(BondingError):
            engine.add_bond_points("ghost", 10, "nope")

    def test_points_need_time_for_level(self, engine, rabbit, bus) -> None:
        ups = _collect(bus, EventTypes.BOND_LEVEL_UP)
        engine.initialize_bonding(rabbit, CURIOUS)

        result = engine.add_bond_points(rabbit.id, 150, "Played together")
        assert result.points_added == 150
        assert result.level_up is False
        assert engine.get_bond_level(rabbit.id) == BondLevel.STRANGER

        result = engine.update_time_spent_together(rabbit.id, 400_000)
        assert result.level_up is True
        assert result.new_level == BondLevel.ACQUAINTANCE
        assert [a.id for a in result.abilities_unlocked] == ["recognize_player"]

        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.bond_points == 156
        assert progress.bond_level_number == 1
        assert progress.special_abilities == ["recognize_player"]
        assert len(ups) == 1
        assert ups[0].data["new_level"] == "acquaintance"

    def test_style_multiplier(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, SHY)
        result = engine.add_bond_points(rabbit.id, 15, "Quiet time")
        assert result.points_added == 12
        assert engine.get_bonding_progress(rabbit.id).bond_points == 12

    def test_points_clamped(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        engine.add_bond_points(rabbit.id, 5000, "Everything")
        assert engine.get_bonding_progress(rabbit.id).bond_points == 1000

    def test_history_significance(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        engine.add_bond_points(rabbit.id, 25, "Big day")
        increases = [
            e
            for e in engine.get_bonding_progress(rabbit.id).relationship_history
            if e.description == "Big day"
        ]
        assert increases[0].significance == "major"
        assert increases[0].bond_impact == 25

    def test_time_under_a_minute(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        result = engine.update_time_spent_together(rabbit.id, 30_000)
        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.time_spent_together == 30_000
        assert progress.bond_points == 0
        assert result.level_up is False

    def test_negative_time(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        with pytest.raises(BondingError):
            engine.update_time_spent_together(rabbit.id, -1)

    def test_companionship_date(self, engine, rabbit, clock) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        engine.add_bond_points(rabbit.id, 900, "Years of friendship")
        engine.update_time_spent_together(rabbit.id, 60 * MINUTE)
        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.current_bond_level == BondLevel.COMPANION
        assert progress.companionship_date == clock.now_ms()


class TestSharedExperience:
    def test_recorded_with_id(self, engine, rabbit, clock) -> None:
        engine.initialize_bonding(rabbit, PLAYFUL)
        recorded = engine.add_shared_experience(
            rabbit.id,
            SharedExperience(type="play", description="Chased leaves", bond_value_gained=10),
        )
        assert recorded.id.startswith(f"exp_{clock.now_ms()}_")
        assert recorded.timestamp == clock.now_ms()

        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.shared_experiences == [recorded]
        assert progress.bond_points == 13

    def test_unpreferred_activity(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, PLAYFUL)
        engine.add_shared_experience(
            rabbit.id,
            SharedExperience(type="comfort", description="Rested", bond_value_gained=10),
        )
        assert engine.get_bonding_progress(rabbit.id).bond_points == 10


# ── 마일스톤 ────────────────────────────────────────────


class TestMilestones:
    def test_first_interaction_once(self, engine, rabbit, bus) -> None:
        achieved = _collect(bus, EventTypes.MILESTONE_ACHIEVED)
        engine.initialize_bonding(rabbit, CURIOUS)

        result = engine.add_bond_points(rabbit.id, 5, "Hello")
        assert [m.id for m in result.milestones_achieved] == ["first_interaction"]
        engine.add_bond_points(rabbit.id, 5, "Hello again")

        assert [e.data["milestone_id"] for e in achieved] == ["first_interaction"]
        assert "animal_info" in engine.get_bonding_progress(rabbit.id).unlocked_rewards

    def test_trusted_friend_needs_trust(self, store, bus, clock, rabbit) -> None:
        engine = BondingEngine(store, bus, clock, trust_of=lambda _id: 80.0)
        engine.initialize_bonding(rabbit, CURIOUS)
        _reach_friend(engine, rabbit.id)
        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.current_bond_level == BondLevel.FRIEND
        assert "follow_player" in progress.unlocked_rewards

    def test_trusted_friend_without_provider(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        _reach_friend(engine, rabbit.id)
        trusted = engine.get_bonding_progress(rabbit.id).bonding_milestones[1]
        assert trusted.achieved is False


# ── 능력 ────────────────────────────────────────────────


class TestAbilities:
    def test_available_by_level(self, engine) -> None:
        assert engine.get_available_abilities(BondLevel.STRANGER) == []
        assert "follow_player" in engine.get_available_abilities(BondLevel.FRIEND)

    def test_unknown_ability(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        result = engine.use_ability(rabbit.id, "teleport")
        assert result.success is False
        assert result.message == "Ability not available"

    def test_level_too_low(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        assert engine.can_use_ability(rabbit.id, "follow_player") is False
        result = engine.use_ability(rabbit.id, "follow_player")
        assert result.success is False
        assert result.message == "Bond level too low for this ability"

    def test_use_and_cooldown(self, engine, rabbit, bus, clock) -> None:
        used = _collect(bus, EventTypes.ABILITY_USED)
        engine.initialize_bonding(rabbit, CURIOUS)
        _reach_friend(engine, rabbit.id)

        result = engine.use_ability(rabbit.id, "follow_player")
        assert result.success is True
        assert result.message.startswith("Following activated")
        assert result.cooldown_until == clock.now_ms() + 5000
        assert len(result.effects) == 1

        blocked = engine.use_ability(rabbit.id, "follow_player")
        assert blocked.success is False
        assert blocked.cooldown_until == clock.now_ms() + 5000
        assert engine.get_ability_cooldown_remaining(rabbit.id, "follow_player") == 5000

        clock.advance(5000)
        assert engine.use_ability(rabbit.id, "follow_player").success is True
        assert len(used) == 2

    def test_passive_ability_no_cooldown(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        engine.add_bond_points(rabbit.id, 100, "Warm up")
        engine.update_time_spent_together(rabbit.id, 5 * MINUTE)
        result = engine.use_ability(rabbit.id, "recognize_player")
        assert result.success is True
        assert result.cooldown_until is None


# ── 감쇠 ────────────────────────────────────────────────


class TestDecay:
    def test_shy_ten_minutes_via_scheduler(self, engine, rabbit, clock, scheduler, bus) -> None:
        decays = _collect(bus, EventTypes.BOND_DECAY)
        engine.initialize_bonding(rabbit, SHY)
        engine.add_bond_points(rabbit.id, 100, "Quiet time")
        assert engine.get_bonding_progress(rabbit.id).bond_points == 80

        clock.advance(10 * MINUTE)
        assert scheduler.tick(clock.now_ms()) == [DECAY_JOB_NAME]

        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.bond_points == 75
        assert progress.last_bonding_activity == clock.now_ms()
        assert decays[0].data == {
            "animal_id": rabbit.id,
            "amount": 5,
            "timestamp": clock.now_ms(),
        }

    def test_no_decay_within_threshold(self, engine, rabbit, clock) -> None:
        engine.initialize_bonding(rabbit, SHY)
        engine.add_bond_points(rabbit.id, 100, "Quiet time")
        clock.advance(5 * MINUTE)
        assert engine.process_bond_decay() == {}
        assert engine.get_bonding_progress(rabbit.id).bond_points == 80

    def test_decay_drops_level(self, engine, rabbit, clock, bus) -> None:
        downs = _collect(bus, EventTypes.BOND_LEVEL_DOWN)
        engine.initialize_bonding(rabbit, AGGRESSIVE)
        engine.add_bond_points(rabbit.id, 91, "Hard won")
        engine.update_time_spent_together(rabbit.id, 5 * MINUTE)
        assert engine.get_bond_level(rabbit.id) == BondLevel.ACQUAINTANCE

        clock.advance(20 * MINUTE)
        assert engine.process_bond_decay() == {rabbit.id: 14}

        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.bond_points == 91
        assert progress.current_bond_level == BondLevel.STRANGER
        assert progress.relationship_history[-1].type == "bond_decrease"
        assert downs[0].data["new_level"] == "stranger"
        # 해금된 능력과 달성한 마일스톤은 유지
        assert "recognize_player" in progress.special_abilities
        assert progress.bonding_milestones[0].achieved is True

    def test_points_floor_at_zero(self, engine, rabbit, clock) -> None:
        engine.initialize_bonding(rabbit, AGGRESSIVE)
        engine.add_bond_points(rabbit.id, 2, "Tiny")
        clock.advance(60 * MINUTE)
        assert engine.process_bond_decay() == {rabbit.id: 2}
        assert engine.get_bonding_progress(rabbit.id).bond_points == 0

    def test_subscriber_creating_record_mid_sweep(self, engine, clock, bus) -> None:
        """감쇠 이벤트 구독자가 새 기록을 만들어도 나머지 동물이 모두 감쇠된다"""
        first = Animal(id="rabbit_a", species="rabbit")
        second = Animal(id="rabbit_b", species="rabbit")
        newcomer = Animal(id="rabbit_new", species="rabbit")
        for animal in (first, second):
            engine.initialize_bonding(animal, SHY)
            engine.add_bond_points(animal.id, 50, "Quiet time")
        bus.subscribe(
            EventTypes.BOND_DECAY, lambda _e: engine.initialize_bonding(newcomer, CURIOUS)
        )

        clock.advance(10 * MINUTE)
        decayed = engine.process_bond_decay()

        assert decayed == {first.id: 5, second.id: 5}
        assert engine.get_bonding_progress(first.id).bond_points == 35
        assert engine.get_bonding_progress(second.id).bond_points == 35
        assert engine.get_bonding_progress(newcomer.id).bond_points == 0

    def test_milestones_survive_level_drop_and_regain(self, store, bus, clock, rabbit) -> None:
        engine = BondingEngine(store, bus, clock, trust_of=lambda _id: 80.0)
        achieved = _collect(bus, EventTypes.MILESTONE_ACHIEVED)
        ups = _collect(bus, EventTypes.BOND_LEVEL_UP)
        engine.initialize_bonding(rabbit, CURIOUS)
        _reach_friend(engine, rabbit.id)

        clock.advance(60 * MINUTE)
        assert engine.process_bond_decay() == {rabbit.id: 18}
        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.current_bond_level == BondLevel.ACQUAINTANCE
        assert [m.achieved for m in progress.bonding_milestones[:2]] == [True, True]

        engine.add_bond_points(rabbit.id, 10, "Back again")
        assert progress.current_bond_level == BondLevel.FRIEND
        assert [e.data["milestone_id"] for e in achieved] == [
            "first_interaction",
            "trusted_friend",
        ]
        assert [e.data["new_level"] for e in ups].count("friend") == 2



# ── 이벤트 구독 ─────────────────────────────────────────


class TestEventHandlers:
    def test_successful_interaction_adds_points(self, engine, rabbit, bus) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        bus.emit(
            GameEvent(
                event_type=EventTypes.INTERACTION_COMPLETED,
                data={"animal_id": rabbit.id, "interaction_id": "observe", "success": True, "modifier": 5},
                source="test",
            )
        )
        # learning 경험 → curious 선호 활동 ×1.3
        assert engine.get_bonding_progress(rabbit.id).bond_points == 13

    def test_failed_interaction_ignored(self, engine, rabbit, bus) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        bus.emit(
            GameEvent(
                event_type=EventTypes.INTERACTION_COMPLETED,
                data={"animal_id": rabbit.id, "interaction_id": "observe", "success": False, "modifier": 1},
                source="test",
            )
        )
        assert engine.get_bonding_progress(rabbit.id).bond_points == 0

    def test_unknown_animal_ignored(self, engine, bus) -> None:
        bus.emit(
            GameEvent(
                event_type=EventTypes.TRICK_LEARNED,
                data={"animal_id": "ghost", "trick_id": "sit", "bond_points": 10},
                source="test",
            )
        )
        assert engine.get_bonding_progress("ghost") is None

    def test_trick_learned(self, engine, rabbit, bus) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        bus.emit(
            GameEvent(
                event_type=EventTypes.TRICK_LEARNED,
                data={"animal_id": rabbit.id, "trick_id": "sit", "trick_name": "Sit", "bond_points": 10},
                source="test",
            )
        )
        progress = engine.get_bonding_progress(rabbit.id)
        assert progress.bond_points == 13
        assert progress.relationship_history[1].description == "Learned trick: Sit"

    def test_performance_threshold(self, engine, rabbit, bus) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        for quality in (0.7, 0.78):
            bus.emit(
                GameEvent(
                    event_type=EventTypes.PERFORMANCE_COMPLETE,
                    data={"animal_id": rabbit.id, "trick_id": "sit", "quality": quality},
                    source="test",
                )
            )
        assert engine.get_bonding_progress(rabbit.id).bond_points == 7

# ── 불변식 ──────────────────────────────────────────────


class TestInvariants:
    @pytest.mark.parametrize("personality", [SHY, CURIOUS, AGGRESSIVE, PLAYFUL])
    def test_points_bounded_over_random_sequence(
        self, engine, rabbit, clock, personality
    ) -> None:
        rng = random.Random(327)
        engine.initialize_bonding(rabbit, personality)

        for _ in range(200):
            step = rng.random()
            if step < 0.7:
                engine.add_bond_points(rabbit.id, rng.randint(-400, 400), "Swing")
            elif step < 0.9:
                engine.update_time_spent_together(rabbit.id, rng.randint(0, 20 * MINUTE))
            else:
                clock.advance(rng.randint(0, 30 * MINUTE))
                engine.process_bond_decay()

            progress = engine.get_bonding_progress(rabbit.id)
            assert 0 <= progress.bond_points <= 1000
            assert progress.current_bond_level == calculate_bond_level(
                progress.bond_points, progress.time_spent_together
            )

    def test_queries_are_read_only(self, engine, rabbit) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        _reach_friend(engine, rabbit.id)

        first = asdict(engine.get_bonding_progress(rabbit.id))
        second = asdict(engine.get_bonding_progress(rabbit.id))
        assert first == second
        assert engine.get_available_abilities(BondLevel.FRIEND) == (
            engine.get_available_abilities(BondLevel.FRIEND)
        )
        assert engine.can_use_ability(rabbit.id, "follow_player") is True
        assert engine.can_use_ability(rabbit.id, "follow_player") is True
        assert asdict(engine.get_bonding_progress(rabbit.id)) == first



# ── 영속화 ──────────────────────────────────────────────


class TestPersistence:
    def test_reload(self, engine, rabbit, store, bus, clock) -> None:
        engine.initialize_bonding(rabbit, CURIOUS)
        engine.add_bond_points(rabbit.id, 150, "Played together")
        engine.update_time_spent_together(rabbit.id, 400_000)

        reloaded = BondingEngine(store, bus, clock)
        progress = reloaded.get_bonding_progress(rabbit.id)
        assert progress.current_bond_level == BondLevel.ACQUAINTANCE
        assert progress.bond_points == 156
        assert progress.bonding_preferences.bonding_style == BondingStyle.ACTIVITY_BASED
        assert progress.bonding_milestones[0].achieved is True
        assert reloaded.get_all_bonding_progress().keys() == {rabbit.id}
