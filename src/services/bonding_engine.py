"""유대 엔진 - 유대 포인트, 단계, 마일스톤, 능력, 감쇠

EventBus 구독:
- interaction_completed: 성공한 길들이기 상호작용 → floor(modifier × 2) 포인트
- trick_learned: 트릭 학습 보상 포인트
- performance_complete: 품질 0.7 초과 공연 → floor(quality × 10) 포인트

감쇠는 MaintenanceScheduler가 주기적으로 process_bond_decay(now)를 호출한다.
"""

import logging
import math
import uuid
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from src.core.animal import Animal
from src.core.bonding.abilities import (
    abilities_for_level,
    get_ability,
    newly_unlocked,
)
from src.core.bonding.calculations import (
    apply_bonding_style,
    decay_amount,
    impact_significance,
    time_bonus_points,
)
from src.core.bonding.levels import calculate_bond_level, clamp_bond_points, level_number
from src.core.bonding.milestones import create_initial_milestones, evaluate_milestones
from src.core.bonding.models import (
    AbilityUseResult,
    BondingMilestone,
    BondingPreferences,
    BondingProgress,
    BondLevel,
    BondPointsResult,
    CompanionAbility,
    RelationshipEvent,
    SharedExperience,
)
from src.core.clock import Clock
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.personality.models import PersonalityProfile
from src.core.personality.traits import bond_decay_rate, bonding_style
from src.core.scheduler import MaintenanceScheduler
from src.core.tricks.performance import performance_bond_points
from src.db.store import Store, read_entries, write_entries
from src.services.codecs import bonding_codec
from src.services.errors import BondingError

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "feral-friends-bonding-progress"
DECAY_JOB_NAME = "bond_decay"

INTERACTION_POINT_FACTOR = 2


class BondingEngine:
    """동물별 유대 진행 관리"""

    def __init__(
        self,
        store: Store,
        event_bus: EventBus,
        clock: Clock,
        scheduler: Optional[MaintenanceScheduler] = None,
        trust_of: Optional[Callable[[str], Optional[float]]] = None,
        store_key: str = DEFAULT_STORE_KEY,
        decay_interval_ms: int = 60_000,
        decay_idle_threshold_ms: int = 300_000,
    ):
        self._store = store
        self._bus = event_bus
        self._clock = clock
        self._trust_of = trust_of
        self._store_key = store_key
        self._decay_idle_threshold_ms = decay_idle_threshold_ms
        self._progress: Dict[str, BondingProgress] = bonding_codec.decode_entries(
            read_entries(store, store_key)
        )
        # (animal_id, ability_id) → 쿨다운 종료 시각(ms)
        self._ability_cooldowns: Dict[tuple, int] = {}

        self._register_event_handlers()
        if scheduler is not None:
            scheduler.every(
                DECAY_JOB_NAME,
                decay_interval_ms,
                self.process_bond_decay,
                now_ms=clock.now_ms(),
            )
        logger.info("BondingEngine loaded %d progress records", len(self._progress))

    def _register_event_handlers(self) -> None:
        """EventBus 구독"""
        self._bus.subscribe(EventTypes.INTERACTION_COMPLETED, self._on_interaction_completed)
        self._bus.subscribe(EventTypes.TRICK_LEARNED, self._on_trick_learned)
        self._bus.subscribe(EventTypes.PERFORMANCE_COMPLETE, self._on_performance_complete)

    # === 초기화 ===

    def initialize_bonding(
        self, animal: Animal, personality: PersonalityProfile
    ) -> BondingProgress:
        """유대 기록 생성. 이미 있으면 기존 기록을 그대로 반환한다.

        감쇠율과 유대 스타일은 이 시점에 성격에서 한 번만 도출된다.
        """
        existing = self._progress.get(animal.id)
        if existing is not None:
            logger.debug("Bonding already initialized: %s", animal.id)
            return existing

        now = self._clock.now_ms()
        style, activities = bonding_style(personality)
        progress = BondingProgress(
            animal_id=animal.id,
            bonding_milestones=create_initial_milestones(),
            last_bonding_activity=now,
            bond_decay_rate=bond_decay_rate(personality),
            bonding_preferences=BondingPreferences(
                bonding_style=style,
                preferred_activities=list(activities),
                favorite_interactions=list(personality.preferred_interactions),
            ),
            relationship_history=[
                RelationshipEvent(
                    timestamp=now,
                    type="bond_increase",
                    description="First meeting - relationship begins",
                    bond_impact=0,
                    significance="minor",
                )
            ],
        )
        self._progress[animal.id] = progress
        self._save()
        logger.info(
            "Bonding initialized: %s (style=%s, decay=%.1f)",
            animal.id,
            style.value,
            progress.bond_decay_rate,
        )
        return progress

    # === 포인트 ===

    def add_bond_points(
        self,
        animal_id: str,
        points: int,
        reason: str,
        experience_type: Optional[str] = None,
    ) -> BondPointsResult:
        """유대 포인트 추가 후 단계, 마일스톤, 능력 해금을 재평가한다.

        Raises:
            BondingError: 유대 기록 없음
        """
        progress = self._require(animal_id)
        now = self._clock.now_ms()

        prefs = progress.bonding_preferences
        modified = apply_bonding_style(
            prefs.bonding_style, prefs.preferred_activities, points, experience_type
        )
        progress.bond_points = clamp_bond_points(progress.bond_points + modified)
        progress.last_bonding_activity = now
        progress.relationship_history.append(
            RelationshipEvent(
                timestamp=now,
                type="bond_increase",
                description=reason,
                bond_impact=modified,
                significance=impact_significance(modified),
            )
        )

        result = self._settle(progress, now)
        result.points_added = modified
        return result

    def add_shared_experience(
        self, animal_id: str, experience: SharedExperience
    ) -> SharedExperience:
        """경험 기록 + 경험 가치만큼 포인트 추가 (경험 유형으로 스타일 배율 적용)."""
        progress = self._require(animal_id)
        now = self._clock.now_ms()
        recorded = replace(
            experience,
            id=experience.id or f"exp_{now}_{uuid.uuid4().hex[:9]}",
            timestamp=now,
        )
        progress.shared_experiences.append(recorded)
        self.add_bond_points(
            animal_id,
            recorded.bond_value_gained,
            f"Shared experience: {recorded.description}",
            recorded.type,
        )
        return recorded

    def update_time_spent_together(self, animal_id: str, elapsed_ms: int) -> BondPointsResult:
        """함께한 시간 누적. 1분당 1포인트.

        1분 미만이어도 시간 조건으로 단계가 바뀔 수 있으므로 재평가한다.
        """
        if elapsed_ms < 0:
            raise BondingError(f"elapsed_ms must not be negative: {elapsed_ms}")
        progress = self._require(animal_id)
        progress.time_spent_together += elapsed_ms

        bonus = time_bonus_points(elapsed_ms)
        if bonus > 0:
            return self.add_bond_points(animal_id, bonus, "Quality time together")
        return self._settle(progress, self._clock.now_ms())

    # === 능력 ===

    def get_available_abilities(self, level: BondLevel) -> List[str]:
        return abilities_for_level(level)

    def can_use_ability(self, animal_id: str, ability_id: str) -> bool:
        """단계 조건만 본다 (쿨다운은 use_ability에서)."""
        progress = self._progress.get(animal_id)
        ability = get_ability(ability_id)
        if progress is None or ability is None:
            return False
        return progress.bond_level_number >= level_number(ability.bond_level_required)

    def get_ability_cooldown_remaining(self, animal_id: str, ability_id: str) -> int:
        until = self._ability_cooldowns.get((animal_id, ability_id))
        if until is None:
            return 0
        return max(0, until - self._clock.now_ms())

    def use_ability(self, animal_id: str, ability_id: str) -> AbilityUseResult:
        """능력 사용. 실패는 예외가 아니라 결과로 돌려준다."""
        progress = self._progress.get(animal_id)
        ability = get_ability(ability_id)
        if progress is None or ability is None:
            return AbilityUseResult(success=False, message="Ability not available")

        if not self.can_use_ability(animal_id, ability_id):
            return AbilityUseResult(
                success=False, message="Bond level too low for this ability"
            )

        now = self._clock.now_ms()
        remaining = self.get_ability_cooldown_remaining(animal_id, ability_id)
        if remaining > 0:
            return AbilityUseResult(
                success=False,
                message=f"{ability.name} is recovering ({remaining}ms remaining)",
                cooldown_until=now + remaining,
            )

        cooldown_until = None
        if ability.cooldown:
            cooldown_until = now + ability.cooldown
            self._ability_cooldowns[(animal_id, ability_id)] = cooldown_until

        progress.relationship_history.append(
            RelationshipEvent(
                timestamp=now,
                type="ability_used",
                description=f"Used ability: {ability.name}",
                bond_impact=1,
                significance="minor",
            )
        )
        self._save()

        self._bus.emit(
            GameEvent(
                event_type=EventTypes.ABILITY_USED,
                data={"animal_id": animal_id, "ability_id": ability_id, "timestamp": now},
                source="bonding_engine",
            )
        )
        return AbilityUseResult(
            success=True,
            message=f"{ability.name} activated: {ability.description}",
            effects=list(ability.effects),
            cooldown_until=cooldown_until,
            energy_cost=ability.energy_cost,
        )

    # === 감쇠 ===

    def process_bond_decay(self, now_ms: Optional[int] = None) -> Dict[str, int]:
        """방치된 유대 감쇠. 동물별 감소량 반환.

        마지막 활동 후 임계값(기본 5분)을 넘긴 동물만
        floor(감쇠율 × 경과 분)만큼 잃는다. 단계 하락은 재계산 결과로만 발생한다.
        """
        now = self._clock.now_ms() if now_ms is None else now_ms
        decayed: Dict[str, int] = {}

        # 구독자가 새 기록을 만들 수 있으므로 스냅샷을 순회한다
        for animal_id, progress in list(self._progress.items()):
            idle_ms = now - progress.last_bonding_activity
            amount = decay_amount(progress.bond_decay_rate, idle_ms, self._decay_idle_threshold_ms)
            if amount <= 0:
                continue

            before = progress.bond_points
            progress.bond_points = clamp_bond_points(before - amount)
            progress.last_bonding_activity = now
            lost = before - progress.bond_points

            old_level = progress.current_bond_level
            new_level = calculate_bond_level(progress.bond_points, progress.time_spent_together)
            if new_level != old_level:
                self._set_level(progress, new_level)
                progress.relationship_history.append(
                    RelationshipEvent(
                        timestamp=now,
                        type="bond_decrease",
                        description=(
                            f"Bond level decreased to {new_level.value} due to lack of interaction"
                        ),
                        bond_impact=-amount,
                        significance="moderate",
                    )
                )
                logger.info(
                    "Bond level down: %s %s → %s", animal_id, old_level.value, new_level.value
                )
                self._bus.emit(
                    GameEvent(
                        event_type=EventTypes.BOND_LEVEL_DOWN,
                        data={
                            "animal_id": animal_id,
                            "old_level": old_level.value,
                            "new_level": new_level.value,
                        },
                        source="bonding_engine",
                    )
                )

            if lost > 0:
                decayed[animal_id] = lost
                self._bus.emit(
                    GameEvent(
                        event_type=EventTypes.BOND_DECAY,
                        data={"animal_id": animal_id, "amount": lost, "timestamp": now},
                        source="bonding_engine",
                    )
                )

        if decayed:
            logger.info("Bond decay applied to %d animals", len(decayed))
            self._save()
        return decayed

    # === 조회 ===

    def get_bonding_progress(self, animal_id: str) -> Optional[BondingProgress]:
        return self._progress.get(animal_id)

    def get_bond_level(self, animal_id: str) -> Optional[BondLevel]:
        progress = self._progress.get(animal_id)
        return progress.current_bond_level if progress is not None else None

    def get_all_bonding_progress(self) -> Dict[str, BondingProgress]:
        return dict(self._progress)

    # === 이벤트 핸들러 ===

    def _on_interaction_completed(self, event: GameEvent) -> None:
        animal_id = event.data["animal_id"]
        if not event.data.get("success") or animal_id not in self._progress:
            return
        points = math.floor(event.data.get("modifier", 0) * INTERACTION_POINT_FACTOR)
        if points <= 0:
            return
        self.add_bond_points(
            animal_id,
            points,
            f"Successful interaction: {event.data.get('interaction_id')}",
            "learning",
        )

    def _on_trick_learned(self, event: GameEvent) -> None:
        animal_id = event.data["animal_id"]
        points = int(event.data.get("bond_points", 0))
        if points <= 0 or animal_id not in self._progress:
            return
        name = event.data.get("trick_name", event.data.get("trick_id"))
        self.add_bond_points(animal_id, points, f"Learned trick: {name}", "learning")

    def _on_performance_complete(self, event: GameEvent) -> None:
        animal_id = event.data["animal_id"]
        points = performance_bond_points(float(event.data.get("quality", 0.0)))
        if points <= 0 or animal_id not in self._progress:
            return
        name = event.data.get("trick_name", event.data.get("trick_id"))
        self.add_bond_points(animal_id, points, f"Great performance of {name}")

    # === 내부 ===

    def _require(self, animal_id: str) -> BondingProgress:
        progress = self._progress.get(animal_id)
        if progress is None:
            raise BondingError(f"No bonding progress found for animal: {animal_id}")
        return progress

    def _set_level(self, progress: BondingProgress, level: BondLevel) -> None:
        progress.current_bond_level = level
        progress.bond_level_number = level_number(level)

    def _settle(self, progress: BondingProgress, now: int) -> BondPointsResult:
        """단계 재계산 → 마일스톤 → 능력 해금 → 이벤트 → 저장."""
        animal_id = progress.animal_id
        old_level = progress.current_bond_level
        new_level = calculate_bond_level(progress.bond_points, progress.time_spent_together)
        level_up = level_number(new_level) > level_number(old_level)

        if new_level != old_level:
            self._set_level(progress, new_level)
            if level_up:
                progress.relationship_history.append(
                    RelationshipEvent(
                        timestamp=now,
                        type="milestone_achieved",
                        description=f"Bond level increased to {new_level.value}",
                        bond_impact=0,
                        significance="major",
                    )
                )
                if (
                    progress.companionship_date is None
                    and level_number(new_level) >= level_number(BondLevel.COMPANION)
                ):
                    progress.companionship_date = now
                logger.info(
                    "Bond level up: %s %s → %s", animal_id, old_level.value, new_level.value
                )

        milestones = evaluate_milestones(progress, now, self._trust_of)
        for milestone in milestones:
            self._grant_milestone(progress, milestone, now)

        unlocked = newly_unlocked(progress.current_bond_level, progress.special_abilities)
        for ability in unlocked:
            progress.special_abilities.append(ability.id)

        self._save()
        self._emit_settled(animal_id, old_level, new_level, milestones, unlocked)

        return BondPointsResult(
            level_up=level_up,
            new_level=new_level if level_up else None,
            milestones_achieved=milestones,
            abilities_unlocked=unlocked,
        )

    def _grant_milestone(
        self, progress: BondingProgress, milestone: BondingMilestone, now: int
    ) -> None:
        for reward in milestone.rewards:
            if reward.id not in progress.unlocked_rewards:
                progress.unlocked_rewards.append(reward.id)
        progress.relationship_history.append(
            RelationshipEvent(
                timestamp=now,
                type="milestone_achieved",
                description=f"Milestone achieved: {milestone.name}",
                bond_impact=0,
                significance="life_changing" if milestone.is_special else "major",
            )
        )
        logger.info("Milestone achieved: %s %s", progress.animal_id, milestone.id)

    def _emit_settled(
        self,
        animal_id: str,
        old_level: BondLevel,
        new_level: BondLevel,
        milestones: List[BondingMilestone],
        unlocked: List[CompanionAbility],
    ) -> None:
        if level_number(new_level) > level_number(old_level):
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.BOND_LEVEL_UP,
                    data={
                        "animal_id": animal_id,
                        "old_level": old_level.value,
                        "new_level": new_level.value,
                    },
                    source="bonding_engine",
                )
            )
        elif level_number(new_level) < level_number(old_level):
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.BOND_LEVEL_DOWN,
                    data={
                        "animal_id": animal_id,
                        "old_level": old_level.value,
                        "new_level": new_level.value,
                    },
                    source="bonding_engine",
                )
            )

        for milestone in milestones:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.MILESTONE_ACHIEVED,
                    data={"animal_id": animal_id, "milestone_id": milestone.id},
                    source="bonding_engine",
                )
            )
        for ability in unlocked:
            self._bus.emit(
                GameEvent(
                    event_type=EventTypes.ABILITY_UNLOCKED,
                    data={"animal_id": animal_id, "ability_id": ability.id},
                    source="bonding_engine",
                )
            )

    def _save(self) -> None:
        try:
            entries = bonding_codec.encode_entries(self._progress)
        except (TypeError, ValueError):
            logger.exception("Failed to encode bonding progress")
            return
        write_entries(self._store, self._store_key, entries)
