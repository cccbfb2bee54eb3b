"""길들이기 엔진 - 신뢰, 상호작용, 쿨다운

Service 계층: 순수 계산은 src.core.taming에 위임하고
상태 보관, 영속화, 이벤트 발행만 담당한다.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

from src.core.animal import Animal
from src.core.clock import Clock
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.personality.models import PersonalityTrait
from src.core.taming.calculations import (
    apply_context_modifiers,
    apply_failure_modifier,
    calculate_legacy_bond_level,
    calculate_success_probability,
    clamp_trust,
    generate_animal_reaction,
    generate_player_feedback,
    get_trust_level_info,
    personality_modifier,
    roll_interaction_success,
    update_preferences,
)
from src.core.taming.interactions import TAMING_INTERACTIONS, get_interaction
from src.core.taming.models import (
    GateResult,
    TamingInteraction,
    TamingInteractionResult,
    TamingProgress,
    TamingSession,
    TrustLevel,
)
from src.db.store import Store, read_entries, write_entries
from src.services.codecs import taming_codec
from src.services.errors import TamingError

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "feral-friends-taming-progress"

Personality = Union[PersonalityTrait, str, None]


def _personality_key(personality: Personality) -> Optional[str]:
    if personality is None:
        return None
    if isinstance(personality, PersonalityTrait):
        return personality.value
    return personality


class TamingEngine:
    """동물별 신뢰 진행 관리"""

    def __init__(
        self,
        store: Store,
        event_bus: EventBus,
        clock: Clock,
        store_key: str = DEFAULT_STORE_KEY,
    ):
        self._store = store
        self._bus = event_bus
        self._clock = clock
        self._store_key = store_key
        self._progress: Dict[str, TamingProgress] = taming_codec.decode_entries(
            read_entries(store, store_key)
        )
        self._sessions: Dict[str, TamingSession] = {}
        # animal_id → interaction_id → 쿨다운 종료 시각(ms). 영속화하지 않음.
        self._cooldowns: Dict[str, Dict[str, int]] = {}
        logger.info("TamingEngine loaded %d progress records", len(self._progress))

    # === 세션 ===

    def start_session(self, animal: Animal) -> TamingSession:
        """세션 시작. 첫 만남이면 진행 기록도 생성한다."""
        now = self._clock.now_ms()
        if animal.id not in self._progress:
            self._progress[animal.id] = TamingProgress(animal_id=animal.id, taming_started=now)
            logger.info("Taming progress created: %s", animal.id)

        if animal.id in self._sessions:
            logger.warning("Replacing active taming session: %s", animal.id)

        session = TamingSession(
            animal_id=animal.id,
            start_time=now,
            initial_trust=self.get_current_trust(animal.id),
            notes=[f"Started taming session with {animal.species}"],
        )
        self._sessions[animal.id] = session
        self._save()

        self._bus.emit(
            GameEvent(
                event_type=EventTypes.TAMING_SESSION_STARTED,
                data={"animal_id": animal.id, "initial_trust": session.initial_trust},
                source="taming_engine",
            )
        )
        return session

    def end_session(self, animal_id: str) -> Optional[TamingSession]:
        """세션 종료. 활성 세션이 없으면 None.

        최종 신뢰가 시작 신뢰보다 높으면 성공으로 기록한다.
        """
        session = self._sessions.pop(animal_id, None)
        if session is None:
            return None

        session.end_time = self._clock.now_ms()
        session.final_trust = self.get_current_trust(animal_id)
        session.successful = session.final_trust > session.initial_trust

        progress = self._progress.get(animal_id)
        if progress is not None:
            progress.sessions.append(session)
            self._update_legacy_bond_level(progress)

        self._save()
        logger.info(
            "Taming session ended: %s (trust %.0f → %.0f)",
            animal_id,
            session.initial_trust,
            session.final_trust,
        )

        self._bus.emit(
            GameEvent(
                event_type=EventTypes.TAMING_SESSION_ENDED,
                data={
                    "animal_id": animal_id,
                    "initial_trust": session.initial_trust,
                    "final_trust": session.final_trust,
                    "successful": session.successful,
                    "interactions": len(session.interactions),
                },
                source="taming_engine",
            )
        )
        return session

    def get_active_session(self, animal_id: str) -> Optional[TamingSession]:
        return self._sessions.get(animal_id)

    # === 상호작용 ===

    def attempt_interaction(
        self,
        animal_id: str,
        interaction_id: str,
        items: Sequence[str] = (),
        personality: Personality = None,
    ) -> TamingInteractionResult:
        """상호작용 시도.

        Raises:
            TamingError: 알 수 없는 상호작용, 진행 기록 없음, 쿨다운 중,
                정적 요구조건(신뢰 범위, 필요 아이템) 미충족
        """
        interaction = get_interaction(interaction_id)
        if interaction is None:
            raise TamingError(f"Unknown interaction: {interaction_id}")

        progress = self._progress.get(animal_id)
        if progress is None:
            raise TamingError(f"No taming progress found for animal: {animal_id}")

        now = self._clock.now_ms()
        if self.is_on_cooldown(animal_id, interaction_id):
            raise TamingError(f"Interaction {interaction_id} is on cooldown")

        gate = self.can_perform_interaction(animal_id, interaction, items)
        if not gate.allowed:
            raise TamingError(gate.reason or "Interaction not allowed")

        trait = _personality_key(personality)
        history = progress.interaction_history

        modifier = interaction.trust_modifier + personality_modifier(interaction, trait)
        modifier = apply_context_modifiers(history, interaction_id, modifier, now)

        probability = calculate_success_probability(
            progress.current_trust, history, interaction, trait
        )
        success = roll_interaction_success(probability)
        if not success:
            modifier = apply_failure_modifier(modifier)

        trust_before = progress.current_trust
        trust_after = clamp_trust(trust_before + modifier)
        progress.current_trust = trust_after
        progress.total_interactions += 1
        if success:
            progress.successful_interactions += 1
        progress.last_interaction = now

        result = TamingInteractionResult(
            interaction_id=interaction_id,
            timestamp=now,
            trust_before=trust_before,
            trust_after=trust_after,
            modifier=modifier,
            success=success,
            animal_reaction=generate_animal_reaction(success, trust_after),
            player_feedback=generate_player_feedback(interaction, success, modifier),
        )
        progress.interaction_history.append(result)

        session = self._sessions.get(animal_id)
        if session is not None:
            session.interactions.append(result)

        if interaction.cooldown:
            self._cooldowns.setdefault(animal_id, {})[interaction_id] = (
                now + interaction.cooldown
            )

        update_preferences(progress, interaction_id, success)
        self._update_legacy_bond_level(progress)
        self._save()

        logger.debug(
            "Interaction %s on %s: success=%s p=%.2f modifier=%d trust=%.0f",
            interaction_id,
            animal_id,
            success,
            probability,
            modifier,
            trust_after,
        )

        self._bus.emit(
            GameEvent(
                event_type=EventTypes.INTERACTION_COMPLETED,
                data={
                    "animal_id": animal_id,
                    "interaction_id": interaction_id,
                    "success": success,
                    "modifier": modifier,
                    "trust_before": trust_before,
                    "trust_after": trust_after,
                    "timestamp": now,
                },
                source="taming_engine",
            )
        )
        return result

    def can_perform_interaction(
        self,
        animal_id: str,
        interaction: TamingInteraction,
        items: Sequence[str] = (),
    ) -> GateResult:
        """정적 요구조건 검사. 상태를 변경하지 않는다 (쿨다운은 보지 않음)."""
        progress = self._progress.get(animal_id)
        if progress is None:
            return GateResult(allowed=False, reason="No taming progress found")

        req = interaction.requirements
        if req.min_trust_level and progress.current_trust < req.min_trust_level:
            return GateResult(
                allowed=False,
                reason=(
                    f"Requires trust level {req.min_trust_level:g}, "
                    f"current: {progress.current_trust:g}"
                ),
            )

        if req.max_trust_level and progress.current_trust > req.max_trust_level:
            return GateResult(allowed=False, reason="Trust level too high for this interaction")

        for required_item in req.required_items:
            if required_item not in items:
                return GateResult(allowed=False, reason=f"Requires item: {required_item}")

        return GateResult(allowed=True)

    def get_available_interactions(
        self, animal_id: str, items: Sequence[str] = ()
    ) -> List[TamingInteraction]:
        """허용되고 쿨다운이 아닌 상호작용 (정의 순서)."""
        return [
            interaction
            for interaction in TAMING_INTERACTIONS
            if self.can_perform_interaction(animal_id, interaction, items).allowed
            and not self.is_on_cooldown(animal_id, interaction.id)
        ]

    # === 쿨다운 ===

    def is_on_cooldown(self, animal_id: str, interaction_id: str) -> bool:
        return self.get_cooldown_remaining(animal_id, interaction_id) > 0

    def get_cooldown_remaining(self, animal_id: str, interaction_id: str) -> int:
        """남은 쿨다운(ms). now >= 종료 시각이면 0."""
        cooldown_until = self._cooldowns.get(animal_id, {}).get(interaction_id)
        if cooldown_until is None:
            return 0
        return max(0, cooldown_until - self._clock.now_ms())

    # === 조회 ===

    def get_current_trust(self, animal_id: str) -> float:
        progress = self._progress.get(animal_id)
        return progress.current_trust if progress is not None else 0.0

    def get_trust_level_info(self, trust: float) -> TrustLevel:
        return get_trust_level_info(trust)

    def get_taming_progress(self, animal_id: str) -> Optional[TamingProgress]:
        return self._progress.get(animal_id)

    def get_all_taming_progress(self) -> Dict[str, TamingProgress]:
        return dict(self._progress)

    # === 내부 ===

    def _update_legacy_bond_level(self, progress: TamingProgress) -> None:
        """레거시 카운터는 증가만 한다."""
        new_level = calculate_legacy_bond_level(
            progress.current_trust, progress.total_interactions
        )
        if new_level > progress.bond_level:
            logger.info(
                "Legacy bond level %s: %d → %d", progress.animal_id, progress.bond_level, new_level
            )
            progress.bond_level = new_level

    def _save(self) -> None:
        try:
            entries = taming_codec.encode_entries(self._progress)
        except (TypeError, ValueError):
            logger.exception("Failed to encode taming progress")
            return
        write_entries(self._store, self._store_key, entries)
