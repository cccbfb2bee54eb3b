"""트릭 원형 저장소 - tricks.json 로드"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .models import (
    PhaseFeedback,
    SpeciesCompatibility,
    TeachingPhase,
    TrickDefinition,
    TrickGesture,
    TrickRequirement,
    TrickReward,
)

logger = logging.getLogger(__name__)


def _gesture(raw: dict[str, Any]) -> TrickGesture:
    duration = raw.get("duration")
    return TrickGesture(
        type=raw["type"],
        tolerance=float(raw["tolerance"]),
        description=raw.get("description", ""),
        direction=raw.get("direction"),
        duration=int(duration) if duration is not None else None,
    )


def _phase(raw: dict[str, Any]) -> TeachingPhase:
    feedback = raw.get("feedback", {})
    return TeachingPhase(
        id=raw["id"],
        name=raw["name"],
        description=raw.get("description", ""),
        duration=int(raw.get("duration", 0)),
        required_success=float(raw["required_success"]),
        gestures=tuple(_gesture(g) for g in raw["gestures"]),
        feedback=PhaseFeedback(
            success=tuple(feedback.get("success", [])),
            failure=tuple(feedback.get("failure", [])),
            encouragement=tuple(feedback.get("encouragement", [])),
        ),
    )


def parse_trick(raw: dict[str, Any]) -> TrickDefinition:
    """JSON 객체 하나 → TrickDefinition. 필수 키 누락 시 KeyError."""
    phases = tuple(_phase(p) for p in raw["teaching_phases"])
    if not phases:
        raise ValueError("trick must define at least one teaching phase")
    if int(raw["practice_attempts"]) <= 0:
        raise ValueError("practice_attempts must be positive")

    return TrickDefinition(
        id=raw["id"],
        name=raw["name"],
        description=raw.get("description", ""),
        category=raw["category"],
        difficulty=raw["difficulty"],
        requirements=tuple(
            TrickRequirement(
                type=r["type"], value=r["value"], description=r.get("description", "")
            )
            for r in raw.get("requirements", [])
        ),
        learning_time=int(raw.get("learning_time", 0)),
        practice_attempts=int(raw["practice_attempts"]),
        gestures=tuple(_gesture(g) for g in raw.get("gestures", [])),
        teaching_phases=phases,
        species_compatibility={
            species: SpeciesCompatibility(
                difficulty=c["difficulty"],
                success_rate=float(c["success_rate"]),
                special_notes=c.get("special_notes"),
            )
            for species, c in raw.get("species_compatibility", {}).items()
        },
        performance_value=int(raw["performance_value"]),
        energy_cost=int(raw.get("energy_cost", 0)),
        cooldown=int(raw.get("cooldown", 0)),
        mastery_rewards=tuple(
            TrickReward(
                type=r["type"], value=r["value"], description=r.get("description", "")
            )
            for r in raw.get("mastery_rewards", [])
        ),
        unlocks=tuple(raw.get("unlocks", [])),
        flavor_text=raw.get("flavor_text", ""),
        performance_description=raw.get("performance_description", ""),
        mastery_description=raw.get("mastery_description", ""),
        tags=tuple(raw.get("tags", [])),
    )


class TrickRegistry:
    """
    트릭 원형 저장소.
    초기 데이터(JSON) + 동적 등록 트릭 관리. 등록 순서 유지.
    """

    def __init__(self) -> None:
        self._tricks: dict[str, TrickDefinition] = {}

    def load_from_json(self, path: str | Path) -> int:
        """tricks.json 로드. 반환: 로드된 수량.

        형식: {"tricks": [...]}. 잘못된 항목은 경고 후 건너뛴다.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)["tricks"]

        count = 0
        for raw in raw_list:
            try:
                trick = parse_trick(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Failed to load trick %s: %s", raw.get("id", "?"), e)
                continue
            self._tricks[trick.id] = trick
            count += 1

        logger.info("Loaded %d tricks from %s", count, path)
        return count

    def register(self, trick: TrickDefinition) -> None:
        """동적 등록. 이미 존재하는 id면 경고 로그 후 덮어쓴다."""
        if trick.id in self._tricks:
            logger.warning("Overwriting existing trick: %s", trick.id)
        self._tricks[trick.id] = trick

    def get(self, trick_id: str) -> Optional[TrickDefinition]:
        """O(1) 조회. 없으면 None."""
        return self._tricks.get(trick_id)

    def get_all(self) -> list[TrickDefinition]:
        return list(self._tricks.values())

    def by_category(self, category: str) -> list[TrickDefinition]:
        return [t for t in self._tricks.values() if t.category == category]

    def for_species(self, species: str, min_success_rate: float = 0.0) -> list[TrickDefinition]:
        """해당 종이 배울 수 있는 트릭 (성공률 하한 이상)."""
        result = []
        for trick in self._tricks.values():
            compat = trick.species_compatibility.get(species)
            if compat is not None and compat.success_rate >= min_success_rate:
                result.append(trick)
        return result

    def prerequisites_of(self, trick_id: str) -> list[TrickDefinition]:
        """선행 트릭 원형 목록."""
        trick = self._tricks.get(trick_id)
        if trick is None:
            return []
        result = []
        for req in trick.requirements:
            if req.type == "prerequisite_trick":
                prereq = self._tricks.get(str(req.value))
                if prereq is not None:
                    result.append(prereq)
        return result

    def count(self) -> int:
        return len(self._tricks)
