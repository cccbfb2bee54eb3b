"""유대 마일스톤 - 초기 목록 생성 + 달성 판정

판정 규칙:
- 현재 유대 단계 ≥ 요구 단계
- 모든 요구 조건 개별 충족
- achieved는 False → True 한 번만 전이 (되돌리지 않음)
"""

from typing import Callable, List, Optional

from src.core.bonding.levels import level_number
from src.core.bonding.models import (
    BondingMilestone,
    BondingProgress,
    BondingRequirement,
    BondingReward,
    BondLevel,
)

TrustProvider = Callable[[str], Optional[float]]


def create_initial_milestones() -> List[BondingMilestone]:
    """새 유대 기록에 붙는 기본 마일스톤 3종."""
    return [
        BondingMilestone(
            id="first_interaction",
            name="First Contact",
            description="Successfully interact with the animal for the first time",
            bond_level_required=BondLevel.STRANGER,
            requirements=[
                BondingRequirement(
                    type="activities_completed",
                    value=1,
                    description="Complete first interaction",
                ),
            ],
            rewards=[
                BondingReward(
                    type="knowledge",
                    id="animal_info",
                    name="Animal Information",
                    description="Learn basic information about this animal",
                ),
            ],
        ),
        BondingMilestone(
            id="trusted_friend",
            name="Trusted Friend",
            description="Gain the animal's complete trust",
            bond_level_required=BondLevel.FRIEND,
            requirements=[
                BondingRequirement(
                    type="trust_level",
                    value=75,
                    description="Reach 75% trust level",
                ),
            ],
            rewards=[
                BondingReward(
                    type="ability",
                    id="follow_player",
                    name="Following",
                    description="Animal will follow you around",
                ),
            ],
        ),
        BondingMilestone(
            id="lifelong_companion",
            name="Lifelong Companion",
            description="Form an unbreakable bond",
            bond_level_required=BondLevel.COMPANION,
            requirements=[
                BondingRequirement(
                    type="shared_experiences",
                    value=10,
                    description="Share 10 meaningful experiences",
                ),
                BondingRequirement(
                    type="time_spent",
                    value=3_600_000,
                    description="Spend 1 hour together",
                ),
            ],
            rewards=[
                BondingReward(
                    type="privilege",
                    id="permanent_companionship",
                    name="Permanent Companionship",
                    description="This animal will never leave your side",
                ),
            ],
            is_special=True,
        ),
    ]


def _requirement_progress(
    req: BondingRequirement, progress: BondingProgress, trust: Optional[float]
) -> float:
    if req.type == "shared_experiences":
        return float(len(progress.shared_experiences))
    if req.type == "time_spent":
        return float(progress.time_spent_together)
    if req.type == "activities_completed":
        return float(
            sum(1 for e in progress.relationship_history if e.type == "bond_increase")
        )
    if req.type == "trust_level":
        # 신뢰 공급자가 없으면 충족 불가
        return trust if trust is not None else 0.0
    return req.current_progress


def evaluate_milestones(
    progress: BondingProgress,
    now_ms: int,
    trust_of: Optional[TrustProvider] = None,
) -> List[BondingMilestone]:
    """새로 달성된 마일스톤 목록. progress를 제자리 갱신한다."""
    current_level = level_number(progress.current_bond_level)
    trust = trust_of(progress.animal_id) if trust_of is not None else None
    achieved: List[BondingMilestone] = []

    for milestone in progress.bonding_milestones:
        if milestone.achieved:
            continue
        if current_level < level_number(milestone.bond_level_required):
            continue

        all_met = True
        for req in milestone.requirements:
            if req.type == "trust_level" and trust is None:
                all_met = False
                continue
            req.current_progress = _requirement_progress(req, progress, trust)
            req.completed = req.current_progress >= req.value
            if not req.completed:
                all_met = False

        if all_met:
            milestone.achieved = True
            milestone.achieved_date = now_ms
            achieved.append(milestone)

    return achieved
