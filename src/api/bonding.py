"""Bonding API endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    AbilityUseRequest,
    AbilityUseResponse,
    BondingInitRequest,
    BondingStatusResponse,
    BondPointsRequest,
    BondPointsResponse,
    ErrorResponse,
    MilestoneInfo,
)
from src.core.bonding.models import BondingProgress
from src.core.logging import get_logger
from src.services.bonding_engine import BondingEngine
from src.services.errors import BondingError

logger = get_logger(__name__)

router = APIRouter(prefix="/bonding", tags=["bonding"])


def get_bonding_engine(request: Request) -> BondingEngine:
    """BondingEngine 인스턴스 반환 (의존성 주입)"""
    engine: BondingEngine = request.app.state.bonding_engine
    return engine


def _status_response(progress: BondingProgress) -> BondingStatusResponse:
    return BondingStatusResponse(
        animal_id=progress.animal_id,
        bond_level=progress.current_bond_level.value,
        bond_points=progress.bond_points,
        time_spent_together=progress.time_spent_together,
        bonding_style=progress.bonding_preferences.bonding_style.value,
        special_abilities=list(progress.special_abilities),
        milestones=[
            MilestoneInfo(
                id=m.id, name=m.name, achieved=m.achieved, achieved_date=m.achieved_date
            )
            for m in progress.bonding_milestones
        ],
        companionship_date=progress.companionship_date,
    )


@router.post("/initialize", response_model=BondingStatusResponse)
def initialize_bonding(
    request: BondingInitRequest,
    engine: BondingEngine = Depends(get_bonding_engine),
) -> BondingStatusResponse:
    """유대 기록 생성 (이미 있으면 기존 기록 반환)"""
    progress = engine.initialize_bonding(
        request.animal.to_core(), request.personality.to_core()
    )
    return _status_response(progress)


@router.post(
    "/points",
    response_model=BondPointsResponse,
    responses={404: {"model": ErrorResponse}},
)
def add_bond_points(
    request: BondPointsRequest,
    engine: BondingEngine = Depends(get_bonding_engine),
) -> BondPointsResponse:
    """유대 포인트 추가"""
    try:
        result = engine.add_bond_points(
            request.animal_id, request.points, request.reason, request.experience_type
        )
    except BondingError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return BondPointsResponse(
        level_up=result.level_up,
        new_level=result.new_level.value if result.new_level else None,
        points_added=result.points_added,
        milestones_achieved=[m.id for m in result.milestones_achieved],
        abilities_unlocked=[a.id for a in result.abilities_unlocked],
    )


@router.post("/abilities/use", response_model=AbilityUseResponse)
def use_ability(
    request: AbilityUseRequest,
    engine: BondingEngine = Depends(get_bonding_engine),
) -> AbilityUseResponse:
    """동반자 능력 사용. 거절은 success=false로 반환합니다."""
    result = engine.use_ability(request.animal_id, request.ability_id)
    return AbilityUseResponse(
        success=result.success,
        message=result.message,
        effects=[asdict(effect) for effect in result.effects],
        cooldown_until=result.cooldown_until,
        energy_cost=result.energy_cost,
    )


@router.get(
    "/{animal_id}",
    response_model=BondingStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_bonding_status(
    animal_id: str,
    engine: BondingEngine = Depends(get_bonding_engine),
) -> BondingStatusResponse:
    """유대 진행 상태 조회"""
    progress = engine.get_bonding_progress(animal_id)
    if progress is None:
        raise HTTPException(status_code=404, detail=f"Animal not found: {animal_id}")
    return _status_response(progress)
