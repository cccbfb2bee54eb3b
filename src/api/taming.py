"""Taming API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ErrorResponse,
    InteractionRequest,
    InteractionResponse,
    SessionResponse,
    StartSessionRequest,
    TamingStatusResponse,
)
from src.core.logging import get_logger
from src.core.taming.models import TamingSession
from src.services.errors import TamingError
from src.services.taming_engine import TamingEngine

logger = get_logger(__name__)

router = APIRouter(prefix="/taming", tags=["taming"])


def get_taming_engine(request: Request) -> TamingEngine:
    """TamingEngine 인스턴스 반환 (의존성 주입)"""
    engine: TamingEngine = request.app.state.taming_engine
    return engine


def _session_response(session: TamingSession) -> SessionResponse:
    return SessionResponse(
        animal_id=session.animal_id,
        start_time=session.start_time,
        initial_trust=session.initial_trust,
        end_time=session.end_time,
        final_trust=session.final_trust,
        successful=session.successful,
        interaction_count=len(session.interactions),
    )


@router.post("/sessions", response_model=SessionResponse)
def start_session(
    request: StartSessionRequest,
    engine: TamingEngine = Depends(get_taming_engine),
) -> SessionResponse:
    """길들이기 세션 시작 (첫 만남이면 진행 기록 생성)"""
    session = engine.start_session(request.animal.to_core())
    return _session_response(session)


@router.delete(
    "/sessions/{animal_id}",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}},
)
def end_session(
    animal_id: str,
    engine: TamingEngine = Depends(get_taming_engine),
) -> SessionResponse:
    """길들이기 세션 종료"""
    session = engine.end_session(animal_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"No active session: {animal_id}")
    return _session_response(session)


@router.post(
    "/interactions",
    response_model=InteractionResponse,
    responses={400: {"model": ErrorResponse}},
)
def attempt_interaction(
    request: InteractionRequest,
    engine: TamingEngine = Depends(get_taming_engine),
) -> InteractionResponse:
    """
    상호작용 시도

    쿨다운 중이거나 요구조건을 만족하지 않으면 400을 반환합니다.
    """
    try:
        result = engine.attempt_interaction(
            request.animal_id,
            request.interaction_id,
            request.items,
            request.personality,
        )
    except TamingError as e:
        logger.info("Interaction rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    return InteractionResponse(
        interaction_id=result.interaction_id,
        success=result.success,
        trust_before=result.trust_before,
        trust_after=result.trust_after,
        modifier=result.modifier,
        trust_level=engine.get_trust_level_info(result.trust_after).name,
        animal_reaction=result.animal_reaction,
        player_feedback=result.player_feedback,
    )


@router.get(
    "/{animal_id}",
    response_model=TamingStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_taming_status(
    animal_id: str,
    engine: TamingEngine = Depends(get_taming_engine),
) -> TamingStatusResponse:
    """길들이기 진행 상태 조회"""
    progress = engine.get_taming_progress(animal_id)
    if progress is None:
        raise HTTPException(status_code=404, detail=f"Animal not found: {animal_id}")

    return TamingStatusResponse(
        animal_id=animal_id,
        current_trust=progress.current_trust,
        trust_level=engine.get_trust_level_info(progress.current_trust).name,
        total_interactions=progress.total_interactions,
        successful_interactions=progress.successful_interactions,
        bond_level=progress.bond_level,
        favorite_interactions=list(progress.preferences.favorite_interactions),
        disliked_interactions=list(progress.preferences.disliked_interactions),
        available_interactions=[i.id for i in engine.get_available_interactions(animal_id)],
        session_active=engine.get_active_session(animal_id) is not None,
    )
