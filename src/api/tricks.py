"""Trick learning API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ErrorResponse,
    GestureRequest,
    GestureResponse,
    LearnTrickRequest,
    LearnTrickResponse,
    PerformRequest,
    PerformResponse,
    TrickProgressInfo,
    TrickStatusResponse,
)
from src.core.logging import get_logger
from src.core.tricks.models import GestureInput
from src.services.errors import TrickLearningError
from src.services.trick_engine import TrickLearningEngine

logger = get_logger(__name__)

router = APIRouter(prefix="/tricks", tags=["tricks"])


def get_trick_engine(request: Request) -> TrickLearningEngine:
    """TrickLearningEngine 인스턴스 반환 (의존성 주입)"""
    engine: TrickLearningEngine = request.app.state.trick_engine
    return engine


@router.post("/learn", response_model=LearnTrickResponse)
def start_learning(
    request: LearnTrickRequest,
    engine: TrickLearningEngine = Depends(get_trick_engine),
) -> LearnTrickResponse:
    """
    트릭 학습 시작

    요구조건 미충족은 success=false와 미충족 목록으로 반환합니다.
    """
    personality = request.personality.to_core() if request.personality else None
    result = engine.start_learning_trick(
        request.animal.to_core(), request.trick_id, personality
    )
    return LearnTrickResponse(
        success=result.success,
        message=result.message,
        session_id=result.session.session_id if result.session else None,
        requirements=result.requirements,
    )


@router.post(
    "/gesture",
    response_model=GestureResponse,
    responses={400: {"model": ErrorResponse}},
)
def attempt_gesture(
    request: GestureRequest,
    engine: TrickLearningEngine = Depends(get_trick_engine),
) -> GestureResponse:
    """제스처 1회 시도"""
    gesture = GestureInput(
        type=request.gesture.type,
        accuracy=request.gesture.accuracy,
        timing=request.gesture.timing,
        direction=request.gesture.direction,
        duration=request.gesture.duration,
    )
    try:
        result = engine.attempt_trick_gesture(request.animal_id, request.trick_id, gesture)
    except TrickLearningError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return GestureResponse(
        success=result.success,
        feedback=result.feedback,
        phase_advanced=result.phase_advanced,
        trick_learned=result.trick_learned,
        gesture_accuracy=result.gesture_accuracy,
        next_phase=result.next_phase,
    )


@router.post(
    "/perform",
    response_model=PerformResponse,
    responses={404: {"model": ErrorResponse}},
)
def perform_trick(
    request: PerformRequest,
    engine: TrickLearningEngine = Depends(get_trick_engine),
) -> PerformResponse:
    """학습한 트릭 공연"""
    try:
        result = engine.perform_trick(request.animal_id, request.trick_id)
    except TrickLearningError as e:
        raise HTTPException(status_code=404, detail=str(e))

    performance = result.performance
    return PerformResponse(
        success=result.success,
        message=result.message,
        mastery_gained=result.mastery_gained,
        quality=performance.performance_quality if performance else None,
        audience_reaction=performance.audience_reaction if performance else None,
        points_earned=performance.points_earned if performance else None,
        perfect_execution=performance.perfect_execution if performance else False,
    )


@router.get("/{animal_id}", response_model=TrickStatusResponse)
def get_trick_status(
    animal_id: str,
    engine: TrickLearningEngine = Depends(get_trick_engine),
) -> TrickStatusResponse:
    """트릭 학습 현황 (기록이 없으면 빈 목록)"""
    return TrickStatusResponse(
        animal_id=animal_id,
        learning=[
            TrickProgressInfo(
                trick_id=p.trick_id,
                current_phase=p.current_phase,
                phase_progress=p.phase_progress,
                mastery_level=p.mastery_level,
                is_learned=p.is_learned,
                is_mastered=p.is_mastered,
            )
            for p in engine.get_all_learning_progress(animal_id)
        ],
        learned=[t.trick_id for t in engine.get_learned_tricks(animal_id)],
        performance_count=len(engine.get_performance_history(animal_id)),
    )
