"""제스처 정확도 평가

관측 입력과 단계가 기대하는 제스처를 비교한다:
- 유형 불일치 ×0.3
- 방향 불일치 ×0.5 (기대 제스처에 방향이 있을 때만)
- 지속시간 편차: ×max(0.3, 1 - |기대 - 실제| / 기대)
- 허용 기준(tolerance - 성격 보너스) 미만이면 부분 점수 ×0.5
"""

from src.core.tricks.models import GestureInput, TrickGesture

TYPE_MISMATCH_FACTOR = 0.3
DIRECTION_MISMATCH_FACTOR = 0.5
MIN_DURATION_FACTOR = 0.3
PARTIAL_CREDIT_FACTOR = 0.5


def acceptance_threshold(expected: TrickGesture, tolerance_bonus: float) -> float:
    """성격 보너스만큼 완화된 허용 기준 (0~1)."""
    return max(0.0, min(1.0, expected.tolerance - tolerance_bonus))


def evaluate_gesture_accuracy(
    gesture_input: GestureInput, expected: TrickGesture, tolerance_bonus: float = 0.0
) -> float:
    """0~1 정확도."""
    accuracy = max(0.0, min(1.0, gesture_input.accuracy))

    if gesture_input.type != expected.type:
        accuracy *= TYPE_MISMATCH_FACTOR

    if expected.direction and gesture_input.direction != expected.direction:
        accuracy *= DIRECTION_MISMATCH_FACTOR

    if expected.duration and gesture_input.duration:
        duration_accuracy = (
            1 - abs(expected.duration - gesture_input.duration) / expected.duration
        )
        accuracy *= max(MIN_DURATION_FACTOR, duration_accuracy)

    if accuracy >= acceptance_threshold(expected, tolerance_bonus):
        return min(1.0, accuracy)
    return accuracy * PARTIAL_CREDIT_FACTOR
