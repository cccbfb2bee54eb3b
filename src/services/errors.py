"""엔진 전제조건 위반 예외

호출자가 UI 게이팅을 우회했을 때만 발생한다. ValueError 하위 타입이므로
기존 `except ValueError` 경로에서도 잡힌다.
"""


class TamingError(ValueError):
    """알 수 없는 상호작용, 진행 기록 없음, 쿨다운/조건 미충족"""


class BondingError(ValueError):
    """유대 기록 없음, 알 수 없는 능력"""


class TrickLearningError(ValueError):
    """알 수 없는 트릭, 학습 중이 아닌 트릭, 잘못된 단계 상태"""
