"""엔진 공용 시계 - 밀리초 단위 벽시계

엔진은 time.time()을 직접 호출하지 않고 주입된 Clock을 사용한다.
테스트는 ManualClock으로 가상 시간을 전진시킨다.
"""

import time


class Clock:
    """실제 벽시계 (epoch 밀리초)."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class ManualClock(Clock):
    """수동으로 전진하는 시계 (테스트/리플레이용)."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now = start_ms

    def now_ms(self) -> int:
        return self._now

    def advance(self, ms: int) -> int:
        """ms만큼 전진 후 현재 시각 반환."""
        if ms < 0:
            raise ValueError(f"Cannot move clock backwards: {ms}")
        self._now += ms
        return self._now

    def set(self, now_ms: int) -> None:
        self._now = now_ms
