"""주기 작업 스케줄러 - tick(now) 구동

엔진의 백그라운드 유지보수(유대 감쇠 등)는 타이머에 직접 묶이지 않는다.
외부 드라이버(FastAPI lifespan 루프, 테스트)가 tick(now_ms)를 호출하면
주기가 도래한 작업만 실행한다. 작업은 포그라운드 명령 사이에서만 실행된다.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List

from src.core.logging import get_logger

logger = get_logger(__name__)

JobCallback = Callable[[int], None]


@dataclass
class ScheduledJob:
    """등록된 주기 작업"""

    name: str
    interval_ms: int
    callback: JobCallback
    next_run_ms: int
    run_count: int = 0


class MaintenanceScheduler:
    """단일 스레드 주기 작업 실행기

    사용 패턴:
        scheduler = MaintenanceScheduler()
        scheduler.every("bond_decay", 60_000, bonding.process_bond_decay, now_ms=clock.now_ms())
        scheduler.tick(clock.now_ms())
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, ScheduledJob] = {}

    def every(
        self, name: str, interval_ms: int, callback: JobCallback, now_ms: int
    ) -> ScheduledJob:
        """작업 등록. 첫 실행은 now_ms + interval_ms."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive: {interval_ms}")
        if name in self._jobs:
            logger.warning(f"Overwriting scheduled job: {name}")
        job = ScheduledJob(
            name=name,
            interval_ms=interval_ms,
            callback=callback,
            next_run_ms=now_ms + interval_ms,
        )
        self._jobs[name] = job
        logger.info(f"Scheduled job registered: {name} every {interval_ms}ms")
        return job

    def cancel(self, name: str) -> bool:
        return self._jobs.pop(name, None) is not None

    def tick(self, now_ms: int) -> List[str]:
        """도래한 작업 실행. 실행된 작업 이름 목록 반환.

        밀린 주기가 여러 번이어도 한 tick에서 한 번만 실행한다.
        작업 예외는 기록 후 다음 작업으로 진행한다.
        """
        ran: List[str] = []
        for job in list(self._jobs.values()):
            if now_ms < job.next_run_ms:
                continue

            try:
                job.callback(now_ms)
            except Exception:
                logger.exception(f"Scheduled job failed: {job.name}")
            job.run_count += 1
            ran.append(job.name)

            # 다음 실행 시각을 now 이후로 정렬
            while job.next_run_ms <= now_ms:
                job.next_run_ms += job.interval_ms

        return ran

    @property
    def jobs(self) -> Dict[str, ScheduledJob]:
        return dict(self._jobs)
