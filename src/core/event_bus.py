"""EventBus - 엔진 간 이벤트 통신 인프라

규칙:
- 엔진은 다른 엔진의 상태를 직접 변경하지 않는다 (보상은 이벤트로 전달)
- 이벤트는 식별자(ID)와 스칼라 값만 전달한다
- 전파 깊이 최대 MAX_DEPTH 단계
- 하나의 전파 체인 안에서 동일 이벤트(동일 payload) 중복 발행 금지
- 구독자는 여러 개 등록 가능하며, 나중 등록이 이전 등록을 덮어쓰지 않는다
"""

import json
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Set

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 한 명령 내 이벤트 전파 최대 깊이


@dataclass
class GameEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: 이벤트 유형 (예: "bond_level_up", "trick_learned")
        data: 이벤트 데이터 (ID 위주, 무거운 객체 금지)
        source: 발행한 엔진 이름
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    # 내부 추적용 (외부에서 설정하지 않음)
    _depth: int = field(default=0, repr=False)

    @property
    def chain_key(self) -> str:
        """중복 판정 키: source + event_type + payload"""
        payload = json.dumps(self.data, sort_keys=True, default=str)
        return f"{self.source}:{self.event_type}:{payload}"


# 핸들러 타입: GameEvent를 받는 callable
EventHandler = Callable[[GameEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe("trick_learned", bonding.handle_trick_learned)
        bus.subscribe("trick_learned", ui.play_fanfare)
        bus.emit(GameEvent(event_type="trick_learned", data={"animal_id": "a1"}, source="trick_engine"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: Set[str] = set()

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 등록"""
        self._handlers[event_type].append(handler)
        logger.debug(f"EventBus subscribe: {event_type} → {_handler_name(handler)}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 해제"""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    f"EventBus unsubscribe: {event_type} → {_handler_name(handler)}"
                )
            except ValueError:
                logger.warning(
                    f"Handler not registered: {event_type} → {_handler_name(handler)}"
                )

    def emit(self, event: GameEvent) -> None:
        """이벤트 발행. 등록된 핸들러를 동기 호출.

        최상위 발행(depth 0)마다 새 전파 체인이 시작된다.

        안전장치:
        1. 전파 깊이 MAX_DEPTH 초과 시 무시
        2. 같은 체인에서 동일 이벤트 재발행 시 무시
        """
        if self._current_depth == 0:
            self._emitted_in_chain.clear()

        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus depth exceeded ({MAX_DEPTH}): "
                f"{event.source}:{event.event_type} dropped"
            )
            return

        chain_key = event.chain_key
        if chain_key in self._emitted_in_chain:
            logger.warning(
                f"EventBus duplicate blocked: {event.source}:{event.event_type}"
            )
            return

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug(f"EventBus: no subscribers for {event.event_type}")
            return

        logger.debug(
            f"EventBus dispatch: {event.event_type} (source={event.source}, "
            f"depth={self._current_depth}, handlers={len(handlers)})"
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus handler error: {_handler_name(handler)} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self._emitted_in_chain.clear()
        self._current_depth = 0

    def subscriber_count(self, event_type: str) -> int:
        """특정 이벤트의 구독자 수"""
        return len(self._handlers.get(event_type, []))

    @property
    def handler_count(self) -> int:
        """등록된 총 핸들러 수"""
        return sum(len(h) for h in self._handlers.values())


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))
