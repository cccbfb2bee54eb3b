"""동물 디스크립터 (외부 협력자)

엔진은 동물 데이터를 소유하지 않는다. 호출자가 넘겨주는 읽기 전용 스냅샷.
"""

from dataclasses import dataclass, field


@dataclass
class AnimalStats:
    trust: float = 0.0  # 0 ~ 100
    energy: float = 100.0  # 0 ~ 100


@dataclass
class Animal:
    id: str
    species: str
    stats: AnimalStats = field(default_factory=AnimalStats)
    position: tuple[int, int] = (0, 0)
