"""엔진 레코드 ↔ JSON 직렬화

pydantic TypeAdapter로 dataclass를 JSON 호환 dict로 변환한다.
영속 형식: [[animal_id, record], ...]
"""

import logging
from typing import Any, Dict, Generic, List, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from src.core.bonding.models import BondingProgress
from src.core.taming.models import TamingProgress
from src.core.tricks.models import AnimalTrickRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordCodec(Generic[T]):
    """단일 레코드 타입 코덱."""

    def __init__(self, record_type: Type[T]) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(record_type)
        self._name = record_type.__name__

    def to_dict(self, record: T) -> Dict[str, Any]:
        return self._adapter.dump_python(record, mode="json")

    def from_dict(self, raw: Dict[str, Any]) -> T:
        return self._adapter.validate_python(raw)

    def encode_entries(self, records: Dict[str, T]) -> List[List[Any]]:
        """{animal_id: record} → [[animal_id, dict], ...]"""
        return [[animal_id, self.to_dict(record)] for animal_id, record in records.items()]

    def decode_entries(self, entries: List[Any]) -> Dict[str, T]:
        """[[animal_id, dict], ...] → {animal_id: record}. 손상된 항목은 경고 후 건너뛴다."""
        records: Dict[str, T] = {}
        for entry in entries:
            try:
                animal_id, raw = entry
                records[str(animal_id)] = self.from_dict(raw)
            except (TypeError, ValueError, ValidationError) as e:
                logger.warning("Skipping corrupt %s entry: %s", self._name, e)
        return records


taming_codec: RecordCodec[TamingProgress] = RecordCodec(TamingProgress)
bonding_codec: RecordCodec[BondingProgress] = RecordCodec(BondingProgress)
trick_codec: RecordCodec[AnimalTrickRecord] = RecordCodec(AnimalTrickRecord)
