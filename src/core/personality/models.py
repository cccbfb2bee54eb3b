"""성격 프로필 모델 (외부 협력자)

성격 분류 자체는 이 패키지 범위 밖이다. 엔진은 초기화 시점에 한 번
프로필을 받아 고정 수치(감쇠율, 유대 스타일, 제스처 허용치 등)를 도출한다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class PersonalityTrait(str, Enum):
    """성격 특성 13종"""

    SHY = "shy"
    CURIOUS = "curious"
    PLAYFUL = "playful"
    AGGRESSIVE = "aggressive"
    FRIENDLY = "friendly"
    LAZY = "lazy"
    ENERGETIC = "energetic"
    CAUTIOUS = "cautious"
    BOLD = "bold"
    SOCIAL = "social"
    SOLITARY = "solitary"
    PATIENT = "patient"
    RESTLESS = "restless"


class BondingStyle(str, Enum):
    """유대 포인트 보정 방식"""

    SLOW_STEADY = "slow_steady"
    ACTIVITY_BASED = "activity_based"
    EMOTIONAL = "emotional"
    TRUST_BASED = "trust_based"


@dataclass
class PersonalityProfile:
    primary: PersonalityTrait
    secondary: Optional[PersonalityTrait] = None
    activity_level: str = "moderate"  # "low" | "moderate" | "high"
    social_preference: str = "small_groups"  # "solitary" | "small_groups" | "large_groups"
    preferred_interactions: List[str] = field(default_factory=list)
