"""성격 프로필 + 도출 테이블"""

from src.core.personality.models import (
    BondingStyle,
    PersonalityProfile,
    PersonalityTrait,
)
from src.core.personality.traits import (
    BOND_DECAY_RATES,
    BONDING_STYLES,
    TRICK_MODIFIERS,
    TrickModifierRule,
    bond_decay_rate,
    bonding_style,
    trick_modifier_rule,
)

__all__ = [
    "BondingStyle",
    "PersonalityProfile",
    "PersonalityTrait",
    "BOND_DECAY_RATES",
    "BONDING_STYLES",
    "TRICK_MODIFIERS",
    "TrickModifierRule",
    "bond_decay_rate",
    "bonding_style",
    "trick_modifier_rule",
]
