"""길들이기 Core 패키지 - 공개 API"""

from src.core.taming.models import (
    GateResult,
    InteractionRequirements,
    TamingInteraction,
    TamingInteractionResult,
    TamingPreferences,
    TamingProgress,
    TamingSession,
    TrustLevel,
)
from src.core.taming.interactions import (
    TAMING_INTERACTIONS,
    TRUST_LEVELS,
    get_interaction,
)
from src.core.taming.calculations import (
    apply_context_modifiers,
    apply_failure_modifier,
    calculate_legacy_bond_level,
    calculate_success_probability,
    clamp_trust,
    get_trust_level_info,
    personality_modifier,
    roll_interaction_success,
)

__all__ = [
    "GateResult",
    "InteractionRequirements",
    "TamingInteraction",
    "TamingInteractionResult",
    "TamingPreferences",
    "TamingProgress",
    "TamingSession",
    "TrustLevel",
    "TAMING_INTERACTIONS",
    "TRUST_LEVELS",
    "get_interaction",
    "apply_context_modifiers",
    "apply_failure_modifier",
    "calculate_legacy_bond_level",
    "calculate_success_probability",
    "clamp_trust",
    "get_trust_level_info",
    "personality_modifier",
    "roll_interaction_success",
]
