"""상호작용 / 신뢰 단계 정적 테이블"""

from typing import Dict, Optional, Tuple

from src.core.taming.models import InteractionRequirements, TamingInteraction, TrustLevel

TRUST_LEVELS: Tuple[TrustLevel, ...] = (
    TrustLevel(
        level=0,
        name="Fearful",
        description="The animal is afraid and will flee from you",
        requirements=0,
        unlocks=("observe", "give_space"),
        color="red",
    ),
    TrustLevel(
        level=15,
        name="Wary",
        description="The animal is cautious but aware of your presence",
        requirements=3,
        unlocks=("approach", "speak_softly"),
        color="orange",
    ),
    TrustLevel(
        level=30,
        name="Curious",
        description="The animal shows interest in you",
        requirements=8,
        unlocks=("offer_food", "gentle_touch"),
        color="yellow",
    ),
    TrustLevel(
        level=50,
        name="Accepting",
        description="The animal tolerates your presence",
        requirements=15,
        unlocks=("play",),
        color="blue",
    ),
    TrustLevel(
        level=75,
        name="Friendly",
        description="The animal enjoys your company",
        requirements=25,
        unlocks=("pet", "teach_tricks"),
        color="green",
    ),
    TrustLevel(
        level=90,
        name="Bonded",
        description="You have formed a deep bond with this animal",
        requirements=40,
        unlocks=("companion_request", "advanced_tricks"),
        color="purple",
    ),
)

TAMING_INTERACTIONS: Tuple[TamingInteraction, ...] = (
    TamingInteraction(
        id="observe",
        type="observe",
        name="Observe Quietly",
        description="Watch the animal from a safe distance to learn its behavior",
        trust_modifier=2,
        energy_cost=1,
        duration=3000,
        requirements=InteractionRequirements(
            personality_bonus={"shy": 3, "curious": 1},
            personality_penalty={"aggressive": -1},
        ),
        stress_effect=-2,
        icon="👁️",
    ),
    TamingInteraction(
        id="approach_slow",
        type="approach",
        name="Approach Slowly",
        description="Move closer to the animal with careful, non-threatening movements",
        trust_modifier=3,
        energy_cost=2,
        duration=4000,
        requirements=InteractionRequirements(
            min_trust_level=10,
            personality_bonus={"friendly": 2, "curious": 2},
            personality_penalty={"shy": -2, "aggressive": -1},
        ),
        cooldown=10_000,
        stress_effect=1,
        icon="🚶",
    ),
    TamingInteraction(
        id="offer_food",
        type="offer_food",
        name="Offer Food",
        description="Present food to the animal to build trust",
        trust_modifier=8,
        energy_cost=3,
        duration=5000,
        requirements=InteractionRequirements(
            min_trust_level=20,
            required_items=("food",),
            personality_bonus={"friendly": 3, "playful": 2},
            personality_penalty={"aggressive": -2},
        ),
        cooldown=15_000,
        stress_effect=-3,
        icon="🍎",
    ),
    TamingInteraction(
        id="gentle_touch",
        type="gentle_touch",
        name="Gentle Touch",
        description="Slowly extend your hand for the animal to sniff or touch",
        trust_modifier=5,
        energy_cost=2,
        duration=3500,
        requirements=InteractionRequirements(
            min_trust_level=25,
            personality_bonus={"friendly": 4, "curious": 2},
            personality_penalty={"shy": -3, "aggressive": -4},
        ),
        cooldown=12_000,
        stress_effect=2,
        icon="✋",
    ),
    TamingInteraction(
        id="play_gesture",
        type="play",
        name="Play Gesture",
        description="Make playful movements to engage the animal",
        trust_modifier=6,
        energy_cost=4,
        duration=6000,
        requirements=InteractionRequirements(
            min_trust_level=40,
            personality_bonus={"playful": 5, "curious": 3},
            personality_penalty={"shy": -2, "aggressive": -1},
        ),
        cooldown=20_000,
        stress_effect=-1,
        icon="🎾",
    ),
    TamingInteraction(
        id="speak_softly",
        type="speak_softly",
        name="Speak Softly",
        description="Use a calm, gentle voice to soothe the animal",
        trust_modifier=4,
        energy_cost=1,
        duration=4000,
        requirements=InteractionRequirements(
            min_trust_level=10,
            personality_bonus={"shy": 3, "friendly": 2},
            personality_penalty={"aggressive": -1},
        ),
        cooldown=8000,
        stress_effect=-2,
        icon="💬",
    ),
    TamingInteraction(
        id="give_space",
        type="give_space",
        name="Give Space",
        description="Step back to show you respect the animal's boundaries",
        trust_modifier=3,
        energy_cost=0,
        duration=2000,
        requirements=InteractionRequirements(
            personality_bonus={"shy": 4, "aggressive": 2},
            personality_penalty={"friendly": -1},
        ),
        stress_effect=-4,
        icon="↩️",
    ),
)

_INTERACTIONS_BY_ID: Dict[str, TamingInteraction] = {
    i.id: i for i in TAMING_INTERACTIONS
}


def get_interaction(interaction_id: str) -> Optional[TamingInteraction]:
    """O(1) 조회. 없으면 None."""
    return _INTERACTIONS_BY_ID.get(interaction_id)
