"""이벤트 유형 상수

UI/프레젠테이션 계층은 이 이름으로 EventBus에 구독한다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # === Taming ===
    INTERACTION_COMPLETED = "interaction_completed"
    TAMING_SESSION_STARTED = "taming_session_started"
    TAMING_SESSION_ENDED = "taming_session_ended"

    # === Bonding ===
    BOND_LEVEL_UP = "bond_level_up"
    BOND_LEVEL_DOWN = "bond_level_down"
    MILESTONE_ACHIEVED = "milestone_achieved"
    ABILITY_UNLOCKED = "ability_unlocked"
    ABILITY_USED = "ability_used"
    BOND_DECAY = "bond_decay"

    # === Trick learning ===
    TRICK_LEARNING_STARTED = "trick_learning_started"
    PHASE_ADVANCED = "phase_advanced"
    TRICK_LEARNED = "trick_learned"
    TRICK_MASTERED = "trick_mastered"
    PERFORMANCE_COMPLETE = "performance_complete"
