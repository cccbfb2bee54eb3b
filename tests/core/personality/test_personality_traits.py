"""성격 도출 테이블 테스트"""

from src.core.personality import (
    BOND_DECAY_RATES,
    BONDING_STYLES,
    TRICK_MODIFIERS,
    BondingStyle,
    PersonalityProfile,
    PersonalityTrait,
    bond_decay_rate,
    bonding_style,
    trick_modifier_rule,
)


class TestExhaustiveTables:
    def test_every_trait_has_decay_rate(self) -> None:
        assert set(BOND_DECAY_RATES) == set(PersonalityTrait)

    def test_every_trait_has_bonding_style(self) -> None:
        assert set(BONDING_STYLES) == set(PersonalityTrait)

    def test_every_trait_has_trick_modifier(self) -> None:
        assert set(TRICK_MODIFIERS) == set(PersonalityTrait)


class TestDerivations:
    def test_decay_rates(self) -> None:
        assert bond_decay_rate(PersonalityProfile(primary=PersonalityTrait.SHY)) == 0.5
        assert bond_decay_rate(PersonalityProfile(primary=PersonalityTrait.FRIENDLY)) == 0.1
        assert bond_decay_rate(PersonalityProfile(primary=PersonalityTrait.AGGRESSIVE)) == 0.7
        assert bond_decay_rate(PersonalityProfile(primary=PersonalityTrait.BOLD)) == 0.3

    def test_bonding_style_playful(self) -> None:
        style, activities = bonding_style(PersonalityProfile(primary=PersonalityTrait.PLAYFUL))
        assert style == BondingStyle.ACTIVITY_BASED
        assert "play" in activities

    def test_bonding_style_default_trust_based(self) -> None:
        style, _ = bonding_style(PersonalityProfile(primary=PersonalityTrait.LAZY))
        assert style == BondingStyle.TRUST_BASED

    def test_secondary_trait_ignored(self) -> None:
        profile = PersonalityProfile(
            primary=PersonalityTrait.FRIENDLY, secondary=PersonalityTrait.SHY
        )
        assert bond_decay_rate(profile) == 0.1


class TestTrickModifierRule:
    def test_no_profile(self) -> None:
        rule = trick_modifier_rule(None, "basic")
        assert rule.gesture_tolerance_bonus == 0.0
        assert rule.learning_speed_multiplier == 1.0

    def test_patient_tolerance_bonus(self) -> None:
        rule = trick_modifier_rule(PersonalityProfile(primary=PersonalityTrait.PATIENT), "basic")
        assert rule.gesture_tolerance_bonus == 0.2

    def test_category_restricted_rule(self) -> None:
        energetic = PersonalityProfile(primary=PersonalityTrait.ENERGETIC)
        assert trick_modifier_rule(energetic, "movement").learning_speed_multiplier == 1.4
        assert trick_modifier_rule(energetic, "basic").learning_speed_multiplier == 1.0
