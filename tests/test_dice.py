"""
Unit tests for the seeded random source and dice roller.

Tests SeededRNG, DiceSpec, DiceRoll and DiceRoller from
solo_oracle/data_models.py. Expected values are pinned: a seed and
sequence must reproduce the same stream forever.
"""

import pytest

from solo_oracle.data_models import (
    FALLBACK_DICE,
    GOLDEN_GAMMA,
    DiceRoll,
    DiceRoller,
    DiceSpec,
    SeededRNG,
    new_session_seed,
)


class TestSeededRNG:
    """Tests for the 64-bit generator."""

    def test_reference_vector(self):
        """Seed 1234567 matches the published reference stream."""
        rng = SeededRNG(1234567)
        assert rng.next() == 6457827717110365317
        assert rng.next() == 3203168211198807973
        assert rng.next() == 9817491932198370423

    def test_seed_12345_stream(self):
        rng = SeededRNG(12345)
        assert rng.next() == 2454886589211414944
        assert rng.next() == 3778200017661327597
        assert rng.next() == 2205171434679333405

    def test_zero_seed_is_remapped(self):
        """Seed 0 behaves exactly like the golden-ratio constant."""
        zero = SeededRNG(0)
        golden = SeededRNG(GOLDEN_GAMMA)
        assert zero.state == GOLDEN_GAMMA
        assert [zero.next() for _ in range(5)] == [golden.next() for _ in range(5)]

    def test_zero_seed_first_value(self):
        assert SeededRNG(0).next() == 7960286522194355700

    def test_seed_masked_to_64_bits(self):
        wide = SeededRNG(12345 + 2**64)
        narrow = SeededRNG(12345)
        assert [wide.next() for _ in range(3)] == [narrow.next() for _ in range(3)]

    def test_values_fit_in_64_bits(self):
        rng = SeededRNG(42)
        for _ in range(100):
            value = rng.next()
            assert 0 <= value < 2**64

    def test_next_bounded_is_modulo(self):
        rng = SeededRNG(12345)
        assert rng.next_bounded(100) == 44
        assert rng.next_bounded(6) == 3

    @pytest.mark.parametrize("bound", [0, -1])
    def test_next_bounded_rejects_non_positive(self, bound):
        with pytest.raises(ValueError):
            SeededRNG(1).next_bounded(bound)


class TestDiceSpec:
    """Tests for dice notation parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("1d6", DiceSpec(1, 6, 0)),
        ("d6", DiceSpec(1, 6, 0)),
        ("D20", DiceSpec(1, 20, 0)),
        ("2d6+3", DiceSpec(2, 6, 3)),
        ("  3d8+2  ", DiceSpec(3, 8, 2)),
        ("xd6", DiceSpec(1, 6, 0)),
        ("1d6+x", DiceSpec(1, 6, 0)),
        ("0d6", DiceSpec(0, 6, 0)),
    ])
    def test_parse_valid(self, text, expected):
        assert DiceSpec.parse(text) == expected

    @pytest.mark.parametrize("text", [
        "banana",
        "",
        "1d",
        "1d0",
        "1d-4",
        "-1d6",
        "1d6-2",
        "1dx",
    ])
    def test_parse_malformed(self, text):
        assert DiceSpec.parse(text) is None

    def test_str(self):
        assert str(DiceSpec(2, 6, 3)) == "2d6+3"
        assert str(DiceSpec(1, 100, 0)) == "1d100"
        assert str(FALLBACK_DICE) == "1d100"


class TestDiceRoller:
    """Tests for DiceRoller."""

    def test_single_die(self, seeded_roller):
        result = seeded_roller.roll("1d6")
        assert isinstance(result, DiceRoll)
        assert result.rolls == (3,)
        assert result.total == 3
        assert seeded_roller.sequence == 1

    def test_multiple_dice_with_modifier(self, seeded_roller):
        result = seeded_roller.roll("2d6+3")
        assert result.rolls == (3, 4)
        assert result.modifier == 3
        assert result.total == 10
        assert seeded_roller.sequence == 2

    def test_roll_str(self, seeded_roller):
        assert str(seeded_roller.roll("2d6+3")) == "2d6+3: [3, 4] + 3 = 10"

    def test_d20_seed_42(self):
        assert DiceRoller(seed=42).roll("1d20").total == 14

    def test_sequence_fast_forward(self):
        """Starting at sequence 2 skips the first two draws."""
        roller = DiceRoller(seed=12345, sequence=2)
        result = roller.roll("1d6")
        assert result.total == 4
        assert roller.sequence == 3

    def test_resume_matches_continuous_stream(self):
        continuous = DiceRoller(seed=987654321)
        for _ in range(3):
            continuous.roll("1d20")
        expected = continuous.roll("3d8+1")

        resumed = DiceRoller(seed=987654321, sequence=continuous.sequence - 3)
        assert resumed.roll("3d8+1") == expected

    def test_same_seed_same_rolls(self):
        first = DiceRoller(seed=2024, sequence=7)
        second = DiceRoller(seed=2024, sequence=7)
        notations = ["1d20", "2d6+3", "d100", "4d4"]
        assert [first.roll(n) for n in notations] == [second.roll(n) for n in notations]

    def test_negative_sequence_treated_as_zero(self):
        assert DiceRoller(seed=12345, sequence=-5).roll("1d6").total == 3

    def test_malformed_notation_falls_back_to_d100(self, seeded_roller):
        result = seeded_roller.roll("banana")
        assert result.notation == "banana"
        assert result.rolls == (45,)
        assert result.modifier == 0
        assert result.total == 45
        assert seeded_roller.sequence == 1

    def test_negative_modifier_is_malformed(self, seeded_roller):
        """Only '+' modifiers are part of the notation."""
        result = seeded_roller.roll("1d6-2")
        assert result.total == 45
        assert result.notation == "1d6-2"

    def test_zero_dice_consume_no_draws(self, seeded_roller):
        result = seeded_roller.roll("0d6+2")
        assert result.rolls == ()
        assert result.total == 2
        assert seeded_roller.sequence == 0

    def test_zero_seed_rolls(self):
        assert DiceRoller(seed=0).roll_percentile() == 1
        assert DiceRoller(seed=0).roll("1d6").total == 1

    def test_roll_convenience_methods(self):
        assert DiceRoller(seed=12345).roll_d10() == 5
        assert DiceRoller(seed=12345).roll_d20() == 5
        assert DiceRoller(seed=12345).roll_percentile() == 45

    def test_randint_uses_one_draw(self, seeded_roller):
        assert seeded_roller.randint(1, 10) == 5
        assert seeded_roller.sequence == 1
        assert seeded_roller.randint(0, 9) == 7
        assert seeded_roller.sequence == 2

    def test_randint_empty_range(self, seeded_roller):
        with pytest.raises(ValueError):
            seeded_roller.randint(5, 4)

    def test_seed_property_is_masked(self):
        assert DiceRoller(seed=-1).seed == 2**64 - 1

    def test_results_stay_in_range(self):
        roller = DiceRoller(seed=77)
        for _ in range(200):
            result = roller.roll("1d8")
            assert 1 <= result.total <= 8


def test_new_session_seed_is_64_bit():
    for _ in range(10):
        assert 0 <= new_session_seed() < 2**64
