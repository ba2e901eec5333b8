"""
Tests for scene classification, chaos and random events.

Verifies that:
- classify_scene follows the roll vs chaos / parity rule everywhere
- Chaos moves one step per scene and never leaves 1..9
- Random events draw focus, then word A, then word B from the stream
"""

import pytest

from solo_oracle.data_models import DiceRoller
from solo_oracle.oracle.dice_rng_adapter import DiceRngAdapter
from solo_oracle.oracle.scene_oracle import (
    CHAOS_MAX,
    CHAOS_MIN,
    DEFAULT_WORD_LISTS,
    AlterationMethod,
    MeaningWords,
    RandomEvent,
    RandomEventFocus,
    SceneAdjustment,
    SceneOracle,
    SceneType,
    WordLists,
    classify_scene,
    update_chaos_factor,
)


def _oracle(seed, sequence=0, **kwargs):
    return SceneOracle(rng=DiceRngAdapter(DiceRoller(seed, sequence)), **kwargs)


class TestClassifyScene:
    """Tests for the scene classification rule."""

    @pytest.mark.parametrize("chaos", range(CHAOS_MIN, CHAOS_MAX + 1))
    def test_every_roll_and_chaos(self, chaos):
        for roll in range(1, 11):
            scene_type = classify_scene(chaos, roll)
            if roll > chaos:
                assert scene_type == SceneType.EXPECTED
            elif roll % 2 == 0:
                assert scene_type == SceneType.INTERRUPT
            else:
                assert scene_type == SceneType.ALTERED

    def test_boundary_at_chaos_five(self):
        assert classify_scene(5, 6) == SceneType.EXPECTED
        assert classify_scene(5, 5) == SceneType.ALTERED
        assert classify_scene(5, 4) == SceneType.INTERRUPT

    def test_low_chaos_mostly_expected(self):
        assert classify_scene(1, 1) == SceneType.ALTERED
        assert all(classify_scene(1, roll) == SceneType.EXPECTED for roll in range(2, 11))

    def test_high_chaos(self):
        assert classify_scene(9, 10) == SceneType.EXPECTED
        assert classify_scene(9, 9) == SceneType.ALTERED
        assert classify_scene(9, 8) == SceneType.INTERRUPT

    def test_titles(self):
        assert SceneType.EXPECTED.title == "Expected"
        assert SceneType.INTERRUPT.title == "Interrupt"


class TestChaosFactor:
    """Tests for chaos updates."""

    def test_update_moves_one_step(self):
        assert update_chaos_factor(5, pcs_in_control=True) == 4
        assert update_chaos_factor(5, pcs_in_control=False) == 6

    def test_update_clamps(self):
        assert update_chaos_factor(CHAOS_MIN, pcs_in_control=True) == CHAOS_MIN
        assert update_chaos_factor(CHAOS_MAX, pcs_in_control=False) == CHAOS_MAX


class TestSceneOracleRolls:
    """Seeded oracle draws."""

    def test_roll_d10(self, seeded_oracle):
        assert seeded_oracle.roll_d10() == 5
        assert seeded_oracle.rng.sequence == 1

    def test_roll_d100(self):
        assert _oracle(42).roll_d100() == 14

    def test_meaning_words(self, seeded_oracle):
        words = seeded_oracle.generate_meaning_words()
        assert words == MeaningWords(first="fragile", second="warning")
        assert str(words) == "fragile / warning"
        assert seeded_oracle.rng.sequence == 2

    def test_random_event_draw_order(self, seeded_oracle):
        event = seeded_oracle.generate_random_event()

        assert event.focus == RandomEventFocus.PC_NEGATIVE
        assert event.meaning_words == MeaningWords(first="tangled", second="warning")
        assert seeded_oracle.rng.sequence == 3

    def test_interrupt_then_event_seed_42(self):
        oracle = _oracle(42)
        roll = oracle.roll_d10()
        assert roll == 4
        assert oracle.classify_scene(5, roll) == SceneType.INTERRUPT

        event = oracle.generate_random_event()
        assert event.focus == RandomEventFocus.PC_NEGATIVE
        assert event.meaning_words == MeaningWords(first="restless", second="memory")
        assert oracle.rng.sequence == 4

    def test_resume_mid_stream(self):
        """An oracle built at sequence 1 sees the same event as one that rolled first."""
        continuous = _oracle(42)
        continuous.roll_d10()
        resumed = _oracle(42, sequence=1)
        assert resumed.generate_random_event() == continuous.generate_random_event()

    def test_custom_focus_options(self):
        oracle = _oracle(12345, focus_options=[RandomEventFocus.REMOTE_EVENT])
        assert oracle.generate_random_event().focus == RandomEventFocus.REMOTE_EVENT

    def test_custom_word_lists(self):
        oracle = _oracle(12345, word_lists=WordLists(list_a=("only",), list_b=("one",)))
        assert str(oracle.generate_meaning_words()) == "only / one"

    def test_unseeded_oracle_works(self):
        oracle = SceneOracle()
        assert 1 <= oracle.roll_d10() <= 10
        assert oracle.generate_meaning_words().first in DEFAULT_WORD_LISTS.list_a


class TestOracleTypes:
    """Enum labels and serialization."""

    def test_focus_order(self):
        assert [focus.value for focus in RandomEventFocus] == [
            "NPC Action",
            "New NPC",
            "Remote Event",
            "Move Toward a Thread",
            "Move Away from a Thread",
            "PC Negative",
            "PC Positive",
        ]

    def test_word_list_sizes(self):
        assert len(DEFAULT_WORD_LISTS.list_a) == 24
        assert len(DEFAULT_WORD_LISTS.list_b) == 24

    def test_random_event_round_trip(self):
        event = RandomEvent(
            focus=RandomEventFocus.NEW_NPC,
            meaning_words=MeaningWords(first="bold", second="key"),
        )
        assert RandomEvent.from_dict(event.to_dict()) == event
        assert str(event) == "New NPC: bold / key"

    @pytest.mark.parametrize("name,expected", [
        ("meaning_words", AlterationMethod.MEANING_WORDS),
        ("Meaning Words", AlterationMethod.MEANING_WORDS),
        ("scene-adjustment", AlterationMethod.SCENE_ADJUSTMENT),
        ("NEXT_MOST_LIKELY", AlterationMethod.NEXT_MOST_LIKELY),
        ("Ask a Fate Question", AlterationMethod.FATE_QUESTION),
        ("shrug", None),
        (None, None),
    ])
    def test_alteration_from_name(self, name, expected):
        assert AlterationMethod.from_name(name) is expected

    def test_alteration_guidance(self):
        for method in AlterationMethod:
            assert method.label
            assert method.guidance

    def test_adjustment_labels(self):
        assert SceneAdjustment.RAISE_STAKES.label == "Raise the Stakes"
        assert all(adjustment.guidance for adjustment in SceneAdjustment)
