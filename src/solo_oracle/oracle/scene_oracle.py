"""
Scene oracle for the solo oracle engine.

Implements the scene-level oracle mechanics:
- Scene classification: Expected / Altered / Interrupt from a d10 vs chaos
- Chaos Factor: bounded tension that rises when the protagonists lose control
- Meaning Words: word pairs for interpreting altered scenes
- Random Events: a focus plus meaning words for interrupts

All randomness is drawn through a DiceRngAdapter, so a seed and sequence
cursor reproduce every classification roll and generated event.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence
import logging

from solo_oracle.data_models import DiceRoller, new_session_seed
from solo_oracle.oracle.dice_rng_adapter import DiceRngAdapter

logger = logging.getLogger(__name__)


CHAOS_MIN = 1
CHAOS_MAX = 9
CHAOS_DEFAULT = 5


# =============================================================================
# ENUMS
# =============================================================================


class SceneType(str, Enum):
    """How the next scene relates to what the player expected."""
    EXPECTED = "expected"
    ALTERED = "altered"
    INTERRUPT = "interrupt"

    @property
    def title(self) -> str:
        return self.value.capitalize()


class AlterationMethod(str, Enum):
    """Ways to turn an expected scene into an altered one."""
    NEXT_MOST_LIKELY = "next_most_likely"
    TWEAK_ONE_ELEMENT = "tweak_one_element"
    FATE_QUESTION = "fate_question"
    MEANING_WORDS = "meaning_words"
    SCENE_ADJUSTMENT = "scene_adjustment"

    @property
    def label(self) -> str:
        return _ALTERATION_LABELS[self]

    @property
    def guidance(self) -> str:
        return _ALTERATION_GUIDANCE[self]

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["AlterationMethod"]:
        """Match a method by value or label, ignoring case, spaces and dashes."""
        if name is None:
            return None
        normalized = name.strip().lower().replace("-", "_").replace(" ", "_")
        for method in cls:
            if normalized in (method.value, method.label.lower().replace(" ", "_")):
                return method
        return None


_ALTERATION_LABELS = {
    AlterationMethod.NEXT_MOST_LIKELY: "Next Most Likely",
    AlterationMethod.TWEAK_ONE_ELEMENT: "Tweak One Element (who/what/where/goal/complication)",
    AlterationMethod.FATE_QUESTION: "Ask a Fate Question",
    AlterationMethod.MEANING_WORDS: "Meaning Words",
    AlterationMethod.SCENE_ADJUSTMENT: "Scene Adjustment",
}

_ALTERATION_GUIDANCE = {
    AlterationMethod.NEXT_MOST_LIKELY: "Go with the next most likely idea and proceed confidently.",
    AlterationMethod.TWEAK_ONE_ELEMENT: (
        "Adjust one element (who/what/where/goal/complication) to make the scene surprising."
    ),
    AlterationMethod.FATE_QUESTION: "Frame a yes/no question, roll, and apply the answer to reshape the scene.",
    AlterationMethod.MEANING_WORDS: "Interpret the two words as a prompt for what changes.",
    AlterationMethod.SCENE_ADJUSTMENT: "Apply a small adjustment to shift the scene's direction.",
}


class SceneAdjustment(str, Enum):
    """Small adjustments used by the scene-adjustment alteration method."""
    RAISE_STAKES = "raise_stakes"
    SHIFT_LOCATION = "shift_location"
    DELAY_GOAL = "delay_goal"
    ADD_COMPLICATION = "add_complication"
    REVEAL_MOTIVATION = "reveal_motivation"

    @property
    def label(self) -> str:
        return _ADJUSTMENT_LABELS[self]

    @property
    def guidance(self) -> str:
        return _ADJUSTMENT_GUIDANCE[self]


_ADJUSTMENT_LABELS = {
    SceneAdjustment.RAISE_STAKES: "Raise the Stakes",
    SceneAdjustment.SHIFT_LOCATION: "Shift the Location",
    SceneAdjustment.DELAY_GOAL: "Delay the Goal",
    SceneAdjustment.ADD_COMPLICATION: "Add a Complication",
    SceneAdjustment.REVEAL_MOTIVATION: "Reveal a Motivation",
}

_ADJUSTMENT_GUIDANCE = {
    SceneAdjustment.RAISE_STAKES: "Something makes success costlier or riskier.",
    SceneAdjustment.SHIFT_LOCATION: "Move the action to a nearby, more dramatic place.",
    SceneAdjustment.DELAY_GOAL: "A barrier forces a detour before the goal can be reached.",
    SceneAdjustment.ADD_COMPLICATION: "Introduce a new obstacle or side effect.",
    SceneAdjustment.REVEAL_MOTIVATION: "Expose a hidden reason behind someone's actions.",
}


class RandomEventFocus(str, Enum):
    """What a Random Event relates to."""
    NPC_ACTION = "NPC Action"
    NEW_NPC = "New NPC"
    REMOTE_EVENT = "Remote Event"
    MOVE_TOWARD_THREAD = "Move Toward a Thread"
    MOVE_AWAY_FROM_THREAD = "Move Away from a Thread"
    PC_NEGATIVE = "PC Negative"
    PC_POSITIVE = "PC Positive"


# =============================================================================
# WORD LISTS
# =============================================================================


@dataclass(frozen=True)
class WordLists:
    """Two word lists: descriptors (A) and subjects (B)."""
    list_a: tuple[str, ...]
    list_b: tuple[str, ...]


DEFAULT_WORD_LISTS = WordLists(
    list_a=(
        "ancient", "bold", "broken", "calm", "chaotic", "cold", "distant", "eager",
        "fragile", "grim", "hidden", "honest", "jagged", "luminous", "muffled", "narrow",
        "ominous", "quiet", "restless", "scarred", "silent", "tangled", "urgent", "worn",
    ),
    list_b=(
        "ally", "barrier", "bridge", "cargo", "crowd", "debt", "doorway", "echo",
        "fire", "garden", "hunger", "key", "memory", "message", "path", "promise",
        "refuge", "signal", "storm", "trail", "vault", "warning", "whisper", "wound",
    ),
)


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class MeaningWords:
    """A descriptor/subject pair to interpret."""

    first: str
    second: str

    def __str__(self) -> str:
        return f"{self.first} / {self.second}"


@dataclass(frozen=True)
class RandomEvent:
    """A randomly triggered event."""

    focus: RandomEventFocus
    meaning_words: MeaningWords

    def __str__(self) -> str:
        return f"{self.focus.value}: {self.meaning_words}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "focus": self.focus.value,
            "first": self.meaning_words.first,
            "second": self.meaning_words.second,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RandomEvent":
        return cls(
            focus=RandomEventFocus(data["focus"]),
            meaning_words=MeaningWords(first=data["first"], second=data["second"]),
        )


# =============================================================================
# PURE RULES
# =============================================================================


def classify_scene(chaos_factor: int, roll: int) -> SceneType:
    """
    Classify a scene from the chaos factor and a d10 roll.

    A roll above the chaos factor is Expected. At or below it, an even roll
    is an Interrupt and an odd roll is Altered.
    """
    if roll > chaos_factor:
        return SceneType.EXPECTED
    if roll % 2 == 0:
        return SceneType.INTERRUPT
    return SceneType.ALTERED


def update_chaos_factor(current: int, pcs_in_control: bool) -> int:
    """Move chaos one step toward calm or tension, clamped to 1..9."""
    if pcs_in_control:
        return max(CHAOS_MIN, current - 1)
    return min(CHAOS_MAX, current + 1)


# =============================================================================
# SCENE ORACLE
# =============================================================================


class SceneOracle:
    """
    Scene-level oracle.

    Holds no chaos state of its own; callers pass the current chaos factor
    in and persist what update_chaos_factor returns.

    Usage:
        oracle = SceneOracle(rng=DiceRngAdapter(DiceRoller(seed=12345)))
        roll = oracle.roll_d10()
        scene_type = oracle.classify_scene(chaos_factor=5, roll=roll)
        if scene_type == SceneType.INTERRUPT:
            event = oracle.generate_random_event()
    """

    def __init__(
        self,
        rng: Optional[DiceRngAdapter] = None,
        word_lists: WordLists = DEFAULT_WORD_LISTS,
        focus_options: Optional[Sequence[RandomEventFocus]] = None,
    ):
        """
        Initialize the scene oracle.

        Args:
            rng: Adapter over a seeded DiceRoller. Without one the oracle
                rolls on a fresh, unrecorded session seed.
            word_lists: Meaning word lists
            focus_options: Random event foci to draw from (all by default)
        """
        if rng is None:
            rng = DiceRngAdapter(DiceRoller(new_session_seed()), reason_prefix="SceneOracle")
        self._rng = rng
        self.word_lists = word_lists
        self.focus_options = tuple(focus_options) if focus_options is not None else tuple(RandomEventFocus)

    @property
    def rng(self) -> DiceRngAdapter:
        return self._rng

    def roll_d10(self) -> int:
        return self._rng.randint(1, 10)

    def roll_d100(self) -> int:
        return self._rng.randint(1, 100)

    def classify_scene(self, chaos_factor: int, roll: int) -> SceneType:
        scene_type = classify_scene(chaos_factor, roll)
        logger.debug(f"Scene roll {roll} vs chaos {chaos_factor}: {scene_type.value}")
        return scene_type

    def generate_meaning_words(self) -> MeaningWords:
        """Draw one word from each list, list A first."""
        first = self._rng.choice(self.word_lists.list_a)
        second = self._rng.choice(self.word_lists.list_b)
        return MeaningWords(first=first, second=second)

    def generate_random_event(self) -> RandomEvent:
        """Draw a focus, then a meaning word pair."""
        focus = self._rng.choice(self.focus_options)
        words = self.generate_meaning_words()
        event = RandomEvent(focus=focus, meaning_words=words)
        logger.debug(f"Random event: {event}")
        return event
