"""
Oracle module for the solo oracle engine.

Key components:
- SceneOracle: scene classification, meaning words, random events
- Fate questions: likelihood + chaos -> percentile target -> yes/no
- DiceRngAdapter: deterministic randint/choice over a seeded DiceRoller

Usage:
    from solo_oracle.data_models import DiceRoller
    from solo_oracle.oracle import DiceRngAdapter, SceneOracle, SceneType

    oracle = SceneOracle(rng=DiceRngAdapter(DiceRoller(seed=12345)))
    scene_type = oracle.classify_scene(chaos_factor=5, roll=oracle.roll_d10())
"""

from solo_oracle.oracle.dice_rng_adapter import DiceRngAdapter
from solo_oracle.oracle.scene_oracle import (
    SceneOracle,
    SceneType,
    AlterationMethod,
    SceneAdjustment,
    RandomEventFocus,
    MeaningWords,
    RandomEvent,
    WordLists,
    DEFAULT_WORD_LISTS,
    classify_scene,
    update_chaos_factor,
    CHAOS_MIN,
    CHAOS_MAX,
    CHAOS_DEFAULT,
)
from solo_oracle.oracle.fate import (
    FateLikelihood,
    FateAnswer,
    FateQuestionRecord,
    FATE_BASE_TARGETS,
    fate_target,
    resolve_fate,
    ask_fate,
)

__all__ = [
    "DiceRngAdapter",
    "SceneOracle",
    "SceneType",
    "AlterationMethod",
    "SceneAdjustment",
    "RandomEventFocus",
    "MeaningWords",
    "RandomEvent",
    "WordLists",
    "DEFAULT_WORD_LISTS",
    "classify_scene",
    "update_chaos_factor",
    "CHAOS_MIN",
    "CHAOS_MAX",
    "CHAOS_DEFAULT",
    "FateLikelihood",
    "FateAnswer",
    "FateQuestionRecord",
    "FATE_BASE_TARGETS",
    "fate_target",
    "resolve_fate",
    "ask_fate",
]
