"""
Solo Oracle Engine

Deterministic procedural core for solo tabletop play: seeded dice and
content-pack tables, scene classification against a chaos factor, fate
questions, skill checks, and weighted character/thread bookkeeping.
"""

__version__ = "0.1.0"

from solo_oracle.data_models import DiceRoller, DiceRoll, DiceSpec, SeededRNG
from solo_oracle.tables import (
    ContentPack,
    RollContext,
    TableEngine,
    TableExecution,
    load_default_pack,
)
from solo_oracle.oracle import (
    SceneOracle,
    SceneType,
    FateLikelihood,
    fate_target,
    resolve_fate,
    classify_scene,
    update_chaos_factor,
)
from solo_oracle.resolution import CheckRequest, evaluate_check
from solo_oracle.campaign import CampaignState, SoloCampaignEngine, WeightedList

__all__ = [
    "__version__",
    "DiceRoller",
    "DiceRoll",
    "DiceSpec",
    "SeededRNG",
    "ContentPack",
    "RollContext",
    "TableEngine",
    "TableExecution",
    "load_default_pack",
    "SceneOracle",
    "SceneType",
    "FateLikelihood",
    "fate_target",
    "resolve_fate",
    "classify_scene",
    "update_chaos_factor",
    "CheckRequest",
    "evaluate_check",
    "CampaignState",
    "SoloCampaignEngine",
    "WeightedList",
]
