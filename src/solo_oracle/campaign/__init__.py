"""
Campaign bookkeeping for the solo oracle engine.
"""

from solo_oracle.campaign.weighted_list import (
    WeightedEntity,
    WeightedList,
    normalize_key,
    MIN_WEIGHT,
    MAX_WEIGHT,
)
from solo_oracle.campaign.campaign_engine import (
    CampaignState,
    CharacterEntry,
    ThreadEntry,
    SceneRecord,
    SceneEntry,
    SkillCheckRecord,
    BookkeepingInput,
    TableRollRecord,
    SoloCampaignEngine,
)

__all__ = [
    "WeightedEntity",
    "WeightedList",
    "normalize_key",
    "MIN_WEIGHT",
    "MAX_WEIGHT",
    "CampaignState",
    "CharacterEntry",
    "ThreadEntry",
    "SceneRecord",
    "SceneEntry",
    "SkillCheckRecord",
    "BookkeepingInput",
    "TableRollRecord",
    "SoloCampaignEngine",
]
