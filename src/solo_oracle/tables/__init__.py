"""
Table resolution for the solo oracle engine.

Content packs hold declarative tables; the TableEngine rolls them against
a seeded stream and merges nested outcomes into one TableExecution.
"""

from solo_oracle.tables.table_types import (
    ActionType,
    OutcomeAction,
    TableEntry,
    TableDefinition,
    ContentPack,
    RollContext,
    SpawnNode,
    SpawnEdge,
    SpawnTrap,
    TableRollResult,
    TableExecution,
    CONDITIONAL_TABLE_ID,
)
from solo_oracle.tables.content_pack import (
    ContentPackError,
    ContentPackLoadResult,
    ContentPackLoader,
    parse_content_pack,
    load_default_pack,
    load_pack_or_raise,
)
from solo_oracle.tables.table_engine import TableEngine, DEFAULT_MAX_DEPTH

__all__ = [
    "ActionType",
    "OutcomeAction",
    "TableEntry",
    "TableDefinition",
    "ContentPack",
    "RollContext",
    "SpawnNode",
    "SpawnEdge",
    "SpawnTrap",
    "TableRollResult",
    "TableExecution",
    "CONDITIONAL_TABLE_ID",
    "ContentPackError",
    "ContentPackLoadResult",
    "ContentPackLoader",
    "parse_content_pack",
    "load_default_pack",
    "load_pack_or_raise",
    "TableEngine",
    "DEFAULT_MAX_DEPTH",
]
