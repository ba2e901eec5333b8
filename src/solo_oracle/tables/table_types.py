"""
Table type definitions for the solo oracle engine.

A content pack is a versioned collection of table definitions. Each table
is rolled once with its dice notation; the matching entry carries a list of
outcome actions that spawn location pieces, recurse into other tables,
branch on a conditional roll, or emit log lines.

All pack types are immutable so a parsed pack can be shared by every
engine built from it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from solo_oracle.data_models import DiceRoll


class ActionType(str, Enum):
    """Outcome action kinds understood by the table engine."""
    SPAWN_NODE = "spawn_node"
    SPAWN_EDGE = "spawn_edge"
    SPAWN_TRAP = "spawn_trap"
    ROLL_ON_TABLE = "roll_on_table"
    CONDITIONAL_ROLL = "conditional_roll"
    LOG = "log"


# =============================================================================
# CONTENT PACK
# =============================================================================


@dataclass(frozen=True)
class OutcomeAction:
    """
    One data-defined effect attached to a table entry.

    `type` is kept as the raw discriminator string so packs written for a
    newer engine still load; kinds outside ActionType are ignored at
    execution time.
    """
    type: str

    # spawn_node / spawn_edge
    node_type: Optional[str] = None
    edge_type: Optional[str] = None
    summary: Optional[str] = None
    tags: tuple[str, ...] = ()

    # spawn_trap
    category: Optional[str] = None
    trigger: Optional[str] = None
    detection_skill: Optional[str] = None
    detection_dc: Optional[int] = None
    disarm_skill: Optional[str] = None
    disarm_dc: Optional[int] = None
    save_skill: Optional[str] = None
    save_dc: Optional[int] = None
    effect: Optional[str] = None

    # roll_on_table
    table_id: Optional[str] = None

    # conditional_roll
    dice: Optional[str] = None
    threshold: Optional[int] = None
    then_actions: tuple["OutcomeAction", ...] = ()
    else_actions: tuple["OutcomeAction", ...] = ()

    # log
    message: Optional[str] = None

    @property
    def action_type(self) -> Optional[ActionType]:
        """The known action kind, or None for a forward-compatible unknown."""
        try:
            return ActionType(self.type)
        except ValueError:
            return None


@dataclass(frozen=True)
class TableEntry:
    """A table row covering the inclusive roll range [min, max]."""
    min: int
    max: int
    actions: tuple[OutcomeAction, ...] = ()

    def matches_roll(self, roll: int) -> bool:
        """Check if a roll value falls within this entry's range."""
        return self.min <= roll <= self.max


@dataclass(frozen=True)
class TableDefinition:
    """A named random table: dice notation plus ordered entries."""
    table_id: str
    name: str
    scope: str
    dice: str
    entries: tuple[TableEntry, ...] = ()

    def find_entry(self, roll: int) -> Optional[TableEntry]:
        """First entry whose range contains the roll, in definition order."""
        for entry in self.entries:
            if entry.matches_roll(roll):
                return entry
        return None


@dataclass(frozen=True)
class ContentPack:
    """Declarative, versioned set of table definitions."""
    pack_id: str
    version: str
    tables: tuple[TableDefinition, ...] = ()


# =============================================================================
# RESOLUTION CONTEXT AND RESULTS
# =============================================================================


@dataclass(frozen=True)
class RollContext:
    """
    Bookkeeping context passed unchanged through nested resolutions.

    Never alters roll arithmetic; it is carried so callers can tie spawned
    entities back to where they were generated.
    """
    campaign_id: str
    scene_id: Optional[str] = None
    location_id: Optional[str] = None
    node_id: Optional[str] = None
    tags: frozenset[str] = frozenset()
    danger_modifier: int = 0
    depth: int = 0


@dataclass(frozen=True)
class SpawnNode:
    node_type: str
    summary: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class SpawnEdge:
    edge_type: str
    summary: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class SpawnTrap:
    category: str
    trigger: str
    detection_skill: str
    detection_dc: int
    disarm_skill: str
    disarm_dc: int
    effect: str
    save_skill: Optional[str] = None
    save_dc: Optional[int] = None


CONDITIONAL_TABLE_ID = "conditional"


@dataclass(frozen=True)
class TableRollResult:
    """
    One die roll performed during a table execution.

    `sequence` is the stream cursor after this roll. Conditional rolls are
    recorded against a synthetic single-point entry at the rolled total.
    """
    table_id: str
    entry: TableEntry
    roll: DiceRoll
    sequence: int
    seed: int

    @property
    def total(self) -> int:
        return self.roll.total


@dataclass(frozen=True)
class TableExecution:
    """
    Complete, merged result of one top-level table execution.

    Roll results are in execution order: the outer roll first, then nested
    and conditional rolls as they happened. `final_sequence` is the cursor
    to persist and hand back in for the next roll on the same stream.
    """
    roll_results: tuple[TableRollResult, ...] = ()
    spawned_nodes: tuple[SpawnNode, ...] = ()
    spawned_edges: tuple[SpawnEdge, ...] = ()
    spawned_traps: tuple[SpawnTrap, ...] = ()
    logs: tuple[str, ...] = ()
    final_sequence: int = 0

    @property
    def spawn_count(self) -> int:
        return len(self.spawned_nodes) + len(self.spawned_edges) + len(self.spawned_traps)


@dataclass
class ExecutionAccumulator:
    """Mutable builder used while resolving; frozen into a TableExecution."""
    roll_results: list[TableRollResult] = field(default_factory=list)
    spawned_nodes: list[SpawnNode] = field(default_factory=list)
    spawned_edges: list[SpawnEdge] = field(default_factory=list)
    spawned_traps: list[SpawnTrap] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)

    def freeze(self, final_sequence: int) -> TableExecution:
        return TableExecution(
            roll_results=tuple(self.roll_results),
            spawned_nodes=tuple(self.spawned_nodes),
            spawned_edges=tuple(self.spawned_edges),
            spawned_traps=tuple(self.spawned_traps),
            logs=tuple(self.logs),
            final_sequence=final_sequence,
        )
