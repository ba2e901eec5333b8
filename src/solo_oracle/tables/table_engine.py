"""
Table engine for the solo oracle.

Executes a table from a content pack against a seeded dice stream and
merges every nested outcome into a single TableExecution.
"""

from types import MappingProxyType
from typing import Mapping, Optional
import logging

from solo_oracle.data_models import DiceRoller
from solo_oracle.observability.run_log import RunLog
from solo_oracle.tables.table_types import (
    ActionType,
    CONDITIONAL_TABLE_ID,
    ContentPack,
    ExecutionAccumulator,
    OutcomeAction,
    RollContext,
    SpawnEdge,
    SpawnNode,
    SpawnTrap,
    TableDefinition,
    TableEntry,
    TableExecution,
    TableRollResult,
)

logger = logging.getLogger(__name__)


DEFAULT_MAX_DEPTH = 16

# Defaults used when a spawn action leaves a field unset
DEFAULT_NODE_TYPE = "room"
DEFAULT_NODE_SUMMARY = "Unremarkable space"
DEFAULT_EDGE_TYPE = "open"
DEFAULT_EDGE_SUMMARY = "Connection"
DEFAULT_TRAP_CATEGORY = "mechanical"
DEFAULT_TRAP_TRIGGER = "pressure plate"
DEFAULT_TRAP_DETECTION_SKILL = "Investigation"
DEFAULT_TRAP_DETECTION_DC = 13
DEFAULT_TRAP_DISARM_SKILL = "Thieves' Tools"
DEFAULT_TRAP_DISARM_DC = 13
DEFAULT_TRAP_EFFECT = "Alarm and minor injury"


class TableEngine:
    """
    Resolves tables from one content pack.

    The engine holds no stream state. Each execute() call builds a roller
    from (seed, sequence), threads it through every nested roll, and
    reports the cursor it stopped at as `final_sequence`.
    """

    def __init__(
        self,
        content_pack: ContentPack,
        max_depth: int = DEFAULT_MAX_DEPTH,
        run_log: Optional[RunLog] = None,
    ):
        self.content_pack = content_pack
        self.max_depth = max_depth
        self.run_log = run_log

        tables: dict[str, TableDefinition] = {}
        for table in content_pack.tables:
            if table.table_id in tables:
                logger.warning(
                    f"Duplicate table id '{table.table_id}' in pack "
                    f"'{content_pack.pack_id}'; later definition wins"
                )
            tables[table.table_id] = table
        self._tables = MappingProxyType(tables)

        logger.debug(
            f"TableEngine ready: pack {content_pack.pack_id} v{content_pack.version}, "
            f"{len(tables)} tables"
        )

    @property
    def tables(self) -> Mapping[str, TableDefinition]:
        return self._tables

    def table(self, table_id: str) -> Optional[TableDefinition]:
        return self._tables.get(table_id)

    def table_ids(self) -> list[str]:
        return sorted(self._tables)

    def execute(
        self,
        table_id: str,
        context: RollContext,
        seed: int,
        sequence: int = 0,
    ) -> TableExecution:
        """
        Roll on a table and resolve every outcome action it produces.

        Args:
            table_id: Table to roll on
            context: Bookkeeping context, passed through unchanged
            seed: Stream seed
            sequence: Stream cursor to resume from

        Returns:
            TableExecution with all roll results, spawns and log lines
            merged in execution order, plus the final cursor
        """
        roller = DiceRoller(seed, sequence)
        acc = ExecutionAccumulator()
        self._resolve_table(table_id, context, roller, acc, depth=0)
        execution = acc.freeze(roller.sequence)

        logger.debug(
            f"Executed table {table_id}: {len(execution.roll_results)} rolls, "
            f"{execution.spawn_count} spawns, sequence {sequence} -> {execution.final_sequence}"
        )
        return execution

    def _resolve_table(
        self,
        table_id: str,
        context: RollContext,
        roller: DiceRoller,
        acc: ExecutionAccumulator,
        depth: int,
    ) -> None:
        table = self._tables.get(table_id)
        if table is None:
            logger.warning(f"Missing table: {table_id}")
            acc.logs.append(f"Missing table: {table_id}")
            return

        if depth > self.max_depth:
            logger.warning(f"Table recursion limit reached at depth {depth}: {table_id}")
            acc.logs.append(f"Table recursion limit reached: {table_id}")
            return

        if not table.entries:
            logger.warning(f"Table has no entries: {table_id}")
            acc.logs.append(f"Table has no entries: {table_id}")
            return

        roll = roller.roll(table.dice)
        entry = table.find_entry(roll.total)
        fallback = entry is None
        if entry is None:
            logger.debug(f"No entry in {table_id} covers {roll.total}, using first entry")
            entry = table.entries[0]

        acc.roll_results.append(
            TableRollResult(
                table_id=table_id,
                entry=entry,
                roll=roll,
                sequence=roller.sequence,
                seed=roller.seed,
            )
        )
        logger.debug(f"Table {table_id}: {roll} -> entry {entry.min}-{entry.max}")

        if self.run_log is not None:
            self.run_log.log_roll(
                notation=roll.notation,
                rolls=list(roll.rolls),
                modifier=roll.modifier,
                total=roll.total,
                reason=f"table {table_id}",
                seed=roller.seed,
                stream_sequence=roller.sequence,
                context={"campaign_id": context.campaign_id, "depth": depth},
            )
            self.run_log.log_table_lookup(
                table_id=table_id,
                table_name=table.name,
                roll_total=roll.total,
                entry_min=entry.min,
                entry_max=entry.max,
                fallback=fallback,
                context={"campaign_id": context.campaign_id, "depth": depth},
            )

        self._apply_actions(entry.actions, context, roller, acc, depth)

    def _apply_actions(
        self,
        actions: tuple[OutcomeAction, ...],
        context: RollContext,
        roller: DiceRoller,
        acc: ExecutionAccumulator,
        depth: int,
    ) -> None:
        for action in actions:
            kind = action.action_type

            if kind == ActionType.SPAWN_NODE:
                acc.spawned_nodes.append(
                    SpawnNode(
                        node_type=action.node_type or DEFAULT_NODE_TYPE,
                        summary=action.summary or DEFAULT_NODE_SUMMARY,
                        tags=action.tags,
                    )
                )

            elif kind == ActionType.SPAWN_EDGE:
                acc.spawned_edges.append(
                    SpawnEdge(
                        edge_type=action.edge_type or DEFAULT_EDGE_TYPE,
                        summary=action.summary or DEFAULT_EDGE_SUMMARY,
                        tags=action.tags,
                    )
                )

            elif kind == ActionType.SPAWN_TRAP:
                acc.spawned_traps.append(self._build_trap(action))

            elif kind == ActionType.ROLL_ON_TABLE:
                if action.table_id is None:
                    logger.debug("roll_on_table action without table_id skipped")
                    continue
                self._resolve_table(action.table_id, context, roller, acc, depth + 1)

            elif kind == ActionType.CONDITIONAL_ROLL:
                if action.dice is None or action.threshold is None:
                    logger.debug("conditional_roll action without dice or threshold skipped")
                    continue
                self._resolve_conditional(action, context, roller, acc, depth)

            elif kind == ActionType.LOG:
                if action.message is not None:
                    acc.logs.append(action.message)

            else:
                logger.debug(f"Ignoring unknown action type: {action.type}")

    def _resolve_conditional(
        self,
        action: OutcomeAction,
        context: RollContext,
        roller: DiceRoller,
        acc: ExecutionAccumulator,
        depth: int,
    ) -> None:
        roll = roller.roll(action.dice)
        acc.roll_results.append(
            TableRollResult(
                table_id=CONDITIONAL_TABLE_ID,
                entry=TableEntry(min=roll.total, max=roll.total),
                roll=roll,
                sequence=roller.sequence,
                seed=roller.seed,
            )
        )

        passed = roll.total <= action.threshold
        logger.debug(
            f"Conditional {roll} vs threshold {action.threshold}: "
            f"{'then' if passed else 'else'} branch"
        )
        if self.run_log is not None:
            self.run_log.log_roll(
                notation=roll.notation,
                rolls=list(roll.rolls),
                modifier=roll.modifier,
                total=roll.total,
                reason=f"conditional <= {action.threshold}",
                seed=roller.seed,
                stream_sequence=roller.sequence,
                context={"campaign_id": context.campaign_id, "depth": depth},
            )

        branch = action.then_actions if passed else action.else_actions
        self._apply_actions(branch, context, roller, acc, depth)

    @staticmethod
    def _build_trap(action: OutcomeAction) -> SpawnTrap:
        return SpawnTrap(
            category=action.category or DEFAULT_TRAP_CATEGORY,
            trigger=action.trigger or DEFAULT_TRAP_TRIGGER,
            detection_skill=action.detection_skill or DEFAULT_TRAP_DETECTION_SKILL,
            detection_dc=(
                action.detection_dc if action.detection_dc is not None else DEFAULT_TRAP_DETECTION_DC
            ),
            disarm_skill=action.disarm_skill or DEFAULT_TRAP_DISARM_SKILL,
            disarm_dc=action.disarm_dc if action.disarm_dc is not None else DEFAULT_TRAP_DISARM_DC,
            effect=action.effect or DEFAULT_TRAP_EFFECT,
            save_skill=action.save_skill,
            save_dc=action.save_dc,
        )
