"""
Pytest fixtures for the solo oracle engine test suite.

Provides seeded dice, the bundled content pack, a table engine over it,
and small hand-built packs for edge cases.
"""

import pytest

from solo_oracle.data_models import DiceRoller
from solo_oracle.observability.run_log import RunLog
from solo_oracle.oracle.dice_rng_adapter import DiceRngAdapter
from solo_oracle.oracle.scene_oracle import SceneOracle
from solo_oracle.tables.content_pack import load_default_pack
from solo_oracle.tables.table_engine import TableEngine
from solo_oracle.tables.table_types import (
    ContentPack,
    OutcomeAction,
    RollContext,
    TableDefinition,
    TableEntry,
)


# =============================================================================
# DICE FIXTURES
# =============================================================================


@pytest.fixture
def seeded_roller():
    """DiceRoller at the start of seed 12345's stream."""
    return DiceRoller(seed=12345)


@pytest.fixture
def seeded_oracle():
    """SceneOracle drawing from seed 12345."""
    return SceneOracle(rng=DiceRngAdapter(DiceRoller(seed=12345), reason_prefix="Test"))


@pytest.fixture
def run_log():
    """A fresh, isolated run log."""
    return RunLog()


# =============================================================================
# TABLE FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def default_pack():
    """The bundled dungeon/NPC content pack."""
    return load_default_pack()


@pytest.fixture
def table_engine(default_pack):
    return TableEngine(default_pack)


@pytest.fixture
def roll_context():
    """Roll context for a test campaign."""
    return RollContext(campaign_id="test-campaign", tags=frozenset({"dungeon"}))


def make_pack(*tables: TableDefinition, pack_id: str = "test_pack") -> ContentPack:
    return ContentPack(pack_id=pack_id, version="1", tables=tuple(tables))


def log_action(message: str) -> OutcomeAction:
    return OutcomeAction(type="log", message=message)


@pytest.fixture
def conditional_pack():
    """
    One d6 table whose only entry makes a 1d10 conditional roll:
    5 or less spawns a trap, otherwise logs "clear"; then logs "done".
    """
    corridor = TableDefinition(
        table_id="corridor",
        name="Corridor",
        scope="dungeon",
        dice="1d6",
        entries=(
            TableEntry(
                min=1,
                max=6,
                actions=(
                    OutcomeAction(
                        type="conditional_roll",
                        dice="1d10",
                        threshold=5,
                        then_actions=(OutcomeAction(type="spawn_trap"),),
                        else_actions=(log_action("clear"),),
                    ),
                    log_action("done"),
                ),
            ),
        ),
    )
    return make_pack(corridor)


@pytest.fixture
def nested_pack():
    """An outer d6 table whose entry rolls twice on an inner d20 table."""
    outer = TableDefinition(
        table_id="outer",
        name="Outer",
        scope="test",
        dice="1d6",
        entries=(
            TableEntry(
                min=1,
                max=6,
                actions=(
                    OutcomeAction(type="roll_on_table", table_id="inner"),
                    OutcomeAction(type="roll_on_table", table_id="inner"),
                ),
            ),
        ),
    )
    inner = TableDefinition(
        table_id="inner",
        name="Inner",
        scope="test",
        dice="1d20",
        entries=(TableEntry(min=1, max=20, actions=(log_action("inner"),)),),
    )
    return make_pack(outer, inner)
