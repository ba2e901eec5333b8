"""Content pack loader for the solo oracle engine.

Loads table packs from JSON. The bundled default pack lives in
`solo_oracle/tables/data/solo_default_tables.json`.

Pack format:
    {
      "id": "solo_default",
      "version": "0.1",
      "tables": [
        {
          "id": "room_contents",
          "name": "Room Contents",
          "scope": "dungeon",
          "dice": "d10",
          "entries": [
            { "min": 1, "max": 4, "actions": [ { "type": "log", "message": "..." } ] },
            { "min": 5, "max": 6, "actions": [ { "type": "roll_on_table", "table_id": "trap_variants" } ] }
          ]
        }
      ]
    }

camelCase keys ("diceSpec", "nodeType", "thenActions", ...) and camelCase
action types ("spawnNode", "rollOnTable", ...) are accepted as well and
normalized to snake_case.

A malformed table, entry or action is skipped and reported in the result's
`errors`; it never aborts the rest of the pack.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from solo_oracle.tables.table_types import (
    ContentPack,
    OutcomeAction,
    TableDefinition,
    TableEntry,
)

logger = logging.getLogger(__name__)


DEFAULT_PACK_PATH = Path(__file__).parent / "data" / "solo_default_tables.json"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# camelCase keys whose snake_case form is not a plain boundary split
_KEY_ALIASES = {
    "id": "id",
    "diceSpec": "dice",
    "dice_spec": "dice",
    "detectionDC": "detection_dc",
    "disarmDC": "disarm_dc",
    "saveDC": "save_dc",
}


class ContentPackError(Exception):
    """Raised by load_pack_or_raise when a pack cannot be used."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


def _snake(name: str) -> str:
    """Normalize a camelCase key or action type to snake_case."""
    if name in _KEY_ALIASES:
        return _KEY_ALIASES[name]
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _normalize_keys(obj: dict[str, Any]) -> dict[str, Any]:
    return {_snake(str(k)): v for k, v in obj.items()}


# =============================================================================
# RESULT DATACLASSES
# =============================================================================

@dataclass
class ContentPackLoadResult:
    success: bool = False
    pack: Optional[ContentPack] = None
    file_path: Optional[Path] = None
    tables_loaded: int = 0
    tables_failed: int = 0
    errors: list[str] = field(default_factory=list)


# =============================================================================
# PARSING
# =============================================================================

def parse_content_pack(raw: Any) -> ContentPackLoadResult:
    """
    Build a ContentPack from decoded JSON.

    The result is successful when the top level is an object, even if some
    of its tables were skipped; check `errors` for what was dropped.
    """
    result = ContentPackLoadResult()

    if not isinstance(raw, dict):
        result.errors.append("Content pack is not an object")
        return result

    obj = _normalize_keys(raw)
    pack_id = str(obj.get("id") or obj.get("pack_id") or "").strip()
    if not pack_id:
        pack_id = "unnamed"
        result.errors.append("Content pack has no id; using 'unnamed'")
    version = str(obj.get("version") or "0")

    tables_raw = obj.get("tables") or []
    if not isinstance(tables_raw, list):
        result.errors.append("'tables' is not a list")
        tables_raw = []

    tables: list[TableDefinition] = []
    for index, table_obj in enumerate(tables_raw):
        try:
            tables.append(_parse_table(table_obj, result.errors))
            result.tables_loaded += 1
        except (TypeError, ValueError) as e:
            result.tables_failed += 1
            result.errors.append(f"Table #{index}: {e}")

    for error in result.errors:
        logger.warning(f"Content pack {pack_id}: {error}")

    result.pack = ContentPack(pack_id=pack_id, version=version, tables=tuple(tables))
    result.success = True
    return result


def _parse_table(obj: Any, errors: list[str]) -> TableDefinition:
    if not isinstance(obj, dict):
        raise ValueError("table is not an object")
    obj = _normalize_keys(obj)

    table_id = str(obj.get("id") or obj.get("table_id") or "").strip()
    if not table_id:
        raise ValueError("missing required field: id")
    dice = obj.get("dice")
    if not isinstance(dice, str) or not dice.strip():
        raise ValueError(f"table {table_id} has no dice notation")

    entries: list[TableEntry] = []
    for index, entry_obj in enumerate(obj.get("entries") or []):
        try:
            entries.append(_parse_entry(entry_obj, table_id, errors))
        except (TypeError, ValueError) as e:
            errors.append(f"Table {table_id} entry #{index} skipped: {e}")

    return TableDefinition(
        table_id=table_id,
        name=str(obj.get("name") or table_id),
        scope=str(obj.get("scope") or ""),
        dice=dice.strip(),
        entries=tuple(entries),
    )


def _parse_entry(obj: Any, table_id: str, errors: list[str]) -> TableEntry:
    if not isinstance(obj, dict):
        raise ValueError("entry is not an object")
    obj = _normalize_keys(obj)

    if "min" not in obj or "max" not in obj:
        raise ValueError("missing min/max")
    low = _as_int(obj["min"], "min")
    high = _as_int(obj["max"], "max")

    return TableEntry(
        min=low,
        max=high,
        actions=_parse_actions(obj.get("actions") or [], table_id, errors),
    )


def _parse_actions(items: Any, table_id: str, errors: list[str]) -> tuple[OutcomeAction, ...]:
    if not isinstance(items, list):
        errors.append(f"Table {table_id}: actions is not a list")
        return ()

    actions: list[OutcomeAction] = []
    for item in items:
        try:
            actions.append(_parse_action(item, table_id, errors))
        except (TypeError, ValueError) as e:
            errors.append(f"Table {table_id} action skipped: {e}")
    return tuple(actions)


def _parse_action(obj: Any, table_id: str, errors: list[str]) -> OutcomeAction:
    if not isinstance(obj, dict):
        raise ValueError("action is not an object")
    obj = _normalize_keys(obj)

    action_type = str(obj.get("type") or "").strip()
    if not action_type:
        raise ValueError("action has no type")

    tags = obj.get("tags") or []
    if not isinstance(tags, list):
        raise ValueError("tags is not a list")

    return OutcomeAction(
        type=_snake(action_type),
        node_type=_opt_str(obj.get("node_type")),
        edge_type=_opt_str(obj.get("edge_type")),
        summary=_opt_str(obj.get("summary")),
        tags=tuple(str(t) for t in tags),
        category=_opt_str(obj.get("category")),
        trigger=_opt_str(obj.get("trigger")),
        detection_skill=_opt_str(obj.get("detection_skill")),
        detection_dc=_opt_int(obj.get("detection_dc"), "detection_dc"),
        disarm_skill=_opt_str(obj.get("disarm_skill")),
        disarm_dc=_opt_int(obj.get("disarm_dc"), "disarm_dc"),
        save_skill=_opt_str(obj.get("save_skill")),
        save_dc=_opt_int(obj.get("save_dc"), "save_dc"),
        effect=_opt_str(obj.get("effect")),
        table_id=_opt_str(obj.get("table_id")),
        dice=_opt_str(obj.get("dice")),
        threshold=_opt_int(obj.get("threshold"), "threshold"),
        then_actions=_parse_actions(obj.get("then_actions") or [], table_id, errors),
        else_actions=_parse_actions(obj.get("else_actions") or [], table_id, errors),
        message=_opt_str(obj.get("message")),
    )


def _as_int(value: Any, name: str) -> int:
    # bool is an int subclass but never a valid range bound
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def _opt_int(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    return _as_int(value, name)


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


# =============================================================================
# LOADER
# =============================================================================

class ContentPackLoader:
    """Loads content packs from JSON files."""

    def load_file(self, file_path: Path) -> ContentPackLoadResult:
        file_path = Path(file_path)

        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            result = ContentPackLoadResult(file_path=file_path)
            result.errors.append(f"Failed to read JSON: {e}")
            logger.warning(f"Could not load content pack {file_path}: {e}")
            return result

        result = parse_content_pack(raw)
        result.file_path = file_path
        if result.pack is not None:
            logger.info(
                f"Loaded content pack {result.pack.pack_id} v{result.pack.version} "
                f"from {file_path}: {result.tables_loaded} tables, {result.tables_failed} failed"
            )
        return result


def load_default_pack() -> ContentPack:
    """Return the bundled dungeon/NPC table pack."""
    return load_pack_or_raise(DEFAULT_PACK_PATH)


def load_pack_or_raise(file_path: Path) -> ContentPack:
    """Load a pack file, raising ContentPackError if it cannot be used."""
    result = ContentPackLoader().load_file(file_path)
    if not result.success or result.pack is None:
        raise ContentPackError(f"Could not load content pack {file_path}", result.errors)
    return result.pack
