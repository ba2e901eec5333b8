"""
Observability for the solo oracle engine.

Provides a run log of rolls, table lookups and oracle decisions that
engines record into when one is attached.
"""

from solo_oracle.observability.run_log import (
    RunLog,
    LogEvent,
    EventType,
    OracleEventKind,
    RollEvent,
    TableLookupEvent,
    OracleEvent,
    get_run_log,
    reset_run_log,
)

__all__ = [
    "RunLog",
    "LogEvent",
    "EventType",
    "OracleEventKind",
    "RollEvent",
    "TableLookupEvent",
    "OracleEvent",
    "get_run_log",
    "reset_run_log",
]
