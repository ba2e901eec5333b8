"""
Run Log system for session event tracking.

Captures dice rolls, table lookups, and oracle decisions (scene
classification, chaos changes, fate questions, checks) so a session can be
audited and its roll stream compared against a replay of the same seed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Callable
import json
import logging

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events that can be logged."""

    ROLL = "roll"  # Dice roll
    TABLE_LOOKUP = "table_lookup"  # Table roll/lookup
    ORACLE = "oracle"  # Scene, chaos, fate or check decision
    CUSTOM = "custom"  # Custom event


class OracleEventKind(str, Enum):
    """What kind of oracle decision an OracleEvent records."""

    SCENE = "scene"
    CHAOS = "chaos"
    FATE = "fate"
    CHECK = "check"
    RANDOM_EVENT = "random_event"


def _common_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "timestamp": datetime.fromisoformat(data["timestamp"]),
        "sequence_number": data.get("sequence_number", 0),
        "context": data.get("context", {}),
    }


@dataclass
class LogEvent:
    """Base class for all logged events."""

    # Defaulted so subclasses may declare defaulted fields; each subclass
    # pins its own type in __post_init__.
    event_type: EventType = EventType.CUSTOM
    timestamp: datetime = field(default_factory=datetime.now)
    sequence_number: int = 0
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "sequence_number": self.sequence_number,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEvent":
        return cls(event_type=EventType(data["event_type"]), **_common_fields(data))


@dataclass
class RollEvent(LogEvent):
    """One draw (or group of draws) from the dice stream."""

    notation: str = ""
    rolls: list[int] = field(default_factory=list)
    modifier: int = 0
    total: int = 0
    reason: str = ""
    seed: Optional[int] = None
    stream_sequence: Optional[int] = None  # cursor once the roll is taken

    def __post_init__(self):
        self.event_type = EventType.ROLL

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "notation": self.notation,
            "rolls": self.rolls,
            "modifier": self.modifier,
            "total": self.total,
            "reason": self.reason,
            "seed": self.seed,
            "stream_sequence": self.stream_sequence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RollEvent":
        return cls(
            notation=data.get("notation", ""),
            rolls=data.get("rolls", []),
            modifier=data.get("modifier", 0),
            total=data.get("total", 0),
            reason=data.get("reason", ""),
            seed=data.get("seed"),
            stream_sequence=data.get("stream_sequence"),
            **_common_fields(data),
        )

    def __str__(self) -> str:
        mod = ""
        if self.modifier:
            sign = "+" if self.modifier > 0 else "-"
            mod = f" {sign} {abs(self.modifier)}"
        return (
            f"[{self.sequence_number}] ROLL {self.notation}: "
            f"{self.rolls}{mod} = {self.total} ({self.reason})"
        )


@dataclass
class TableLookupEvent(LogEvent):
    """Which entry of a table a roll landed on."""

    table_id: str = ""
    table_name: str = ""
    roll_total: int = 0
    entry_min: int = 0
    entry_max: int = 0
    fallback: bool = False  # nothing matched, first entry used

    def __post_init__(self):
        self.event_type = EventType.TABLE_LOOKUP

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "table_id": self.table_id,
            "table_name": self.table_name,
            "roll_total": self.roll_total,
            "entry_min": self.entry_min,
            "entry_max": self.entry_max,
            "fallback": self.fallback,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TableLookupEvent":
        return cls(
            table_id=data.get("table_id", ""),
            table_name=data.get("table_name", ""),
            roll_total=data.get("roll_total", 0),
            entry_min=data.get("entry_min", 0),
            entry_max=data.get("entry_max", 0),
            fallback=data.get("fallback", False),
            **_common_fields(data),
        )

    def __str__(self) -> str:
        suffix = " (fallback)" if self.fallback else ""
        return (
            f"[{self.sequence_number}] TABLE {self.table_name} [{self.roll_total}]: "
            f"entry {self.entry_min}-{self.entry_max}{suffix}"
        )


@dataclass
class OracleEvent(LogEvent):
    """A scene, chaos, fate or check decision."""

    kind: OracleEventKind = OracleEventKind.SCENE
    summary: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.event_type = EventType.ORACLE

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "kind": self.kind.value,
            "summary": self.summary,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OracleEvent":
        return cls(
            kind=OracleEventKind(data.get("kind", OracleEventKind.SCENE.value)),
            summary=data.get("summary", ""),
            details=data.get("details", {}),
            **_common_fields(data),
        )

    def __str__(self) -> str:
        return f"[{self.sequence_number}] {self.kind.value.upper()} {self.summary}"


_EVENT_CLASSES: dict[EventType, type[LogEvent]] = {
    EventType.ROLL: RollEvent,
    EventType.TABLE_LOOKUP: TableLookupEvent,
    EventType.ORACLE: OracleEvent,
}


class RunLog:
    """
    Ordered record of everything a session drew from the dice stream.

    Engines take an optional RunLog and stay silent without one;
    get_run_log() hands out a process-wide instance for callers that want
    a single shared log.
    """

    def __init__(self):
        self._subscribers: list[Callable[[LogEvent], None]] = []
        self._paused = False
        self._clear()

    def _clear(self) -> None:
        self._events: list[LogEvent] = []
        self._sequence = 0
        self._seed: Optional[int] = None
        self._session_start = datetime.now()

    def reset(self) -> None:
        """Drop all events and the seed; subscribers stay attached."""
        self._clear()
        logger.info("RunLog reset")

    def set_seed(self, seed: int) -> None:
        self._seed = seed
        logger.info(f"RunLog seed set: {seed}")

    def get_seed(self) -> Optional[int]:
        return self._seed

    def pause(self) -> None:
        """Stop recording until resume(); paused events are dropped, not queued."""
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def is_paused(self) -> bool:
        return self._paused

    def subscribe(self, callback: Callable[[LogEvent], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[LogEvent], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _record(self, event: LogEvent) -> LogEvent:
        if self._paused:
            return event

        self._sequence += 1
        event.sequence_number = self._sequence
        self._events.append(event)

        for notify in list(self._subscribers):
            try:
                notify(event)
            except Exception as e:
                logger.warning(f"RunLog subscriber {notify!r} failed: {e}")
        return event

    def log_roll(
        self,
        notation: str,
        rolls: list[int],
        modifier: int,
        total: int,
        reason: str = "",
        seed: Optional[int] = None,
        stream_sequence: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> RollEvent:
        event = RollEvent(
            notation=notation,
            rolls=list(rolls),
            modifier=modifier,
            total=total,
            reason=reason,
            seed=seed,
            stream_sequence=stream_sequence,
            context=dict(context or {}),
        )
        return self._record(event)

    def log_table_lookup(
        self,
        table_id: str,
        table_name: str,
        roll_total: int,
        entry_min: int,
        entry_max: int,
        fallback: bool = False,
        context: Optional[dict[str, Any]] = None,
    ) -> TableLookupEvent:
        event = TableLookupEvent(
            table_id=table_id,
            table_name=table_name,
            roll_total=roll_total,
            entry_min=entry_min,
            entry_max=entry_max,
            fallback=fallback,
            context=dict(context or {}),
        )
        return self._record(event)

    def log_oracle(
        self,
        kind: OracleEventKind,
        summary: str,
        details: Optional[dict[str, Any]] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> OracleEvent:
        """Record a scene, chaos, fate, check or random-event decision."""
        event = OracleEvent(
            kind=kind,
            summary=summary,
            details=dict(details or {}),
            context=dict(context or {}),
        )
        return self._record(event)

    def log_custom(self, event_name: str, details: dict[str, Any]) -> LogEvent:
        return self._record(LogEvent(context={"event_name": event_name, **details}))

    def get_events(
        self,
        event_type: Optional[EventType] = None,
        since_sequence: int = 0,
    ) -> list[LogEvent]:
        """
        Events in the order they were recorded.

        Args:
            event_type: Only events of this type (None = all)
            since_sequence: Only events numbered after this
        """
        return [
            e
            for e in self._events
            if e.sequence_number > since_sequence and (event_type is None or e.event_type == event_type)
        ]

    def _of_class(self, event_class: type) -> list:
        return [e for e in self._events if isinstance(e, event_class)]

    def get_rolls(self) -> list[RollEvent]:
        return self._of_class(RollEvent)

    def get_table_lookups(self) -> list[TableLookupEvent]:
        return self._of_class(TableLookupEvent)

    def get_oracle_events(self, kind: Optional[OracleEventKind] = None) -> list[OracleEvent]:
        return [e for e in self._of_class(OracleEvent) if kind is None or e.kind == kind]

    def get_roll_stream(self) -> list[dict[str, Any]]:
        """
        The dice stream as plain dicts, for comparing a session to its replay.

        Timestamps and reasons are left out; two runs from the same seed
        produce equal streams.
        """
        keys = ("notation", "rolls", "modifier", "total", "stream_sequence")
        return [{key: getattr(roll, key) for key in keys} for roll in self.get_rolls()]

    def get_event_count(self) -> int:
        return len(self._events)

    def get_summary(self) -> dict[str, Any]:
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "total_events": len(self._events),
            "rolls": len(self.get_rolls()),
            "table_lookups": len(self.get_table_lookups()),
            "oracle_events": len(self.get_oracle_events()),
            "last_sequence": self._sequence,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_start": self._session_start.isoformat(),
            "seed": self._seed,
            "sequence": self._sequence,
            "events": [e.to_dict() for e in self._events],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def save(self, filepath: str) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_json())
        logger.info(f"RunLog saved to {filepath} ({len(self._events)} events)")

    @classmethod
    def load(cls, filepath: str) -> "RunLog":
        """Rebuild a log written by save(), restoring each event's concrete class."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        log = cls()
        log._session_start = datetime.fromisoformat(data["session_start"])
        log._seed = data.get("seed")
        log._sequence = data.get("sequence", 0)
        for event_data in data.get("events", []):
            event_class = _EVENT_CLASSES.get(EventType(event_data["event_type"]), LogEvent)
            log._events.append(event_class.from_dict(event_data))

        logger.info(f"RunLog loaded from {filepath}: {len(log._events)} events")
        return log

    def format_log(
        self,
        event_types: Optional[list[EventType]] = None,
        max_events: Optional[int] = None,
    ) -> str:
        """Render the log as text, one event per line under a short header."""
        events = [e for e in self._events if not event_types or e.event_type in event_types]
        if max_events:
            events = events[-max_events:]

        seed = self._seed if self._seed is not None else "not set"
        header = [
            "=== Run Log ===",
            f"Session: {self._session_start.isoformat()}",
            f"Seed: {seed}",
            f"Total Events: {len(self._events)}",
            "",
        ]
        return "\n".join(header + [str(e) for e in events])


_shared_log: Optional[RunLog] = None


def get_run_log() -> RunLog:
    """Process-wide RunLog, created on first use."""
    global _shared_log
    if _shared_log is None:
        _shared_log = RunLog()
    return _shared_log


def reset_run_log() -> RunLog:
    log = get_run_log()
    log.reset()
    return log
