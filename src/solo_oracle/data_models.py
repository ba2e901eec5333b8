"""
Shared data structures for the solo oracle engine.

Holds the deterministic random source and the dice roller that every
other subsystem draws from. The mix constants and draw order below are
part of the public contract: a seed and a sequence cursor must reproduce
the same stream on every platform, forever.
"""

from dataclasses import dataclass
from typing import Optional
import logging
import re
import secrets

logger = logging.getLogger(__name__)


# =============================================================================
# RANDOM SOURCE
# =============================================================================

MASK_64 = 0xFFFFFFFFFFFFFFFF
GOLDEN_GAMMA = 0x9E3779B97F4A7C15
MIX_MULTIPLIER_1 = 0xBF58476D1CE4E5B9
MIX_MULTIPLIER_2 = 0x94D049BB133111EB


class SeededRNG:
    """
    Splittable 64-bit generator (golden-ratio increment, two xorshift/multiply rounds).

    A seed of zero would start a degenerate stream, so it is remapped to
    the golden-ratio constant.
    """

    def __init__(self, seed: int):
        seed &= MASK_64
        self._state = seed if seed != 0 else GOLDEN_GAMMA

    @property
    def state(self) -> int:
        return self._state

    def next(self) -> int:
        """Advance the state and return the next 64-bit value."""
        self._state = (self._state + GOLDEN_GAMMA) & MASK_64
        z = self._state
        z = ((z ^ (z >> 30)) * MIX_MULTIPLIER_1) & MASK_64
        z = ((z ^ (z >> 27)) * MIX_MULTIPLIER_2) & MASK_64
        return z ^ (z >> 31)

    def next_bounded(self, upper_bound: int) -> int:
        """Return an integer in [0, upper_bound) by modulo of the raw value."""
        if upper_bound <= 0:
            raise ValueError(f"upper_bound must be positive, got {upper_bound}")
        return self.next() % upper_bound


# =============================================================================
# DICE
# =============================================================================


_INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_int(text: str) -> Optional[int]:
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)


@dataclass(frozen=True)
class DiceSpec:
    """Parsed `<count>d<sides>[+<modifier>]` notation."""

    count: int
    sides: int
    modifier: int = 0

    @classmethod
    def parse(cls, text: str) -> Optional["DiceSpec"]:
        """
        Parse dice notation, returning None when it is malformed.

        The count defaults to 1 when omitted or unreadable and an unreadable
        modifier counts as 0. Missing or non-positive sides, or a negative
        count, make the whole notation malformed.
        """
        normalized = text.strip().lower()
        parts = normalized.split("d", 1)
        if len(parts) != 2:
            return None

        count = _parse_int(parts[0]) if parts[0] else 1
        if count is None:
            count = 1

        sides_part, _, modifier_part = parts[1].partition("+")
        sides = _parse_int(sides_part)
        modifier = _parse_int(modifier_part) if modifier_part else 0
        if modifier is None:
            modifier = 0

        if sides is None or sides < 1 or count < 0:
            return None
        return cls(count=count, sides=sides, modifier=modifier)

    def __str__(self) -> str:
        if self.modifier:
            return f"{self.count}d{self.sides}+{self.modifier}"
        return f"{self.count}d{self.sides}"


FALLBACK_DICE = DiceSpec(count=1, sides=100, modifier=0)


def new_session_seed() -> int:
    """Fresh 64-bit seed for a session that was not given one."""
    return secrets.randbits(64)


@dataclass(frozen=True)
class DiceRoll:
    """Result of a dice roll with full information."""

    notation: str
    rolls: tuple[int, ...]
    modifier: int
    total: int

    def __str__(self) -> str:
        if self.modifier > 0:
            return f"{self.notation}: {list(self.rolls)} + {self.modifier} = {self.total}"
        elif self.modifier < 0:
            return f"{self.notation}: {list(self.rolls)} - {abs(self.modifier)} = {self.total}"
        return f"{self.notation}: {list(self.rolls)} = {self.total}"


class DiceRoller:
    """
    Seeded dice roller with a resumable sequence cursor.

    Constructing a roller with `(seed, sequence)` replays `sequence` draws,
    so a session persisted mid-stream resumes exactly where it stopped.
    Every die drawn advances the cursor by one.
    """

    def __init__(self, seed: int, sequence: int = 0):
        self._seed = seed & MASK_64
        self._rng = SeededRNG(seed)
        self._sequence = max(0, sequence)
        for _ in range(self._sequence):
            self._rng.next()

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def sequence(self) -> int:
        """Number of draws consumed from this seed's stream so far."""
        return self._sequence

    def roll(self, notation: str) -> DiceRoll:
        """
        Roll dice using `<count>d<sides>[+<modifier>]` notation.

        Malformed notation never errors; it is rolled as 1d100 while the
        result keeps the caller's notation text.

        Args:
            notation: Dice notation string, e.g. "d6", "2d6+3"

        Returns:
            DiceRoll with individual dice, modifier and total
        """
        spec = DiceSpec.parse(notation)
        if spec is None:
            logger.debug(f"Malformed dice notation {notation!r}, rolling {FALLBACK_DICE}")
            spec = FALLBACK_DICE

        rolls = []
        for _ in range(spec.count):
            rolls.append(self._rng.next_bounded(spec.sides) + 1)
            self._sequence += 1

        total = sum(rolls) + spec.modifier
        return DiceRoll(
            notation=notation,
            rolls=tuple(rolls),
            modifier=spec.modifier,
            total=total,
        )

    def randint(self, low: int, high: int) -> int:
        """Return an integer in [low, high] using exactly one draw."""
        if high < low:
            raise ValueError(f"Empty range: {low}-{high}")
        value = self._rng.next_bounded(high - low + 1) + low
        self._sequence += 1
        return value

    def roll_d10(self) -> int:
        return self.roll("1d10").total

    def roll_d20(self) -> int:
        return self.roll("1d20").total

    def roll_percentile(self) -> int:
        """Roll d100 for percentile checks."""
        return self.roll("1d100").total
