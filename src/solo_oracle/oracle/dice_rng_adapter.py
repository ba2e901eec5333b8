"""
randint/choice facade over the seeded dice stream.

The scene oracle only needs two calls from an RNG. Routing them
through a DiceRoller keeps oracle draws on the same
seed and cursor as table rolls, so a saved (seed, sequence) pair resumes
or replays a session exactly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence
import logging

if TYPE_CHECKING:
    from solo_oracle.data_models import DiceRoller
    from solo_oracle.observability.run_log import RunLog

logger = logging.getLogger(__name__)


class DiceRngAdapter:
    """
    Adapter exposing randint(a, b) and choice(seq) over a DiceRoller.

    Each call consumes exactly one draw from the roller's stream.

    Usage:
        from solo_oracle.data_models import DiceRoller
        from solo_oracle.oracle.dice_rng_adapter import DiceRngAdapter
        from solo_oracle.oracle.scene_oracle import SceneOracle

        adapter = DiceRngAdapter(DiceRoller(seed=12345), reason_prefix="SceneOracle")
        oracle = SceneOracle(rng=adapter)
    """

    def __init__(
        self,
        dice_roller: "DiceRoller",
        reason_prefix: str = "Oracle",
        run_log: Optional["RunLog"] = None,
    ):
        """
        Initialize the adapter.

        Args:
            dice_roller: Roller whose stream every draw comes from
            reason_prefix: Prefix for roll reason logging (e.g., "SceneOracle")
            run_log: Optional run log that records each draw
        """
        self._dice_roller = dice_roller
        self._reason_prefix = reason_prefix
        self._run_log = run_log
        self._roll_count = 0

    @property
    def dice_roller(self) -> "DiceRoller":
        return self._dice_roller

    @property
    def sequence(self) -> int:
        """Stream cursor of the wrapped roller."""
        return self._dice_roller.sequence

    @property
    def seed(self) -> int:
        return self._dice_roller.seed

    def _make_reason(self, context: str) -> str:
        """Create a reason string for logging."""
        self._roll_count += 1
        return f"{self._reason_prefix}: {context} (roll #{self._roll_count})"

    def _record(self, low: int, high: int, value: int, reason: str) -> None:
        logger.debug(f"{reason} -> {value}")
        if self._run_log is not None:
            notation = f"1d{high}" if low == 1 else f"range({low}-{high})"
            self._run_log.log_roll(
                notation=notation,
                rolls=[value],
                modifier=0,
                total=value,
                reason=reason,
                seed=self._dice_roller.seed,
                stream_sequence=self._dice_roller.sequence,
            )

    def randint(self, a: int, b: int) -> int:
        """Inclusive integer in [a, b]; one draw."""
        reason = self._make_reason(f"d{b - a + 1}" if a == 1 else f"range({a}-{b})")
        value = self._dice_roller.randint(a, b)
        self._record(a, b, value, reason)
        return value

    def choice(self, seq: Sequence[Any]) -> Any:
        """Pick one element of a non-empty sequence; one draw. Empty raises IndexError."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")

        reason = self._make_reason(f"choice from {len(seq)} options")
        index = self._dice_roller.randint(0, len(seq) - 1)
        self._record(0, len(seq) - 1, index, reason)
        return seq[index]

    @property
    def roll_count(self) -> int:
        return self._roll_count

    def reset_count(self) -> None:
        self._roll_count = 0
