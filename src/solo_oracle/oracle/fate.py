"""
Fate questions: yes/no answers from a likelihood and the chaos factor.

Each likelihood has a base percentile; chaos above or below the midpoint
shifts it by 5 per step, and the result is clamped to 5..95 so no answer
is ever certain.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
import re


FATE_TARGET_MIN = 5
FATE_TARGET_MAX = 95
CHAOS_MIDPOINT = 5
CHAOS_STEP = 5


def _squash(name: str) -> str:
    return re.sub(r"[\s/_-]", "", name).lower()


class FateLikelihood(str, Enum):
    """How likely a yes answer is before chaos is applied."""
    IMPOSSIBLE = "impossible"
    UNLIKELY = "unlikely"
    FIFTY_FIFTY = "50_50"
    LIKELY = "likely"
    VERY_LIKELY = "veryLikely"
    NEARLY_CERTAIN = "nearlyCertain"

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["FateLikelihood"]:
        """
        Look up a likelihood by name.

        Case, spaces, "/", "-" and "_" are ignored, so "50/50", "50-50",
        "very-likely" and "NEARLY_CERTAIN" all resolve. Returns None for
        anything else.
        """
        if name is None:
            return None
        wanted = _squash(name)
        for likelihood in cls:
            if _squash(likelihood.value) == wanted:
                return likelihood
        return None


FATE_BASE_TARGETS = {
    FateLikelihood.IMPOSSIBLE: 5,
    FateLikelihood.UNLIKELY: 25,
    FateLikelihood.FIFTY_FIFTY: 50,
    FateLikelihood.LIKELY: 70,
    FateLikelihood.VERY_LIKELY: 85,
    FateLikelihood.NEARLY_CERTAIN: 95,
}


class FateAnswer(str, Enum):
    YES = "yes"
    NO = "no"


def fate_target(likelihood: FateLikelihood, chaos_factor: int) -> int:
    """Percentile a d100 must roll at or under for a yes."""
    base = FATE_BASE_TARGETS[likelihood]
    modifier = (chaos_factor - CHAOS_MIDPOINT) * CHAOS_STEP
    return max(FATE_TARGET_MIN, min(FATE_TARGET_MAX, base + modifier))


def resolve_fate(roll: int, target: int) -> FateAnswer:
    return FateAnswer.YES if roll <= target else FateAnswer.NO


@dataclass(frozen=True)
class FateQuestionRecord:
    """A resolved fate question, as stored with a scene."""

    question: str
    likelihood: FateLikelihood
    chaos_factor: int
    roll: int
    target: int
    outcome: FateAnswer

    @property
    def is_yes(self) -> bool:
        return self.outcome == FateAnswer.YES

    def __str__(self) -> str:
        return (
            f"Fate ({self.likelihood.value}, CF {self.chaos_factor}): "
            f"{self.roll} vs {self.target} => {self.outcome.value.upper()}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "likelihood": self.likelihood.value,
            "chaos_factor": self.chaos_factor,
            "roll": self.roll,
            "target": self.target,
            "outcome": self.outcome.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FateQuestionRecord":
        return cls(
            question=data.get("question", ""),
            likelihood=FateLikelihood(data["likelihood"]),
            chaos_factor=data["chaos_factor"],
            roll=data["roll"],
            target=data["target"],
            outcome=FateAnswer(data["outcome"]),
        )


def ask_fate(
    question: str,
    likelihood: FateLikelihood,
    chaos_factor: int,
    roll: int,
) -> FateQuestionRecord:
    """Resolve a fate question against an already-rolled percentile."""
    target = fate_target(likelihood, chaos_factor)
    return FateQuestionRecord(
        question=question,
        likelihood=likelihood,
        chaos_factor=chaos_factor,
        roll=roll,
        target=target,
        outcome=resolve_fate(roll, target),
    )
