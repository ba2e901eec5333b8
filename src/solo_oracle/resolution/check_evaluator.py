"""
Check evaluation for the solo oracle engine.

Implements d20 skill and contested checks:
- Skill check: total >= DC succeeds; total >= partial DC is a partial success
- Contested check: total >= opponent DC succeeds, no partial tier
- DCs are snapped to fixed bands by the caller before evaluation

build_check_request() is the caller-side helper that validates a loosely
specified check (skill and ability names, raw DCs) against a ruleset and
produces a well-formed CheckRequest.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from solo_oracle.data_models import DiceRoller

logger = logging.getLogger(__name__)


DEFAULT_DC = 10
MIN_PARTIAL_DC = 5
PARTIAL_DC_OFFSET = 5
SUCCESS_TEXT = "Success."
PARTIAL_SUCCESS_TEXT = "Partial success."


class CheckType(str, Enum):
    SKILL_CHECK = "skill_check"
    CONTESTED_CHECK = "contested_check"


class AdvantageState(str, Enum):
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"
    NORMAL = "normal"

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["AdvantageState"]:
        if name is None:
            return None
        normalized = name.strip().lower()
        for state in cls:
            if state.value == normalized:
                return state
        return None


class CheckOutcome(str, Enum):
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"


# =============================================================================
# RULESET
# =============================================================================


@dataclass(frozen=True)
class SkillDefinition:
    name: str
    default_ability: str


@dataclass(frozen=True)
class Ruleset:
    """Abilities, skills and DC bands a check request is validated against."""

    ruleset_id: str
    display_name: str
    abilities: tuple[str, ...]
    skills: tuple[SkillDefinition, ...]
    dc_bands: tuple[int, ...]
    contested_pairs: tuple[tuple[str, str], ...] = ()

    @property
    def skill_names(self) -> list[str]:
        return [skill.name for skill in self.skills]

    def find_skill(self, name: str) -> Optional[SkillDefinition]:
        """Case-insensitive skill lookup."""
        key = name.strip().lower()
        for skill in self.skills:
            if skill.name.lower() == key:
                return skill
        return None

    def find_ability(self, name: str) -> Optional[str]:
        key = name.strip().lower()
        for ability in self.abilities:
            if ability.lower() == key:
                return ability
        return None

    def default_ability(self, skill: str) -> Optional[str]:
        definition = self.find_skill(skill)
        return definition.default_ability if definition else None

    def opposing_skills(self, skill: str) -> list[str]:
        """Skills that can oppose the given one in a contested check."""
        key = skill.strip().lower()
        return [defender for attacker, defender in self.contested_pairs if attacker.lower() == key]


DC_BANDS = (5, 10, 15, 20, 25, 30)

DND_RULESET = Ruleset(
    ruleset_id="dnd_5e",
    display_name="D&D 5E",
    abilities=("Strength", "Dexterity", "Constitution", "Intelligence", "Wisdom", "Charisma"),
    skills=(
        SkillDefinition("Athletics", "Strength"),
        SkillDefinition("Acrobatics", "Dexterity"),
        SkillDefinition("Sleight of Hand", "Dexterity"),
        SkillDefinition("Stealth", "Dexterity"),
        SkillDefinition("Arcana", "Intelligence"),
        SkillDefinition("History", "Intelligence"),
        SkillDefinition("Investigation", "Intelligence"),
        SkillDefinition("Nature", "Intelligence"),
        SkillDefinition("Religion", "Intelligence"),
        SkillDefinition("Animal Handling", "Wisdom"),
        SkillDefinition("Insight", "Wisdom"),
        SkillDefinition("Medicine", "Wisdom"),
        SkillDefinition("Perception", "Wisdom"),
        SkillDefinition("Survival", "Wisdom"),
        SkillDefinition("Deception", "Charisma"),
        SkillDefinition("Intimidation", "Charisma"),
        SkillDefinition("Performance", "Charisma"),
        SkillDefinition("Persuasion", "Charisma"),
    ),
    dc_bands=DC_BANDS,
    contested_pairs=(
        ("Stealth", "Perception"),
        ("Deception", "Insight"),
        ("Persuasion", "Insight"),
        ("Athletics", "Athletics"),
        ("Acrobatics", "Acrobatics"),
    ),
)


def snap_dc(dc: Optional[int], bands: tuple[int, ...] = DC_BANDS) -> Optional[int]:
    """Nearest DC band; on a tie the lower band wins."""
    if dc is None:
        return None
    # min() keeps the first of equal keys and bands are ascending
    return min(bands, key=lambda band: abs(band - dc))


def default_partial_success_dc(dc: int) -> int:
    return max(MIN_PARTIAL_DC, dc - PARTIAL_DC_OFFSET)


# =============================================================================
# REQUEST / RESULT
# =============================================================================


@dataclass(frozen=True)
class CheckRequest:
    """A fully specified check, ready to roll."""

    check_type: CheckType
    skill_name: str
    ability_override: Optional[str] = None
    dc: Optional[int] = None
    opponent_skill: Optional[str] = None
    opponent_dc: Optional[int] = None
    advantage_state: AdvantageState = AdvantageState.NORMAL
    stakes: str = ""
    partial_success_dc: Optional[int] = None
    partial_success_outcome: Optional[str] = None
    reason: str = ""


@dataclass(frozen=True)
class CheckResult:
    total: int
    outcome: CheckOutcome
    consequence: str

    @property
    def success(self) -> bool:
        return self.outcome == CheckOutcome.SUCCESS

    def __str__(self) -> str:
        return f"{self.total}: {self.outcome.value} - {self.consequence}"


def evaluate_check(request: CheckRequest, roll: int, modifier: int) -> CheckResult:
    """
    Classify a rolled check.

    Args:
        request: The check being resolved
        roll: The d20 result (after advantage/disadvantage)
        modifier: Ability/skill modifier added to the roll

    Returns:
        CheckResult with total, outcome and consequence text
    """
    total = roll + modifier

    if request.check_type == CheckType.CONTESTED_CHECK:
        opponent_dc = request.opponent_dc if request.opponent_dc is not None else DEFAULT_DC
        outcome = CheckOutcome.SUCCESS if total >= opponent_dc else CheckOutcome.FAILURE
    else:
        dc = request.dc if request.dc is not None else DEFAULT_DC
        if total >= dc:
            outcome = CheckOutcome.SUCCESS
        elif request.partial_success_dc is not None and total >= request.partial_success_dc:
            outcome = CheckOutcome.PARTIAL_SUCCESS
        else:
            outcome = CheckOutcome.FAILURE

    if outcome == CheckOutcome.SUCCESS:
        consequence = SUCCESS_TEXT
    elif outcome == CheckOutcome.PARTIAL_SUCCESS:
        consequence = (
            request.partial_success_outcome
            if request.partial_success_outcome is not None
            else PARTIAL_SUCCESS_TEXT
        )
    else:
        consequence = request.stakes

    logger.debug(f"{request.skill_name} check: {roll} + {modifier} = {total} -> {outcome.value}")
    return CheckResult(total=total, outcome=outcome, consequence=consequence)


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


def build_check_request(
    check_type: str,
    skill: str,
    requires_roll: bool = True,
    ability_override: Optional[str] = None,
    dc: Optional[int] = None,
    opponent_skill: Optional[str] = None,
    opponent_dc: Optional[int] = None,
    advantage_state: Optional[str] = None,
    stakes: str = "",
    partial_success_dc: Optional[int] = None,
    partial_success_outcome: Optional[str] = None,
    reason: str = "",
    ruleset: Ruleset = DND_RULESET,
) -> Optional[CheckRequest]:
    """
    Turn a loosely specified check into a CheckRequest.

    Returns None when no roll is needed, or when the check type or skill is
    not recognised. An unknown ability override or advantage state is
    dropped rather than rejected. DCs are snapped to the ruleset's bands;
    a missing DC defaults to 10. When partial-success text is given without
    a partial DC, the partial DC defaults to five below the DC (minimum 5).
    """
    if not requires_roll:
        return None

    try:
        kind = CheckType(check_type.strip())
    except ValueError:
        logger.debug(f"Unknown check type: {check_type!r}")
        return None

    skill_definition = ruleset.find_skill(skill) if skill.strip() else None
    if skill_definition is None:
        logger.debug(f"Skill not in ruleset {ruleset.ruleset_id}: {skill!r}")
        return None

    override = _clean(ability_override)
    valid_override = ruleset.find_ability(override) if override else None
    advantage = AdvantageState.from_name(advantage_state) or AdvantageState.NORMAL

    snapped_dc = snap_dc(dc, ruleset.dc_bands)
    snapped_opponent_dc = snap_dc(opponent_dc, ruleset.dc_bands)
    partial_outcome = _clean(partial_success_outcome)

    partial_dc = snap_dc(partial_success_dc, ruleset.dc_bands)
    if partial_dc is None and snapped_dc is not None and partial_outcome:
        partial_dc = default_partial_success_dc(snapped_dc)

    is_skill_check = kind == CheckType.SKILL_CHECK
    return CheckRequest(
        check_type=kind,
        skill_name=skill_definition.name,
        ability_override=valid_override,
        dc=(snapped_dc if snapped_dc is not None else DEFAULT_DC) if is_skill_check else None,
        opponent_skill=None if is_skill_check else _clean(opponent_skill),
        opponent_dc=None if is_skill_check else (
            snapped_opponent_dc if snapped_opponent_dc is not None else DEFAULT_DC
        ),
        advantage_state=advantage,
        stakes=stakes.strip(),
        partial_success_dc=partial_dc,
        partial_success_outcome=partial_outcome,
        reason=reason.strip(),
    )


# =============================================================================
# ROLLING
# =============================================================================


@dataclass(frozen=True)
class D20Roll:
    """A d20 roll, with both dice when rolled with advantage or disadvantage."""

    rolls: tuple[int, ...]
    kept: int
    advantage_state: AdvantageState = AdvantageState.NORMAL

    def __str__(self) -> str:
        if len(self.rolls) == 1:
            return f"d20: {self.kept}"
        return f"d20 ({self.advantage_state.value}): {list(self.rolls)} -> {self.kept}"


def roll_d20(advantage_state: AdvantageState, dice_roller: "DiceRoller") -> D20Roll:
    """Roll 1d20, or 2d20 keeping the higher (advantage) or lower (disadvantage)."""
    first = dice_roller.roll("1d20").total
    if advantage_state == AdvantageState.NORMAL:
        return D20Roll(rolls=(first,), kept=first)

    second = dice_roller.roll("1d20").total
    if advantage_state == AdvantageState.ADVANTAGE:
        kept = max(first, second)
    else:
        kept = min(first, second)
    return D20Roll(rolls=(first, second), kept=kept, advantage_state=advantage_state)
