"""
Solo campaign engine: scene-by-scene session bookkeeping.

Drives one campaign through the oracle loop:
1. resolve_scene: roll d10 against chaos, classify, draw a random event on interrupt
2. apply_alteration_method: reshape an altered scene
3. resolve_fate_question / roll_check / roll_table during play
4. finalize_scene: update characters and threads, move chaos, record the scene

Every roll comes from the campaign's own seed and sequence cursor, and the
cursor is written back after each step, so a saved campaign resumes its
stream exactly.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional, Sequence
import logging
import uuid

from solo_oracle.campaign.weighted_list import WeightedEntity, WeightedList
from solo_oracle.data_models import DiceRoller, new_session_seed
from solo_oracle.observability.run_log import OracleEventKind, RunLog
from solo_oracle.oracle.dice_rng_adapter import DiceRngAdapter
from solo_oracle.oracle.fate import FateLikelihood, FateQuestionRecord, ask_fate
from solo_oracle.oracle.scene_oracle import (
    CHAOS_DEFAULT,
    DEFAULT_WORD_LISTS,
    AlterationMethod,
    RandomEvent,
    RandomEventFocus,
    SceneAdjustment,
    SceneOracle,
    SceneType,
    WordLists,
    update_chaos_factor,
)
from solo_oracle.resolution.check_evaluator import (
    DND_RULESET,
    CheckRequest,
    CheckResult,
    D20Roll,
    Ruleset,
    evaluate_check,
    roll_d20,
)
from solo_oracle.tables.table_engine import TableEngine
from solo_oracle.tables.table_types import RollContext, TableExecution

logger = logging.getLogger(__name__)


# =============================================================================
# CAMPAIGN RECORDS
# =============================================================================


@dataclass
class CharacterEntry(WeightedEntity):
    """A recurring character in the campaign's character list."""


@dataclass
class ThreadEntry(WeightedEntity):
    """An open story thread in the campaign's thread list."""


@dataclass
class SceneRecord:
    """A scene in progress, before bookkeeping is applied."""

    scene_number: int
    expected_scene: str
    roll: int
    chaos_factor: int
    scene_type: SceneType
    alteration_method: Optional[AlterationMethod] = None
    alteration_detail: Optional[str] = None
    random_event: Optional[RandomEvent] = None


@dataclass
class SkillCheckRecord:
    """A check rolled during a scene."""

    request: CheckRequest
    d20: D20Roll
    modifier: int
    result: CheckResult
    player_action: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_action": self.player_action,
            "check_type": self.request.check_type.value,
            "skill": self.request.skill_name,
            "ability_override": self.request.ability_override,
            "dc": self.request.dc,
            "opponent_skill": self.request.opponent_skill,
            "opponent_dc": self.request.opponent_dc,
            "advantage_state": self.request.advantage_state.value,
            "stakes": self.request.stakes,
            "partial_success_dc": self.request.partial_success_dc,
            "partial_success_outcome": self.request.partial_success_outcome,
            "reason": self.request.reason,
            "rolls": list(self.d20.rolls),
            "roll_result": self.d20.kept,
            "modifier": self.modifier,
            "total": self.result.total,
            "outcome": self.result.outcome.value,
            "consequence": self.result.consequence,
        }


@dataclass
class BookkeepingInput:
    """What the player reports at the end of a scene."""

    summary: str = ""
    new_characters: list[str] = field(default_factory=list)
    new_threads: list[str] = field(default_factory=list)
    featured_characters: list[str] = field(default_factory=list)
    featured_threads: list[str] = field(default_factory=list)
    removed_characters: list[str] = field(default_factory=list)
    removed_threads: list[str] = field(default_factory=list)
    pcs_in_control: bool = True
    concluded: bool = False
    skill_checks: list[SkillCheckRecord] = field(default_factory=list)
    fate_questions: list[FateQuestionRecord] = field(default_factory=list)
    places: list[str] = field(default_factory=list)
    curiosities: list[str] = field(default_factory=list)
    roll_highlights: list[str] = field(default_factory=list)


@dataclass
class SceneEntry:
    """A finished scene as stored in the campaign history."""

    scene_number: int
    intent: str
    roll: int
    chaos_factor: int
    scene_type: str
    summary: str = ""
    alteration_method: Optional[str] = None
    alteration_detail: Optional[str] = None
    random_event_focus: Optional[str] = None
    meaning_word_1: Optional[str] = None
    meaning_word_2: Optional[str] = None
    characters_added: list[str] = field(default_factory=list)
    characters_featured: list[str] = field(default_factory=list)
    characters_removed: list[str] = field(default_factory=list)
    threads_added: list[str] = field(default_factory=list)
    threads_featured: list[str] = field(default_factory=list)
    threads_removed: list[str] = field(default_factory=list)
    pcs_in_control: bool = True
    concluded: bool = False
    skill_checks: list[dict[str, Any]] = field(default_factory=list)
    fate_questions: list[FateQuestionRecord] = field(default_factory=list)
    places: list[str] = field(default_factory=list)
    curiosities: list[str] = field(default_factory=list)
    roll_highlights: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scene_number": self.scene_number,
            "intent": self.intent,
            "roll": self.roll,
            "chaos_factor": self.chaos_factor,
            "scene_type": self.scene_type,
            "summary": self.summary,
            "alteration_method": self.alteration_method,
            "alteration_detail": self.alteration_detail,
            "random_event_focus": self.random_event_focus,
            "meaning_word_1": self.meaning_word_1,
            "meaning_word_2": self.meaning_word_2,
            "characters_added": self.characters_added,
            "characters_featured": self.characters_featured,
            "characters_removed": self.characters_removed,
            "threads_added": self.threads_added,
            "threads_featured": self.threads_featured,
            "threads_removed": self.threads_removed,
            "pcs_in_control": self.pcs_in_control,
            "concluded": self.concluded,
            "skill_checks": self.skill_checks,
            "fate_questions": [q.to_dict() for q in self.fate_questions],
            "places": self.places,
            "curiosities": self.curiosities,
            "roll_highlights": self.roll_highlights,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneEntry":
        return cls(
            scene_number=data["scene_number"],
            intent=data.get("intent", ""),
            roll=data["roll"],
            chaos_factor=data["chaos_factor"],
            scene_type=data["scene_type"],
            summary=data.get("summary", ""),
            alteration_method=data.get("alteration_method"),
            alteration_detail=data.get("alteration_detail"),
            random_event_focus=data.get("random_event_focus"),
            meaning_word_1=data.get("meaning_word_1"),
            meaning_word_2=data.get("meaning_word_2"),
            characters_added=data.get("characters_added", []),
            characters_featured=data.get("characters_featured", []),
            characters_removed=data.get("characters_removed", []),
            threads_added=data.get("threads_added", []),
            threads_featured=data.get("threads_featured", []),
            threads_removed=data.get("threads_removed", []),
            pcs_in_control=data.get("pcs_in_control", True),
            concluded=data.get("concluded", False),
            skill_checks=data.get("skill_checks", []),
            fate_questions=[FateQuestionRecord.from_dict(q) for q in data.get("fate_questions", [])],
            places=data.get("places", []),
            curiosities=data.get("curiosities", []),
            roll_highlights=data.get("roll_highlights", []),
            created_at=(
                datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now()
            ),
        )


@dataclass
class TableRollRecord:
    """Audit record of one die roll made by a table execution."""

    table_id: str
    entry_range: str
    dice: str
    roll_total: int
    modifier: int
    seed: int
    sequence: int
    context_summary: str
    outcome_summary: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "table_id": self.table_id,
            "entry_range": self.entry_range,
            "dice": self.dice,
            "roll_total": self.roll_total,
            "modifier": self.modifier,
            "seed": self.seed,
            "sequence": self.sequence,
            "context_summary": self.context_summary,
            "outcome_summary": self.outcome_summary,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TableRollRecord":
        return cls(
            table_id=data["table_id"],
            entry_range=data["entry_range"],
            dice=data["dice"],
            roll_total=data["roll_total"],
            modifier=data.get("modifier", 0),
            seed=data["seed"],
            sequence=data["sequence"],
            context_summary=data.get("context_summary", ""),
            outcome_summary=data.get("outcome_summary", ""),
            timestamp=(
                datetime.fromisoformat(data["timestamp"]) if data.get("timestamp") else datetime.now()
            ),
        )


@dataclass
class CampaignState:
    """Everything a solo campaign persists between sessions."""

    campaign_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    title: str = "Solo Campaign"
    chaos_factor: int = CHAOS_DEFAULT
    scene_number: int = 1
    characters: WeightedList[CharacterEntry] = field(
        default_factory=lambda: WeightedList(factory=CharacterEntry)
    )
    threads: WeightedList[ThreadEntry] = field(
        default_factory=lambda: WeightedList(factory=ThreadEntry)
    )
    scenes: list[SceneEntry] = field(default_factory=list)
    rng_seed: Optional[int] = None
    rng_sequence: int = 0
    table_rolls: list[TableRollRecord] = field(default_factory=list)
    content_pack_version: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaign_id": self.campaign_id,
            "title": self.title,
            "chaos_factor": self.chaos_factor,
            "scene_number": self.scene_number,
            "characters": self.characters.to_list(),
            "threads": self.threads.to_list(),
            "scenes": [scene.to_dict() for scene in self.scenes],
            "rng_seed": self.rng_seed,
            "rng_sequence": self.rng_sequence,
            "table_rolls": [record.to_dict() for record in self.table_rolls],
            "content_pack_version": self.content_pack_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignState":
        return cls(
            campaign_id=data.get("campaign_id") or uuid.uuid4().hex,
            title=data.get("title", "Solo Campaign"),
            chaos_factor=data.get("chaos_factor", CHAOS_DEFAULT),
            scene_number=data.get("scene_number", 1),
            characters=WeightedList.from_list(data.get("characters", []), factory=CharacterEntry),
            threads=WeightedList.from_list(data.get("threads", []), factory=ThreadEntry),
            scenes=[SceneEntry.from_dict(s) for s in data.get("scenes", [])],
            rng_seed=data.get("rng_seed"),
            rng_sequence=data.get("rng_sequence", 0),
            table_rolls=[TableRollRecord.from_dict(r) for r in data.get("table_rolls", [])],
            content_pack_version=data.get("content_pack_version"),
        )


# =============================================================================
# ENGINE
# =============================================================================


class SoloCampaignEngine:
    """
    Runs the scene loop for solo campaigns.

    The engine is stateless across campaigns: all mutable state lives on the
    CampaignState passed into each call.
    """

    def __init__(
        self,
        word_lists: WordLists = DEFAULT_WORD_LISTS,
        focus_options: Optional[Sequence[RandomEventFocus]] = None,
        ruleset: Ruleset = DND_RULESET,
        run_log: Optional[RunLog] = None,
    ):
        self.word_lists = word_lists
        self.focus_options = focus_options
        self.ruleset = ruleset
        self.run_log = run_log

    # -------------------------------------------------------------------------
    # Stream handling
    # -------------------------------------------------------------------------

    def _ensure_seed(self, campaign: CampaignState) -> int:
        if campaign.rng_seed is None:
            campaign.rng_seed = new_session_seed()
            campaign.rng_sequence = 0
            logger.info(f"Campaign {campaign.campaign_id} assigned seed {campaign.rng_seed}")
            if self.run_log is not None:
                self.run_log.set_seed(campaign.rng_seed)
        return campaign.rng_seed

    def _roller(self, campaign: CampaignState) -> DiceRoller:
        return DiceRoller(self._ensure_seed(campaign), campaign.rng_sequence)

    def _oracle(self, roller: DiceRoller) -> SceneOracle:
        adapter = DiceRngAdapter(roller, reason_prefix="SceneOracle", run_log=self.run_log)
        return SceneOracle(rng=adapter, word_lists=self.word_lists, focus_options=self.focus_options)

    def _log_oracle(self, kind: OracleEventKind, summary: str, details: dict[str, Any]) -> None:
        if self.run_log is not None:
            self.run_log.log_oracle(kind, summary, details)

    # -------------------------------------------------------------------------
    # Scene loop
    # -------------------------------------------------------------------------

    def resolve_scene(self, campaign: CampaignState, expected_scene: str) -> SceneRecord:
        """
        Test the expected scene against the chaos factor.

        Rolls a d10 from the campaign stream; on an interrupt, also draws a
        random event. The campaign's sequence cursor is advanced.
        """
        roller = self._roller(campaign)
        oracle = self._oracle(roller)

        roll = oracle.roll_d10()
        scene_type = oracle.classify_scene(campaign.chaos_factor, roll)
        record = SceneRecord(
            scene_number=campaign.scene_number,
            expected_scene=expected_scene,
            roll=roll,
            chaos_factor=campaign.chaos_factor,
            scene_type=scene_type,
        )
        if scene_type == SceneType.INTERRUPT:
            record.random_event = oracle.generate_random_event()

        campaign.rng_sequence = roller.sequence

        logger.info(
            f"Scene {record.scene_number}: rolled {roll} vs chaos {record.chaos_factor} "
            f"-> {scene_type.value}"
        )
        self._log_oracle(
            OracleEventKind.SCENE,
            f"Scene {record.scene_number} {scene_type.title} ({roll} vs CF {record.chaos_factor})",
            {
                "scene_number": record.scene_number,
                "roll": roll,
                "chaos_factor": record.chaos_factor,
                "scene_type": scene_type.value,
                "random_event": record.random_event.to_dict() if record.random_event else None,
            },
        )
        if record.random_event is not None:
            self._log_oracle(
                OracleEventKind.RANDOM_EVENT,
                str(record.random_event),
                record.random_event.to_dict(),
            )
        return record

    def apply_alteration_method(
        self,
        campaign: CampaignState,
        scene: SceneRecord,
        method: AlterationMethod,
        adjustment: SceneAdjustment = SceneAdjustment.RAISE_STAKES,
    ) -> SceneRecord:
        """
        Return a copy of the scene with an alteration method applied.

        Meaning words are drawn from the campaign stream and recorded as
        "first / second"; a scene adjustment records its label. Other methods
        carry no detail.
        """
        detail: Optional[str] = None
        if method == AlterationMethod.MEANING_WORDS:
            roller = self._roller(campaign)
            words = self._oracle(roller).generate_meaning_words()
            campaign.rng_sequence = roller.sequence
            detail = str(words)
        elif method == AlterationMethod.SCENE_ADJUSTMENT:
            detail = adjustment.label

        logger.debug(f"Scene {scene.scene_number} altered by {method.label}: {detail}")
        return replace(scene, alteration_method=method, alteration_detail=detail)

    def resolve_fate_question(
        self,
        campaign: CampaignState,
        question: str,
        likelihood: FateLikelihood,
        roll: Optional[int] = None,
    ) -> FateQuestionRecord:
        """Answer a yes/no question, rolling d100 from the stream if no roll is given."""
        if roll is None:
            roller = self._roller(campaign)
            roll = self._oracle(roller).roll_d100()
            campaign.rng_sequence = roller.sequence

        record = ask_fate(question, likelihood, campaign.chaos_factor, roll)
        logger.info(str(record))
        self._log_oracle(OracleEventKind.FATE, str(record), record.to_dict())
        return record

    def evaluate_check(self, request: CheckRequest, roll: int, modifier: int) -> CheckResult:
        return evaluate_check(request, roll, modifier)

    def roll_check(
        self,
        campaign: CampaignState,
        request: CheckRequest,
        modifier: int = 0,
        player_action: str = "",
    ) -> SkillCheckRecord:
        """Roll a d20 (with advantage state) from the stream and evaluate the check."""
        roller = self._roller(campaign)
        d20 = roll_d20(request.advantage_state, roller)
        campaign.rng_sequence = roller.sequence

        result = evaluate_check(request, d20.kept, modifier)
        self._log_oracle(
            OracleEventKind.CHECK,
            f"{request.skill_name} {d20} + {modifier} -> {result.outcome.value}",
            {"rolls": list(d20.rolls), "kept": d20.kept, "modifier": modifier, "total": result.total},
        )
        return SkillCheckRecord(
            request=request,
            d20=d20,
            modifier=modifier,
            result=result,
            player_action=player_action,
        )

    def roll_table(
        self,
        campaign: CampaignState,
        engine: TableEngine,
        table_id: str,
        context: Optional[RollContext] = None,
    ) -> TableExecution:
        """
        Execute a table on the campaign stream and record every roll.

        The campaign's sequence cursor moves to the execution's final sequence.
        """
        seed = self._ensure_seed(campaign)
        if context is None:
            context = RollContext(campaign_id=campaign.campaign_id)

        execution = engine.execute(table_id, context, seed, campaign.rng_sequence)

        tags = ", ".join(sorted(context.tags))
        context_summary = f"Location {context.location_id or 'n/a'} tags: {tags}"
        for result in execution.roll_results:
            campaign.table_rolls.append(
                TableRollRecord(
                    table_id=result.table_id,
                    entry_range=f"{result.entry.min}-{result.entry.max}",
                    dice=result.roll.notation,
                    roll_total=result.total,
                    modifier=result.roll.modifier,
                    seed=result.seed,
                    sequence=result.sequence,
                    context_summary=context_summary,
                    outcome_summary="Actions: " + ", ".join(a.type for a in result.entry.actions),
                )
            )

        campaign.rng_sequence = execution.final_sequence
        campaign.content_pack_version = engine.content_pack.version
        return execution

    def finalize_scene(
        self,
        campaign: CampaignState,
        scene: SceneRecord,
        bookkeeping: BookkeepingInput,
    ) -> SceneEntry:
        """
        Apply end-of-scene bookkeeping and record the scene.

        Lists are updated new, then featured, then removed. Chaos moves one
        step. The scene number advances unless the campaign concluded.
        """
        for entries, new, featured, removed in (
            (campaign.characters, bookkeeping.new_characters,
             bookkeeping.featured_characters, bookkeeping.removed_characters),
            (campaign.threads, bookkeeping.new_threads,
             bookkeeping.featured_threads, bookkeeping.removed_threads),
        ):
            entries.add_new(new)
            entries.feature_existing(featured)
            entries.remove(removed)

        old_chaos = campaign.chaos_factor
        campaign.chaos_factor = update_chaos_factor(old_chaos, bookkeeping.pcs_in_control)
        if campaign.chaos_factor != old_chaos:
            logger.info(f"Chaos factor {old_chaos} -> {campaign.chaos_factor}")
            self._log_oracle(
                OracleEventKind.CHAOS,
                f"Chaos {old_chaos} -> {campaign.chaos_factor}",
                {"from": old_chaos, "to": campaign.chaos_factor, "pcs_in_control": bookkeeping.pcs_in_control},
            )

        event = scene.random_event
        entry = SceneEntry(
            scene_number=scene.scene_number,
            intent=scene.expected_scene,
            roll=scene.roll,
            chaos_factor=scene.chaos_factor,
            scene_type=scene.scene_type.value,
            summary=bookkeeping.summary,
            alteration_method=scene.alteration_method.label if scene.alteration_method else None,
            alteration_detail=scene.alteration_detail,
            random_event_focus=event.focus.value if event else None,
            meaning_word_1=event.meaning_words.first if event else None,
            meaning_word_2=event.meaning_words.second if event else None,
            characters_added=list(bookkeeping.new_characters),
            characters_featured=list(bookkeeping.featured_characters),
            characters_removed=list(bookkeeping.removed_characters),
            threads_added=list(bookkeeping.new_threads),
            threads_featured=list(bookkeeping.featured_threads),
            threads_removed=list(bookkeeping.removed_threads),
            pcs_in_control=bookkeeping.pcs_in_control,
            concluded=bookkeeping.concluded,
            skill_checks=[check.to_dict() for check in bookkeeping.skill_checks],
            fate_questions=list(bookkeeping.fate_questions),
            places=list(bookkeeping.places),
            curiosities=list(bookkeeping.curiosities),
            roll_highlights=list(bookkeeping.roll_highlights),
        )
        campaign.scenes.append(entry)

        if not bookkeeping.concluded:
            campaign.scene_number += 1

        logger.info(
            f"Scene {entry.scene_number} finalized: chaos {old_chaos} -> {campaign.chaos_factor}, "
            f"{len(campaign.characters)} characters, {len(campaign.threads)} threads"
        )
        return entry
