"""
Solo Oracle Engine - Main Entry Point

Command-line access to the oracle for solo TTRPG play: roll content-pack
tables, test scenes against the chaos factor, ask fate questions and
resolve skill checks, all on a reproducible seed and sequence stream.
"""

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from solo_oracle import __version__
from solo_oracle.campaign.campaign_engine import CampaignState, SoloCampaignEngine
from solo_oracle.data_models import new_session_seed
from solo_oracle.observability.run_log import RunLog
from solo_oracle.oracle.fate import FateLikelihood
from solo_oracle.oracle.scene_oracle import (
    CHAOS_DEFAULT,
    CHAOS_MAX,
    CHAOS_MIN,
    AlterationMethod,
    SceneType,
)
from solo_oracle.resolution.check_evaluator import build_check_request
from solo_oracle.tables.content_pack import (
    ContentPackError,
    DEFAULT_PACK_PATH,
    load_pack_or_raise,
)
from solo_oracle.tables.table_engine import TableEngine
from solo_oracle.tables.table_types import RollContext, TableExecution


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class SoloConfig:
    """Configuration for a command-line oracle session."""

    content_pack: Path = DEFAULT_PACK_PATH
    seed: Optional[int] = None
    sequence: int = 0
    chaos_factor: int = CHAOS_DEFAULT
    run_log_path: Optional[Path] = None
    verbose: bool = False

    def __post_init__(self):
        """Ensure paths are Path objects and chaos is in range."""
        if isinstance(self.content_pack, str):
            self.content_pack = Path(self.content_pack)
        if isinstance(self.run_log_path, str):
            self.run_log_path = Path(self.run_log_path)
        self.chaos_factor = max(CHAOS_MIN, min(CHAOS_MAX, self.chaos_factor))
        self.sequence = max(0, self.sequence)


# =============================================================================
# COMMANDS
# =============================================================================

def _campaign_for(config: SoloConfig) -> CampaignState:
    campaign = CampaignState(
        title="Command line",
        chaos_factor=config.chaos_factor,
        rng_seed=config.seed if config.seed is not None else new_session_seed(),
        rng_sequence=config.sequence,
    )
    return campaign


def format_execution(table_id: str, execution: TableExecution) -> str:
    """Render a table execution for the terminal."""
    lines = [f"=== {table_id} ==="]
    for result in execution.roll_results:
        lines.append(
            f"  [{result.sequence}] {result.table_id}: {result.roll} "
            f"-> {result.entry.min}-{result.entry.max}"
        )
    for node in execution.spawned_nodes:
        lines.append(f"  NODE {node.node_type}: {node.summary}")
    for edge in execution.spawned_edges:
        lines.append(f"  EDGE {edge.edge_type}: {edge.summary}")
    for trap in execution.spawned_traps:
        save = f", save {trap.save_skill} DC {trap.save_dc}" if trap.save_skill else ""
        lines.append(
            f"  TRAP {trap.category} ({trap.trigger}): {trap.effect} "
            f"[detect {trap.detection_skill} DC {trap.detection_dc}, "
            f"disarm {trap.disarm_skill} DC {trap.disarm_dc}{save}]"
        )
    for message in execution.logs:
        lines.append(f"  LOG {message}")
    return "\n".join(lines)


def cmd_tables(config: SoloConfig, args: argparse.Namespace, run_log: RunLog) -> str:
    pack = load_pack_or_raise(config.content_pack)
    engine = TableEngine(pack, run_log=run_log)
    lines = [f"Content pack {pack.pack_id} v{pack.version}:"]
    for table_id in engine.table_ids():
        table = engine.table(table_id)
        lines.append(f"  {table_id:<24} {table.dice:<6} {table.name} ({table.scope})")
    return "\n".join(lines)


def cmd_table(config: SoloConfig, args: argparse.Namespace, run_log: RunLog) -> str:
    pack = load_pack_or_raise(config.content_pack)
    engine = TableEngine(pack, run_log=run_log)
    campaign = _campaign_for(config)
    context = RollContext(campaign_id=campaign.campaign_id, tags=frozenset(args.tags or []))

    execution = SoloCampaignEngine(run_log=run_log).roll_table(campaign, engine, args.table_id, context)
    return (
        format_execution(args.table_id, execution)
        + f"\nseed {campaign.rng_seed} sequence {campaign.rng_sequence}"
    )


def cmd_scene(config: SoloConfig, args: argparse.Namespace, run_log: RunLog) -> str:
    method = None
    if args.alter is not None:
        method = AlterationMethod.from_name(args.alter)
        if method is None:
            choices = ", ".join(option.value for option in AlterationMethod)
            raise ValueError(f"Unknown alteration method {args.alter!r} (expected one of: {choices})")

    campaign = _campaign_for(config)
    engine = SoloCampaignEngine(run_log=run_log)
    record = engine.resolve_scene(campaign, args.expected)

    lines = [
        f"Scene: {record.expected_scene}",
        f"Roll {record.roll} vs chaos {record.chaos_factor}: {record.scene_type.title}",
    ]
    if record.random_event is not None:
        lines.append(f"Random event: {record.random_event}")
    elif record.scene_type == SceneType.ALTERED:
        if method is None:
            lines.append("Choose an alteration method to reshape the scene.")
        else:
            record = engine.apply_alteration_method(campaign, record, method)
            lines.append(f"Alteration: {method.label} - {method.guidance}")
            if record.alteration_detail:
                lines.append(f"Detail: {record.alteration_detail}")
    lines.append(f"seed {campaign.rng_seed} sequence {campaign.rng_sequence}")
    return "\n".join(lines)



def cmd_fate(config: SoloConfig, args: argparse.Namespace, run_log: RunLog) -> str:
    likelihood = FateLikelihood.from_name(args.likelihood)
    if likelihood is None:
        choices = ", ".join(option.value for option in FateLikelihood)
        raise ValueError(f"Unknown likelihood {args.likelihood!r} (expected one of: {choices})")

    campaign = _campaign_for(config)
    record = SoloCampaignEngine(run_log=run_log).resolve_fate_question(
        campaign, args.question, likelihood, roll=args.roll
    )
    return f"{record}\nseed {campaign.rng_seed} sequence {campaign.rng_sequence}"


def cmd_check(config: SoloConfig, args: argparse.Namespace, run_log: RunLog) -> str:
    request = build_check_request(
        check_type="contested_check" if args.contested else "skill_check",
        skill=args.skill,
        dc=args.dc,
        opponent_skill=args.opponent_skill,
        opponent_dc=args.opponent_dc,
        advantage_state=args.advantage,
        stakes=args.stakes,
        partial_success_dc=args.partial_dc,
        partial_success_outcome=args.partial_outcome,
    )
    if request is None:
        raise ValueError(f"Not a valid check: {args.skill!r}")

    engine = SoloCampaignEngine(run_log=run_log)
    if args.roll is not None:
        result = engine.evaluate_check(request, args.roll, args.modifier)
        return str(result)

    campaign = _campaign_for(config)
    record = engine.roll_check(campaign, request, modifier=args.modifier)
    return f"{record.d20}\n{record.result}\nseed {campaign.rng_seed} sequence {campaign.rng_sequence}"


COMMANDS = {
    "tables": cmd_tables,
    "table": cmd_table,
    "scene": cmd_scene,
    "fate": cmd_fate,
    "check": cmd_check,
}


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="solo-oracle",
        description="Solo Oracle Engine - seeded tables, scenes, fate and checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  solo-oracle tables                                  # List tables in the pack
  solo-oracle --seed 12345 table room_contents        # Roll a table
  solo-oracle --seed 12345 --chaos 6 scene "We reach the gate"
  solo-oracle --seed 12345 scene "We search the crypt" --alter meaning-words
  solo-oracle fate "Is the bridge guarded?" -l likely
  solo-oracle check Stealth --dc 15 --advantage advantage --modifier 3
        """
    )

    # General options
    parser.add_argument(
        "--pack",
        type=Path,
        default=DEFAULT_PACK_PATH,
        help="Content pack JSON file (default: bundled pack)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="RNG seed (default: a fresh random seed, printed with the result)",
    )
    parser.add_argument(
        "--sequence",
        type=int,
        default=0,
        help="Draws already consumed from the seed's stream (default: 0)",
    )
    parser.add_argument(
        "--chaos",
        type=int,
        default=CHAOS_DEFAULT,
        help=f"Chaos factor {CHAOS_MIN}-{CHAOS_MAX} (default: {CHAOS_DEFAULT})",
    )
    parser.add_argument(
        "--save-log",
        type=Path,
        help="Write the run log to this JSON file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("tables", help="List the tables in the content pack")

    table_parser = subparsers.add_parser("table", help="Roll on a table")
    table_parser.add_argument("table_id", help="Table id, e.g. room_contents")
    table_parser.add_argument("--tags", nargs="*", help="Context tags")

    scene_parser = subparsers.add_parser("scene", help="Test an expected scene against chaos")
    scene_parser.add_argument("expected", help="The scene you expect to happen")
    scene_parser.add_argument(
        "--alter",
        help="Alteration method to apply if the scene comes up altered (e.g. meaning-words)",
    )

    fate_parser = subparsers.add_parser("fate", help="Ask a yes/no fate question")
    fate_parser.add_argument("question", help="The yes/no question")
    fate_parser.add_argument(
        "-l", "--likelihood",
        default="50_50",
        help="impossible, unlikely, 50_50, likely, veryLikely, nearlyCertain (default: 50_50)",
    )
    fate_parser.add_argument("--roll", type=int, help="Use this d100 roll instead of rolling")

    check_parser = subparsers.add_parser("check", help="Resolve a d20 skill check")
    check_parser.add_argument("skill", help="Skill name, e.g. Stealth")
    check_parser.add_argument("--dc", type=int, help="Difficulty (snapped to 5/10/.../30)")
    check_parser.add_argument("--partial-dc", type=int, help="Partial success threshold")
    check_parser.add_argument("--partial-outcome", help="Text for a partial success")
    check_parser.add_argument("--stakes", default="", help="What failure looks like")
    check_parser.add_argument("--modifier", type=int, default=0, help="Modifier added to the roll")
    check_parser.add_argument(
        "--advantage",
        default="normal",
        choices=["advantage", "disadvantage", "normal"],
        help="Advantage state (default: normal)",
    )
    check_parser.add_argument("--contested", action="store_true", help="Contested check")
    check_parser.add_argument("--opponent-skill", help="Opposing skill for a contested check")
    check_parser.add_argument("--opponent-dc", type=int, help="Opponent difficulty")
    check_parser.add_argument("--roll", type=int, help="Use this d20 roll instead of rolling")

    return parser.parse_args(argv)


def create_config_from_args(args: argparse.Namespace) -> SoloConfig:
    """Create SoloConfig from parsed arguments."""
    return SoloConfig(
        content_pack=args.pack,
        seed=args.seed,
        sequence=args.sequence,
        chaos_factor=args.chaos,
        run_log_path=args.save_log,
        verbose=args.verbose,
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI usage."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    config = create_config_from_args(args)

    run_log = RunLog()
    if config.seed is not None:
        run_log.set_seed(config.seed)

    try:
        output = COMMANDS[args.command](config, args, run_log)
    except ContentPackError as e:
        logger.error(f"{e}: {'; '.join(e.errors)}")
        print(f"Error: {e}")
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        return 2

    print(output)

    if config.run_log_path is not None:
        run_log.save(str(config.run_log_path))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
