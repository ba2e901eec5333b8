"""
Check resolution for the solo oracle engine.
"""

from solo_oracle.resolution.check_evaluator import (
    CheckType,
    AdvantageState,
    CheckOutcome,
    CheckRequest,
    CheckResult,
    SkillDefinition,
    Ruleset,
    DND_RULESET,
    DC_BANDS,
    D20Roll,
    snap_dc,
    default_partial_success_dc,
    evaluate_check,
    build_check_request,
    roll_d20,
)

__all__ = [
    "CheckType",
    "AdvantageState",
    "CheckOutcome",
    "CheckRequest",
    "CheckResult",
    "SkillDefinition",
    "Ruleset",
    "DND_RULESET",
    "DC_BANDS",
    "D20Roll",
    "snap_dc",
    "default_partial_success_dc",
    "evaluate_check",
    "build_check_request",
    "roll_d20",
]
