"""Roll model and card processors."""  # noqa: N999

from .crits import CritType, classify, classify_die, classify_roll
from .dice import (
    CompositeRoll,
    DiceRNG,
    DieResult,
    DieTerm,
    NumericTerm,
    OperatorTerm,
    RollOptions,
)
from .labels import PlacementConfig, compute_damage_labels
from .multiroll import process_multiroll
from .types import DamageRollPart, MultiRollEntry, MultiRollResult

__all__ = [
    "CompositeRoll",
    "CritType",
    "DamageRollPart",
    "DiceRNG",
    "DieResult",
    "DieTerm",
    "MultiRollEntry",
    "MultiRollResult",
    "NumericTerm",
    "OperatorTerm",
    "PlacementConfig",
    "RollOptions",
    "classify",
    "classify_die",
    "classify_roll",
    "compute_damage_labels",
    "process_multiroll",
]
