"""Critical classification for single dice and whole rolls."""

from __future__ import annotations

from enum import Enum

from .dice import CompositeRoll, DieTerm, RollOptions


class CritType(str, Enum):
    NONE = "none"
    SUCCESS = "success"
    FAILURE = "failure"


def classify(
    value: int,
    faces: int = 20,
    *,
    critical: int | None = None,
    fumble: int | None = None,
) -> CritType:
    """Classify one face value against natural max/min (or explicit thresholds)."""
    try:
        if value >= (critical if critical is not None else faces):
            return CritType.SUCCESS
        if value <= (fumble if fumble is not None else 1):
            return CritType.FAILURE
    except TypeError:
        return CritType.NONE
    return CritType.NONE


def classify_die(term: DieTerm | None, options: RollOptions | None = None) -> CritType:
    """Classify a die group by its active results; a success outranks a failure."""
    if term is None:
        return CritType.NONE
    opts = options or RollOptions()
    seen = {
        classify(
            r.value,
            term.faces,
            critical=opts.critical_threshold,
            fumble=opts.fumble_threshold,
        )
        for r in term.results
        if r.active
    }
    if CritType.SUCCESS in seen:
        return CritType.SUCCESS
    if CritType.FAILURE in seen:
        return CritType.FAILURE
    return CritType.NONE


def classify_roll(roll: CompositeRoll | None) -> CritType:
    """Classify an aggregate roll: its own critical flag, else a natural minimum
    on any active result of its primary die group."""
    if roll is None:
        return CritType.NONE
    if roll.is_critical:
        return CritType.SUCCESS
    dice = roll.dice
    if not dice:
        return CritType.NONE
    fumble = roll.options.fumble_threshold or 1
    if any(r.active and r.value <= fumble for r in dice[0].results):
        return CritType.FAILURE
    return CritType.NONE
