from __future__ import annotations

from dataclasses import dataclass

from .crits import CritType
from .dice import CompositeRoll


@dataclass(frozen=True)
class MultiRollEntry:
    """One logical d20 outcome of a composite roll."""

    roll: CompositeRoll
    total: int
    ignored: bool
    is_crit: bool
    crit_type: CritType
    d20_result: int | None = None


@dataclass(frozen=True)
class MultiRollResult:
    entries: tuple[MultiRollEntry, ...]
    formula: str
    tooltips: tuple[str, ...]
    bonus_total: int = 0
    bonus_tooltip: str | None = None


@dataclass(frozen=True)
class DamageRollPart:
    roll: CompositeRoll
    total: int
    crit_type: CritType
