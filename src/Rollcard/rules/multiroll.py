"""Split a composite d20 roll into independent sub-roll entries.

Each physical d20 of the primary die group becomes one entry, except under
the halfling-lucky rule where a natural 1 and the die rolled to replace it
form a single logical outcome. Every entry is totalled on its own: its
isolated die total plus the shared total of all bonus terms.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import replace
from typing import cast

import structlog

from Rollcard.errors import MalformedRollInput

from .crits import classify_die
from .dice import CompositeRoll, DieResult, DieTerm
from .tooltips import TooltipService, gather_tooltips
from .types import MultiRollEntry, MultiRollResult

log = structlog.get_logger()


def _outcomes(
    results: Sequence[DieResult], lucky: bool
) -> Iterator[tuple[DieResult, tuple[DieResult, ...]]]:
    """Yield (triggering result, contributing results) per logical outcome."""
    cursor = 0
    while cursor < len(results):
        trigger = results[cursor]
        group = [trigger]
        cursor += 1
        if lucky and trigger.value == 1:
            if cursor >= len(results):
                raise MalformedRollInput(
                    f"lucky reroll of result {cursor - 1} has no companion die"
                )
            group.append(results[cursor])
            cursor += 1
        yield trigger, tuple(group)


def _build_entry(
    roll: CompositeRoll,
    primary: DieTerm,
    trigger: DieResult,
    group: tuple[DieResult, ...],
    bonus_total: int,
    d20_icons: bool,
) -> MultiRollEntry:
    contributing = tuple(replace(r, active=not r.rerolled) for r in group)
    term = DieTerm(number=1, faces=primary.faces, results=contributing)
    isolated = CompositeRoll.from_terms([term], roll.options)
    return MultiRollEntry(
        roll=isolated,
        total=isolated.total + bonus_total,
        ignored=any(r.discarded for r in contributing),
        is_crit=roll.is_critical,
        crit_type=classify_die(term, roll.options),
        d20_result=trigger.value if d20_icons else None,
    )


async def process_multiroll(
    roll: CompositeRoll,
    *,
    tooltips: TooltipService,
    d20_icons: bool = False,
) -> MultiRollResult:
    idx = roll.primary_index(20)
    if idx is None:
        raise MalformedRollInput(f"roll '{roll.formula}' has no d20 die group")
    primary = cast(DieTerm, roll.terms[idx])

    bonus_terms = roll.terms[idx + 1 :]
    bonus_roll = CompositeRoll.from_terms(bonus_terms, roll.options) if bonus_terms else None
    bonus_total = bonus_roll.total if bonus_roll is not None else 0

    lucky = roll.options.halfling_lucky
    entries = [
        _build_entry(roll, primary, trigger, group, bonus_total, d20_icons)
        for trigger, group in _outcomes(primary.results, lucky)
    ]

    *entry_tips, bonus_tip = await gather_tooltips(
        tooltips, [e.roll for e in entries] + [bonus_roll]
    )
    log.debug(
        "rules.multiroll.processed",
        formula=roll.formula,
        entries=len(entries),
        bonus_total=bonus_total,
        lucky=lucky,
    )
    return MultiRollResult(
        entries=tuple(entries),
        formula=roll.formula,
        tooltips=tuple(t or "" for t in entry_tips),
        bonus_total=bonus_total,
        bonus_tooltip=bonus_tip,
    )
