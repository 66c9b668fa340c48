"""Tooltip generation: the expandable per-die breakdown shown under a roll."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Protocol

import structlog

from Rollcard.errors import TooltipGenerationFailure
from Rollcard.metrics import inc_counter, observe_histogram

from .dice import CompositeRoll, DieResult, DieTerm

log = structlog.get_logger()


class TooltipService(Protocol):
    async def get_tooltip(self, roll: CompositeRoll) -> str: ...


def _format_result(r: DieResult) -> str:
    text = str(r.value)
    if r.rerolled:
        text += "r"
    if r.discarded:
        text += "d"
    return text


class PlainTooltipService:
    """Default tooltip service: one text line per die group.

    Example: ``1d20r1=1: [1r, 15] = 15``. Results marked ``r`` were
    rerolled, ``d`` were discarded; neither counts towards the total.
    """

    async def get_tooltip(self, roll: CompositeRoll) -> str:
        if not roll.terms:
            return ""
        lines = []
        for term in roll.terms:
            if not isinstance(term, DieTerm):
                continue
            faces = ", ".join(_format_result(r) for r in term.results)
            lines.append(f"{term.formula}: [{faces}] = {term.total}")
        if not lines:
            lines.append(f"{roll.formula} = {roll.total}")
        return "\n".join(lines)


async def gather_tooltips(
    service: TooltipService, rolls: Sequence[CompositeRoll | None]
) -> list[str | None]:
    """Request a tooltip for every roll at once and wait for all of them.

    Absent rolls yield ``None`` in their position. Any failure from the
    service is raised as TooltipGenerationFailure once every other pending
    request has been cancelled and awaited; nothing is retried.
    """
    start = time.perf_counter()

    async def _one(roll: CompositeRoll | None) -> str | None:
        if roll is None:
            return None
        return await service.get_tooltip(roll)

    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(_one(r)) for r in rolls]
    except ExceptionGroup as eg:
        # The group has already cancelled and awaited every sibling request
        exc = eg.exceptions[0]
        inc_counter("tooltips.failed")
        log.warning(
            "tooltips.failed", error=str(exc), failures=len(eg.exceptions), count=len(rolls)
        )
        raise TooltipGenerationFailure(f"tooltip generation failed: {exc}") from exc
    observe_histogram("tooltips.gather_ms", int((time.perf_counter() - start) * 1000))
    return [t.result() for t in tasks]
