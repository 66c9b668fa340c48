# tests/conftest.py

from collections.abc import Callable

import pytest

from Rollcard import metrics
from Rollcard.config import CardSettings
from Rollcard.render import FieldRenderer
from Rollcard.rules.dice import (
    CompositeRoll,
    DieResult,
    DieTerm,
    NumericTerm,
    OperatorTerm,
    RollOptions,
)
from Rollcard.services.renderer import DataRenderer


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset_counters()
    yield
    metrics.reset_counters()


def _as_result(r: int | DieResult) -> DieResult:
    return r if isinstance(r, DieResult) else DieResult(r)


@pytest.fixture
def make_d20() -> Callable[..., CompositeRoll]:
    """Build a d20 composite roll from face values or DieResults plus a flat bonus."""

    def _make(
        *results: int | DieResult,
        bonus: int = 0,
        lucky: bool = False,
        is_critical: bool = False,
    ) -> CompositeRoll:
        rs = tuple(_as_result(r) for r in results)
        terms: list = [DieTerm(number=len(rs), faces=20, results=rs)]
        if bonus:
            terms += [OperatorTerm("+" if bonus > 0 else "-"), NumericTerm(abs(bonus))]
        return CompositeRoll.from_terms(
            terms, RollOptions(halfling_lucky=lucky), is_critical=is_critical
        )

    return _make


@pytest.fixture
def make_damage() -> Callable[..., CompositeRoll]:
    def _make(faces: int, *values: int, bonus: int = 0, is_critical: bool = False):
        terms: list = [
            DieTerm(number=len(values), faces=faces, results=tuple(DieResult(v) for v in values))
        ]
        if bonus:
            terms += [OperatorTerm("+"), NumericTerm(bonus)]
        return CompositeRoll.from_terms(terms, is_critical=is_critical)

    return _make


class RecordingTooltips:
    """Tooltip service that records every roll it was asked about."""

    def __init__(self) -> None:
        self.calls: list[CompositeRoll] = []

    async def get_tooltip(self, roll: CompositeRoll) -> str:
        self.calls.append(roll)
        return f"tip:{roll.formula}={roll.total}"


@pytest.fixture
def tooltips() -> RecordingTooltips:
    return RecordingTooltips()


@pytest.fixture
def field_renderer(tooltips) -> FieldRenderer:
    return FieldRenderer(DataRenderer(), tooltips=tooltips, settings=CardSettings())
