# rules/dice.py

from __future__ import annotations

import random
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

import structlog

_DICE_RE = re.compile(r"^\s*(?P<count>\d+)?d(?P<sides>\d+)\s*(?P<mod>[+\-]\s*\d+)?\s*$")


@dataclass(frozen=True)
class DieResult:
    value: int
    active: bool = True
    discarded: bool = False
    rerolled: bool = False


@dataclass(frozen=True)
class DieTerm:
    number: int
    faces: int
    results: tuple[DieResult, ...] = ()
    modifiers: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return sum(r.value for r in self.results if r.active)

    @property
    def formula(self) -> str:
        return f"{self.number}d{self.faces}" + "".join(self.modifiers)


@dataclass(frozen=True)
class NumericTerm:
    value: int

    @property
    def total(self) -> int:
        return self.value

    @property
    def formula(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OperatorTerm:
    operator: str

    @property
    def total(self) -> int:
        return 0

    @property
    def formula(self) -> str:
        return self.operator


Term = DieTerm | NumericTerm | OperatorTerm


@dataclass(frozen=True)
class RollOptions:
    halfling_lucky: bool = False
    # None means natural maximum / natural minimum of the die
    critical_threshold: int | None = None
    fumble_threshold: int | None = None


@dataclass(frozen=True)
class CompositeRoll:
    terms: tuple[Term, ...]
    options: RollOptions = field(default_factory=RollOptions)
    is_critical: bool = False

    @classmethod
    def from_terms(
        cls,
        terms: Iterable[Term],
        options: RollOptions | None = None,
        *,
        is_critical: bool = False,
    ) -> CompositeRoll:
        return cls(terms=tuple(terms), options=options or RollOptions(), is_critical=is_critical)

    @property
    def dice(self) -> list[DieTerm]:
        return [t for t in self.terms if isinstance(t, DieTerm)]

    @property
    def formula(self) -> str:
        return " ".join(t.formula for t in self.terms)

    @property
    def total(self) -> int:
        total = 0
        sign = 1
        for term in self.terms:
            if isinstance(term, OperatorTerm):
                sign = -1 if term.operator == "-" else 1
                continue
            total += sign * term.total
            sign = 1
        return total

    def primary_index(self, faces: int = 20) -> int | None:
        """Index in ``terms`` of the first die group with the given face count."""
        for i, term in enumerate(self.terms):
            if isinstance(term, DieTerm) and term.faces == faces:
                return i
        return None


def _keep_one(results: Sequence[DieResult], *, highest: bool) -> list[DieResult]:
    """Mark every active result except the kept one as discarded."""
    active = [i for i, r in enumerate(results) if r.active]
    if not active:
        return list(results)
    pick = active[0]
    for i in active[1:]:
        better = results[i].value > results[pick].value
        worse = results[i].value < results[pick].value
        if (highest and better) or (not highest and worse):
            pick = i
    out = []
    for i, r in enumerate(results):
        if r.active and i != pick:
            out.append(replace(r, active=False, discarded=True))
        else:
            out.append(r)
    return out


class DiceRNG:
    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)
        self._log = structlog.get_logger()

    def _roll_die(self, sides: int, lucky: bool) -> list[DieResult]:
        value = self._rng.randint(1, sides)
        if lucky and value == 1:
            companion = self._rng.randint(1, sides)
            return [DieResult(1, active=False, rerolled=True), DieResult(companion)]
        return [DieResult(value)]

    def roll(
        self,
        expr: str,
        advantage: bool = False,
        disadvantage: bool = False,
        halfling_lucky: bool = False,
    ) -> CompositeRoll:
        """
        Supports: XdY+Z
        Special case: d20 with adv/dis (both at once cancel out), and
        halfling lucky rerolling natural 1s on d20s.
        """
        self._log.debug(
            "rules.dice.roll.start",
            expr=expr,
            advantage=advantage,
            disadvantage=disadvantage,
            halfling_lucky=halfling_lucky,
        )
        m = _DICE_RE.match(expr.replace(" ", ""))
        if not m:
            raise ValueError(f"Bad dice expression: {expr}")
        count = int(m.group("count") or 1)
        sides = int(m.group("sides"))
        mod = int((m.group("mod") or "0").replace(" ", ""))

        lucky = halfling_lucky and sides == 20
        modifiers: list[str] = []
        if lucky:
            modifiers.append("r1=1")

        keep: str | None = None
        if sides == 20 and count == 1 and advantage != disadvantage:
            count = 2
            keep = "kh" if advantage else "kl"

        results: list[DieResult] = []
        for _ in range(count):
            results.extend(self._roll_die(sides, lucky))
        if keep is not None:
            results = _keep_one(results, highest=keep == "kh")
            modifiers.append(keep)

        die = DieTerm(number=count, faces=sides, results=tuple(results), modifiers=tuple(modifiers))
        terms: list[Term] = [die]
        if mod:
            terms.extend([OperatorTerm("+" if mod > 0 else "-"), NumericTerm(abs(mod))])

        crit = sides == 20 and any(r.active and r.value == 20 for r in results)
        out = CompositeRoll.from_terms(
            terms, RollOptions(halfling_lucky=halfling_lucky), is_critical=crit
        )
        self._log.debug("rules.dice.roll.result", formula=out.formula, total=out.total, crit=crit)
        return out
