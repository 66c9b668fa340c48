"""Developer CLI: roll dice and print the chat card props they render to.

Examples:
  rollcard check 1d20+5 --advantage --lucky --seed 3
  rollcard damage 2d6+3 --type fire --context "Sneak Attack"
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import click
from pydantic_core import to_jsonable_python

from Rollcard.config import load_settings
from Rollcard.logging import setup_logging
from Rollcard.render import FieldRenderer, FieldType, RollField
from Rollcard.rules.dice import CompositeRoll, DiceRNG


def _echo(out: Any) -> None:
    click.echo(json.dumps(to_jsonable_python(out), indent=2, sort_keys=True))


@click.group()
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    settings = load_settings()
    if log_level:
        settings = settings.model_copy(
            update={"logging_level": log_level.upper(), "logging_console": log_level.upper()}
        )
    setup_logging(settings)
    ctx.obj = FieldRenderer(settings=settings.card)


@cli.command()
@click.argument("expr", default="1d20")
@click.option("--advantage", is_flag=True, help="Roll with advantage.")
@click.option("--disadvantage", is_flag=True, help="Roll with disadvantage.")
@click.option("--lucky", is_flag=True, help="Reroll natural 1s (halfling lucky).")
@click.option("--seed", type=int, default=None)
@click.option("--title", default=None)
@click.option("--attack", is_flag=True, help="Render as an attack roll.")
@click.pass_obj
def check(
    renderer: FieldRenderer,
    expr: str,
    advantage: bool,
    disadvantage: bool,
    lucky: bool,
    seed: int | None,
    title: str | None,
    attack: bool,
) -> None:
    """Render a check (or attack) roll."""
    try:
        roll = DiceRNG(seed).roll(
            expr, advantage=advantage, disadvantage=disadvantage, halfling_lucky=lucky
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="EXPR") from exc
    kind = FieldType.ATTACK if attack else FieldType.CHECK
    data: dict[str, Any] = {"roll": roll}
    if title:
        data["title"] = title
    _echo(asyncio.run(renderer.render_from_field(RollField(kind, data), {"id": "cli"})))


@cli.command()
@click.argument("expr")
@click.option("--type", "damage_type", default="other", help="Damage or healing type.")
@click.option("--context", default=None, help="Free-form context label.")
@click.option("--versatile", is_flag=True)
@click.option("--crit", is_flag=True, help="Also roll critical damage dice.")
@click.option("--seed", type=int, default=None)
@click.pass_obj
def damage(
    renderer: FieldRenderer,
    expr: str,
    damage_type: str,
    context: str | None,
    versatile: bool,
    crit: bool,
    seed: int | None,
) -> None:
    """Render a damage roll."""
    rng = DiceRNG(seed)
    try:
        base = rng.roll(expr)
        crit_roll: CompositeRoll | None = None
        if crit:
            # Critical damage rerolls the dice only, never the modifier
            crit_roll = rng.roll(re.split(r"[+\-]", expr, maxsplit=1)[0])
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="EXPR") from exc
    data = {
        "base_roll": base,
        "crit_roll": crit_roll,
        "damage_type": damage_type,
        "context": context,
        "versatile": versatile,
    }
    _echo(asyncio.run(renderer.render_from_field(RollField(FieldType.DAMAGE, data), {"id": "cli"})))


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
