"""Turn tagged chat card fields into template props.

A field is a ``(kind, data)`` pair. The field's data is merged over the
ambient card metadata (top-level keys only, the field wins) and handed to
the processor for its kind. Processors only build plain props; markup is
produced by the injected TemplateRenderer.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

import structlog

from Rollcard.config import CardSettings
from Rollcard.errors import MalformedRollInput, TooltipGenerationFailure
from Rollcard.metrics import inc_counter
from Rollcard.rules.crits import classify_roll
from Rollcard.rules.dice import CompositeRoll
from Rollcard.rules.labels import PlacementConfig, compute_damage_labels
from Rollcard.rules.multiroll import process_multiroll
from Rollcard.rules.tooltips import PlainTooltipService, TooltipService, gather_tooltips
from Rollcard.rules.types import DamageRollPart
from Rollcard.services.renderer import DEFAULT_IMG, DataRenderer, Template, TemplateRenderer
from Rollcard.vocab import DND5E, Vocabulary

log = structlog.get_logger()


class FieldType(str, Enum):
    HEADER = "header"
    FOOTER = "footer"
    DESCRIPTION = "description"
    CHECK = "check"
    ATTACK = "attack"
    DAMAGE = "damage"
    SAVE = "save"


class ItemType(str, Enum):
    SPELL = "spell"
    TOOL = "tool"
    WEAPON = "weapon"
    CONSUMABLE = "consumable"


@dataclass(frozen=True)
class ActorRef:
    name: str
    img: str | None = None


@dataclass(frozen=True)
class ItemRef:
    name: str
    type: str | None = None
    img: str | None = None
    level: int | None = None  # spell level
    ability: str | None = None  # ability a tool check uses
    actor: ActorRef | None = None


@dataclass(frozen=True)
class RollField:
    kind: FieldType | str
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data or {})))


@dataclass(frozen=True)
class FieldError:
    index: int
    kind: str
    error: Exception


@dataclass(frozen=True)
class CardRender:
    fields: list[Any]
    errors: list[FieldError]


def merge_field_data(
    base: Mapping[str, Any] | None, override: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Shallow merge: every top-level key of ``override`` replaces the base value."""
    return {**(base or {}), **(override or {})}


def header_props(data: Mapping[str, Any], vocab: Vocabulary) -> dict[str, Any]:
    item: ItemRef | None = data.get("item")
    actor: ActorRef | None = data.get("actor") or (item.actor if item else None)
    slot_level = data.get("slot_level")

    img = data.get("img") or (item.img if item else None) or (actor.img if actor else None)
    # An explicit empty title is kept; only a missing one falls back
    title = data.get("title")
    if title is None:
        title = item.name if item is not None else None
    if title is None:
        title = actor.name if actor is not None else ""

    upcast = slot_level and item is not None and slot_level != item.level
    if item is not None and item.type == ItemType.SPELL and upcast:
        title += f" ({vocab.spell_levels.get(slot_level, slot_level)})"

    if item is not None and item.type == ItemType.TOOL and item.ability:
        ability_label = vocab.abilities.get(item.ability)
        if ability_label:
            title += f" ({ability_label})"

    return {
        "id": data.get("id"),
        "item": {"img": img or DEFAULT_IMG, "name": title},
        "slot_level": slot_level,
    }


def footer_props(data: Mapping[str, Any]) -> dict[str, Any]:
    return {"properties": data.get("properties")}


def description_props(data: Mapping[str, Any]) -> dict[str, Any]:
    return {"content": data.get("content"), "is_flavor": data.get("is_flavor")}


def save_props(data: Mapping[str, Any], vocab: Vocabulary) -> dict[str, Any]:
    ability = data.get("ability")
    return {
        "id": data.get("id"),
        "ability": ability,
        "ability_label": vocab.abilities.get(ability),
        "hide_dc": data.get("hide_dc"),
        "dc": data.get("dc"),
    }


async def multiroll_props(
    data: Mapping[str, Any], *, tooltips: TooltipService, card: CardSettings
) -> dict[str, Any]:
    roll: CompositeRoll | None = data.get("roll")
    if roll is None:
        raise MalformedRollInput("check field has no roll")
    result = await process_multiroll(roll, tooltips=tooltips, d20_icons=card.d20_icons_enabled)
    return {
        "id": data.get("id"),
        "title": data.get("title"),
        "formula": result.formula,
        "entries": list(result.entries),
        "tooltips": list(result.tooltips),
        "bonus_tooltip": result.bonus_tooltip,
    }


def attack_title(data: Mapping[str, Any], vocab: Vocabulary) -> str:
    if data.get("title"):
        return data["title"]
    consume: ItemRef | None = data.get("consume")
    label = vocab.chat("attack")
    return f"{label} [{consume.name}]" if consume is not None else label


def _damage_part(roll: CompositeRoll | None) -> DamageRollPart | None:
    if roll is None:
        return None
    return DamageRollPart(roll=roll, total=roll.total, crit_type=classify_roll(roll))


async def damage_props(
    data: Mapping[str, Any],
    *,
    tooltips: TooltipService,
    card: CardSettings,
    vocab: Vocabulary,
) -> dict[str, Any] | None:
    base: CompositeRoll | None = data.get("base_roll")
    crit: CompositeRoll | None = data.get("crit_roll")
    if base is None and crit is None:
        raise MalformedRollInput("damage field has neither a base nor a critical roll")

    # Nothing to show; a field that renders nothing is not an error
    if not (base and base.terms) and not (crit and crit.terms):
        inc_counter("render.damage.empty")
        log.debug("render.damage.empty", id=data.get("id"))
        return None

    damage_type = data.get("damage_type")
    labels = compute_damage_labels(
        damage_type,
        versatile=bool(data.get("versatile")),
        context=data.get("context"),
        config=PlacementConfig.from_settings(card),
        vocab=vocab,
    )
    # A roll without terms has no breakdown to show
    tips = await gather_tooltips(
        tooltips, [r if r is not None and r.terms else None for r in (base, crit)]
    )

    return {
        "id": data.get("id"),
        "damage_roll_type": FieldType.DAMAGE.value,
        "tooltips": [t for t in tips if t],
        "base": _damage_part(base),
        "crit": _damage_part(crit),
        "crit_text": vocab.chat("crit"),
        "damage_top": labels[1],
        "damage_mid": labels[2],
        "damage_bottom": labels[3],
        "formula": (base or crit).formula,
        "damage_type": damage_type,
    }


class FieldRenderer:
    """Render chat card fields through a TemplateRenderer.

    Collaborators are injected so rendering never consults global state:
    the template renderer, the tooltip service, the game vocabulary and a
    card settings snapshot (a field's data may carry its own ``settings``).
    """

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        *,
        tooltips: TooltipService | None = None,
        vocab: Vocabulary = DND5E,
        settings: CardSettings | None = None,
    ) -> None:
        self.renderer = renderer or DataRenderer()
        self.tooltips = tooltips or PlainTooltipService()
        self.vocab = vocab
        self.settings = settings or CardSettings()

    async def _props_for(self, kind: FieldType, data: dict[str, Any]) -> dict[str, Any] | None:
        card: CardSettings = data.get("settings") or self.settings
        if kind is FieldType.HEADER:
            return header_props(data, self.vocab)
        if kind is FieldType.FOOTER:
            return footer_props(data)
        if kind is FieldType.DESCRIPTION:
            return description_props(data)
        if kind is FieldType.SAVE:
            return save_props(data, self.vocab)
        if kind is FieldType.CHECK:
            return await multiroll_props(data, tooltips=self.tooltips, card=card)
        if kind is FieldType.ATTACK:
            data = {**data, "title": attack_title(data, self.vocab)}
            return await multiroll_props(data, tooltips=self.tooltips, card=card)
        return await damage_props(data, tooltips=self.tooltips, card=card, vocab=self.vocab)

    async def render_from_field(
        self, field: RollField, metadata: Mapping[str, Any] | None = None
    ) -> Any:
        """Render one field; returns None when the field has nothing to show."""
        try:
            kind = FieldType(field.kind)
        except ValueError:
            inc_counter("render.field.unknown")
            log.warning("render.field.unknown", kind=str(field.kind))
            return None

        data = merge_field_data(metadata, field.data)
        log.debug("render.field.start", kind=kind.value, id=data.get("id"))
        props = await self._props_for(kind, data)
        if props is None:
            return None
        inc_counter(f"render.field.{kind.value}")
        return await self.renderer.render(_TEMPLATES[kind], props)

    async def render_card(
        self, fields: Iterable[RollField], metadata: Mapping[str, Any] | None = None
    ) -> CardRender:
        """Render every field on its own so one broken field leaves the rest intact."""
        outputs: list[Any] = []
        errors: list[FieldError] = []
        for index, fld in enumerate(fields):
            try:
                out = await self.render_from_field(fld, metadata)
            except (MalformedRollInput, TooltipGenerationFailure) as exc:
                inc_counter("render.card.field_failed")
                kind = _kind_name(fld.kind)
                log.warning("render.card.field_failed", index=index, kind=kind, error=str(exc))
                errors.append(FieldError(index=index, kind=kind, error=exc))
                continue
            if out is not None:
                outputs.append(out)
        return CardRender(fields=outputs, errors=errors)

    async def render_full_card(self, props: Mapping[str, Any]) -> Any:
        return await self.renderer.render(Template.FULL_CARD, props)

    async def render_item_options(self, props: Mapping[str, Any]) -> Any:
        return await self.renderer.render(Template.OPTIONS, props)


_TEMPLATES = {
    FieldType.HEADER: Template.HEADER,
    FieldType.FOOTER: Template.FOOTER,
    FieldType.DESCRIPTION: Template.DESCRIPTION,
    FieldType.SAVE: Template.SAVE_BUTTON,
    FieldType.CHECK: Template.MULTIROLL,
    FieldType.ATTACK: Template.MULTIROLL,
    FieldType.DAMAGE: Template.DAMAGE,
}


def _kind_name(kind: FieldType | str) -> str:
    return kind.value if isinstance(kind, FieldType) else str(kind)
