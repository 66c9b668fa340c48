"""Damage label placement.

A damage entry shows up to three text fragments (a title prefix such as
"Damage [Versatile]", the damage type such as "Fire", and free-form context
such as "Sneak Attack") across three display slots: 1 top, 2 middle,
3 bottom. Slot 0 hides a fragment. When context and the title share a slot
the two merge into ``"<title> (<context>)"``; the replace flags let context
take over the title or damage-type slot it collides with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from Rollcard.vocab import Vocabulary

if TYPE_CHECKING:
    from Rollcard.config import CardSettings

OTHER_DAMAGE = "other"
SLOT_SEPARATOR = " - "
SLOTS = (1, 2, 3)


@dataclass(frozen=True)
class PlacementConfig:
    title_placement: int = 1
    type_placement: int = 1
    context_placement: int = 1
    replace_title: bool = False
    replace_damage: bool = False

    def __post_init__(self) -> None:
        for name in ("title_placement", "type_placement", "context_placement"):
            slot = getattr(self, name)
            if not isinstance(slot, int) or isinstance(slot, bool) or not 0 <= slot <= 3:
                raise ValueError(f"{name} must be a slot number 0..3, got {slot!r}")

    @classmethod
    def from_settings(cls, card: CardSettings) -> PlacementConfig:
        return cls(
            title_placement=card.placement_damage_title,
            type_placement=card.placement_damage_type,
            context_placement=card.placement_damage_context,
            replace_title=card.context_replace_title,
            replace_damage=card.context_replace_damage,
        )


def damage_prefix(damage_type: str | None, versatile: bool, vocab: Vocabulary) -> str:
    if damage_type in vocab.healing_types:
        return vocab.healing_types[damage_type]
    if damage_type in vocab.damage_types:
        prefix = vocab.chat("damage")
        if versatile:
            # Unlabelled property keys show as the key itself
            prop = vocab.weapon_properties.get("ver", "ver")
            prefix += f" [{prop}]"
        return prefix
    if damage_type == OTHER_DAMAGE:
        return vocab.chat("other")
    return ""


def compute_damage_labels(
    damage_type: str | None,
    *,
    versatile: bool = False,
    context: Any = None,
    config: PlacementConfig,
    vocab: Vocabulary,
) -> dict[int, str]:
    """Return the joined label string for each of slots 1, 2 and 3."""
    labels: dict[int, list[str]] = {slot: [] for slot in SLOTS}
    title_at = config.title_placement
    type_at = config.type_placement
    context_at = config.context_placement
    has_context = bool(context)

    pushed_title = False
    if title_at != 0 and not (config.replace_title and has_context and title_at == context_at):
        labels[title_at].append(damage_prefix(damage_type, versatile, vocab))
        pushed_title = True

    if has_context:
        if context_at == title_at and pushed_title:
            # The title is the first fragment of its slot
            title = labels[context_at][0]
            labels[context_at][0] = (f"{title} " if title else "") + f"({context})"
        elif context_at != 0:
            labels[context_at].append(str(context))

    type_label = vocab.damage_types.get(damage_type or "", "")
    if (
        type_at != 0
        and type_label
        and not (config.replace_damage and has_context and type_at == context_at)
    ):
        labels[type_at].append(type_label)

    return {slot: SLOT_SEPARATOR.join(fragments) for slot, fragments in labels.items()}
