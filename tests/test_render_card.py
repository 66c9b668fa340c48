# test_render_card.py
import pytest

from Rollcard.errors import TooltipGenerationFailure
from Rollcard.metrics import get_counter
from Rollcard.render import FieldRenderer, FieldType, ItemRef, RollField
from Rollcard.rules.dice import CompositeRoll, DieResult
from Rollcard.services.renderer import Template


@pytest.mark.asyncio
async def test_card_renders_fields_in_order(field_renderer, make_d20, make_damage):
    fields = [
        RollField(FieldType.HEADER),
        RollField(FieldType.ATTACK, {"roll": make_d20(15, bonus=4)}),
        RollField(FieldType.DAMAGE, {"base_roll": make_damage(8, 6, bonus=2)}),
        RollField(FieldType.FOOTER, {"properties": ["Finesse"]}),
    ]
    card = await field_renderer.render_card(fields, {"id": "c", "item": ItemRef(name="Rapier")})

    assert card.errors == []
    assert [f.template for f in card.fields] == [
        Template.HEADER,
        Template.MULTIROLL,
        Template.DAMAGE,
        Template.FOOTER,
    ]
    assert all(f.props.get("id", "c") == "c" for f in card.fields)


@pytest.mark.asyncio
async def test_broken_field_does_not_affect_siblings(field_renderer, make_d20):
    lucky_without_companion = make_d20(DieResult(1, rerolled=True), lucky=True)
    fields = [
        RollField(FieldType.HEADER, {"title": "Sneaky"}),
        RollField(FieldType.CHECK, {"roll": lucky_without_companion}),
        RollField("bogus"),
        RollField(FieldType.CHECK, {"roll": make_d20(13)}),
    ]
    card = await field_renderer.render_card(fields)

    assert [f.template for f in card.fields] == [Template.HEADER, Template.MULTIROLL]
    assert card.fields[1].props["entries"][0].total == 13
    assert len(card.errors) == 1
    err = card.errors[0]
    assert (err.index, err.kind) == (1, "check")
    assert get_counter("render.card.field_failed") == 1
    assert get_counter("render.field.unknown") == 1


@pytest.mark.asyncio
async def test_tooltip_failure_is_isolated_to_its_field(make_damage):
    class _Flaky:
        async def get_tooltip(self, roll: CompositeRoll) -> str:
            if roll.dice and roll.dice[0].faces == 12:
                raise TimeoutError("slow tooltip service")
            return "ok"

    renderer = FieldRenderer(tooltips=_Flaky())
    card = await renderer.render_card(
        [
            RollField(FieldType.DAMAGE, {"base_roll": make_damage(12, 7)}),
            RollField(FieldType.DAMAGE, {"base_roll": make_damage(6, 2)}),
        ]
    )
    assert len(card.fields) == 1
    assert card.fields[0].props["tooltips"] == ["ok"]
    assert isinstance(card.errors[0].error, TooltipGenerationFailure)


@pytest.mark.asyncio
async def test_empty_damage_is_skipped_not_failed(field_renderer):
    card = await field_renderer.render_card(
        [RollField(FieldType.DAMAGE, {"base_roll": CompositeRoll.from_terms([])})]
    )
    assert card.fields == []
    assert card.errors == []
