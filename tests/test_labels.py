# test_labels.py
import pytest
from hypothesis import given
from hypothesis import strategies as st

from Rollcard.config import CardSettings
from Rollcard.rules.labels import PlacementConfig, compute_damage_labels, damage_prefix
from Rollcard.vocab import DND5E, Vocabulary


def _labels(damage_type="fire", *, versatile=False, context=None, **placement):
    return compute_damage_labels(
        damage_type,
        versatile=versatile,
        context=context,
        config=PlacementConfig(**placement),
        vocab=DND5E,
    )


def test_versatile_title_and_type_in_separate_slots():
    out = _labels(versatile=True, title_placement=1, type_placement=2, context_placement=0)
    assert out == {1: "Damage [Versatile]", 2: "Fire", 3: ""}


def test_context_sharing_title_slot_merges_into_parenthetical():
    out = _labels(
        context="Sneak Attack", title_placement=1, context_placement=1, type_placement=2
    )
    assert out == {1: "Damage (Sneak Attack)", 2: "Fire", 3: ""}


def test_merged_title_joins_type_in_same_slot():
    out = _labels(context="Sneak Attack", title_placement=1, context_placement=1, type_placement=1)
    assert out[1] == "Damage (Sneak Attack) - Fire"


def test_distinct_slots_keep_fragments_unmerged():
    out = _labels(
        context="Sneak Attack", title_placement=1, context_placement=2, type_placement=3
    )
    assert out == {1: "Damage", 2: "Sneak Attack", 3: "Fire"}


def test_fragments_sharing_a_slot_join_in_insertion_order():
    out = _labels(
        context="Sneak Attack", title_placement=3, context_placement=2, type_placement=2
    )
    assert out == {1: "", 2: "Sneak Attack - Fire", 3: "Damage"}


def test_replace_title_lets_context_take_the_title_slot():
    out = _labels(
        context="Sneak Attack",
        title_placement=1,
        context_placement=1,
        type_placement=2,
        replace_title=True,
    )
    assert out == {1: "Sneak Attack", 2: "Fire", 3: ""}


def test_replace_title_without_context_keeps_title():
    out = _labels(title_placement=1, context_placement=1, type_placement=2, replace_title=True)
    assert out[1] == "Damage"


def test_replace_damage_hides_type_when_context_collides():
    out = _labels(
        context="Hex",
        title_placement=1,
        context_placement=2,
        type_placement=2,
        replace_damage=True,
    )
    assert out == {1: "Damage", 2: "Hex", 3: ""}


def test_replace_damage_only_applies_on_collision():
    out = _labels(
        context="Hex",
        title_placement=1,
        context_placement=2,
        type_placement=3,
        replace_damage=True,
    )
    assert out[3] == "Fire"


def test_healing_type_uses_its_own_label_and_no_type_string():
    out = _labels("healing", title_placement=1, type_placement=2, context_placement=3)
    assert out == {1: "Healing", 2: "", 3: ""}


def test_other_category():
    out = _labels("other", versatile=True, title_placement=1, type_placement=1)
    assert out[1] == "Other"


def test_unknown_type_merges_context_without_title_text():
    out = _labels("banana", context="Flavor", title_placement=2, context_placement=2)
    assert out[2] == "(Flavor)"


def test_damage_prefix_versatile_only_for_damage_types():
    assert damage_prefix("fire", True, DND5E) == "Damage [Versatile]"
    assert damage_prefix("healing", True, DND5E) == "Healing"
    assert damage_prefix(None, False, DND5E) == ""


def test_versatile_without_property_label_shows_the_key():
    vocab = Vocabulary(damage_types={"fire": "Fire"})
    assert damage_prefix("fire", True, vocab) == f"{vocab.chat('damage')} [ver]"


@pytest.mark.parametrize("field", ["title_placement", "type_placement", "context_placement"])
@pytest.mark.parametrize("bad", [-1, 4, "1", True])
def test_placement_rejects_non_slot_values(field, bad):
    with pytest.raises(ValueError):
        PlacementConfig(**{field: bad})


def test_placement_from_settings_coerces_string_slots():
    card = CardSettings(
        placement_damage_title="2",
        placement_damage_type="0",
        placement_damage_context=3,
        context_replace_title=True,
    )
    cfg = PlacementConfig.from_settings(card)
    assert cfg == PlacementConfig(
        title_placement=2, type_placement=0, context_placement=3, replace_title=True
    )


@given(slots=st.permutations([1, 2, 3]), versatile=st.booleans())
def test_distinct_nonzero_slots_place_each_fragment_exactly_once(slots, versatile):
    title_at, context_at, type_at = slots
    out = _labels(
        versatile=versatile,
        context="Sneak Attack",
        title_placement=title_at,
        context_placement=context_at,
        type_placement=type_at,
    )
    prefix = "Damage [Versatile]" if versatile else "Damage"
    assert out[title_at] == prefix
    assert out[context_at] == "Sneak Attack"
    assert out[type_at] == "Fire"


slot = st.integers(min_value=0, max_value=3)


@given(
    title_at=slot,
    context_at=slot,
    type_at=slot,
    replace_title=st.booleans(),
    replace_damage=st.booleans(),
)
def test_zero_placement_hides_fragment_everywhere(
    title_at, context_at, type_at, replace_title, replace_damage
):
    out = _labels(
        context="Sneak Attack",
        title_placement=title_at,
        context_placement=context_at,
        type_placement=type_at,
        replace_title=replace_title,
        replace_damage=replace_damage,
    )
    joined = " | ".join(out.values())
    if title_at == 0:
        assert "Damage" not in joined
    if context_at == 0:
        assert "Sneak Attack" not in joined
    if type_at == 0:
        assert "Fire" not in joined
    # No fragment ever shows up twice
    for text in ("Damage", "Sneak Attack", "Fire"):
        assert joined.count(text) <= 1
