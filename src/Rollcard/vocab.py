# vocab.py

from pydantic import BaseModel, Field

MODULE_SHORT = "rollcard"


class Vocabulary(BaseModel):
    """Game-system labels and localized strings consumed by the card renderer.

    Passed explicitly into rendering so the processors never reach for a
    global configuration object.
    """

    damage_types: dict[str, str] = Field(default_factory=dict)
    healing_types: dict[str, str] = Field(default_factory=dict)
    abilities: dict[str, str] = Field(default_factory=dict)
    spell_levels: dict[int, str] = Field(default_factory=dict)
    weapon_properties: dict[str, str] = Field(default_factory=dict)
    strings: dict[str, str] = Field(default_factory=dict)

    model_config = dict(frozen=True, extra="forbid")

    def localize(self, key: str) -> str:
        # Unknown keys render as themselves, like the host's i18n lookup
        return self.strings.get(key, key)

    def chat(self, token: str) -> str:
        return self.localize(f"{MODULE_SHORT}.chat.{token}")


DND5E = Vocabulary(
    damage_types={
        "acid": "Acid",
        "bludgeoning": "Bludgeoning",
        "cold": "Cold",
        "fire": "Fire",
        "force": "Force",
        "lightning": "Lightning",
        "necrotic": "Necrotic",
        "piercing": "Piercing",
        "poison": "Poison",
        "psychic": "Psychic",
        "radiant": "Radiant",
        "slashing": "Slashing",
        "thunder": "Thunder",
    },
    healing_types={
        "healing": "Healing",
        "temphp": "Healing (Temporary)",
    },
    abilities={
        "str": "Strength",
        "dex": "Dexterity",
        "con": "Constitution",
        "int": "Intelligence",
        "wis": "Wisdom",
        "cha": "Charisma",
    },
    spell_levels={
        0: "Cantrip",
        1: "1st Level",
        2: "2nd Level",
        3: "3rd Level",
        4: "4th Level",
        5: "5th Level",
        6: "6th Level",
        7: "7th Level",
        8: "8th Level",
        9: "9th Level",
    },
    weapon_properties={
        "ver": "Versatile",
        "fin": "Finesse",
        "hvy": "Heavy",
        "lgt": "Light",
        "thr": "Thrown",
        "two": "Two-Handed",
    },
    strings={
        f"{MODULE_SHORT}.chat.attack": "Attack",
        f"{MODULE_SHORT}.chat.damage": "Damage",
        f"{MODULE_SHORT}.chat.other": "Other",
        f"{MODULE_SHORT}.chat.crit": "Critical",
    },
)
