"""NPC templates."""

from .base import BoolField, EntityCodec, IntegerField, JsonField, RangeField, TextField


def _max_health_from_health(document):
    # Templates written before maxHealth existed start at full health.
    return document.get("health", 100)


NPC_TEMPLATES = EntityCodec(
    "npc_templates",
    "NPC Templates",
    "npcs.json",
    [
        TextField("id"),
        TextField("name", default=""),
        TextField("description", default=""),
        IntegerField("health", default=100),
        IntegerField("maxHealth", "max_health", default_factory=_max_health_from_health),
        RangeField("damage", "damage_min", "damage_max", default=[1, 3]),
        BoolField("isHostile", "is_hostile", default=False),
        BoolField("isPassive", "is_passive", default=False),
        IntegerField("experienceValue", "experience_value", default=50),
        JsonField("attackTexts", "attack_texts", default=[]),
        JsonField("deathMessages", "death_messages", default=[]),
        BoolField("merchant"),
        JsonField("inventory"),
        JsonField("stockConfig", "stock_config"),
    ],
    primary_key=("id",),
)
