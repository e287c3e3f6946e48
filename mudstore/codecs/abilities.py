"""Abilities (spells, procs and consumable effects)."""

from .base import BoolField, EntityCodec, IntegerField, JsonField, RealField, TextField

ABILITIES = EntityCodec(
    "abilities",
    "Abilities",
    "abilities.json",
    [
        TextField("id"),
        TextField("name", default=""),
        TextField("description", default=""),
        TextField("type", default="standard"),
        IntegerField("mpCost", "mp_cost", default=0),
        TextField("cooldownType", "cooldown_type", default="none"),
        IntegerField("cooldownValue", "cooldown_value", default=0),
        TextField("targetType", "target_type", default="self"),
        JsonField("effects", default=[]),
        JsonField("requirements"),
        RealField("procChance", "proc_chance"),
        BoolField("consumesItem", "consumes_item"),
    ],
    primary_key=("id",),
)
