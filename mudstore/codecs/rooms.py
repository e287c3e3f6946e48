"""Room definitions."""

from .base import EntityCodec, IntegerField, JsonField, TextField

ROOMS = EntityCodec(
    "rooms",
    "Rooms",
    "rooms.json",
    [
        TextField("id"),
        TextField("name", default=""),
        TextField("description", default=""),
        JsonField("exits", default=[]),
        IntegerField("currency.gold", "currency_gold", default=0),
        IntegerField("currency.silver", "currency_silver", default=0),
        IntegerField("currency.copper", "currency_copper", default=0),
        JsonField("flags"),
        JsonField("npcs", "npc_template_ids"),
        JsonField("itemInstances", "item_instances"),
    ],
    primary_key=("id",),
    update_columns=("name", "description", "exits"),
)
