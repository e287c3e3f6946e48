"""
Mutable per-room state and merchant stock.

Room state (items lying on the floor, NPCs present, dropped currency) is
kept apart from the static room definitions so the world files can be
versioned without player-driven churn.
"""

from .base import EntityCodec, IntegerField, JsonField, TextField

ROOM_STATES = EntityCodec(
    "room_states",
    "Room States",
    "room_state.json",
    [
        TextField("roomId", "room_id"),
        JsonField("itemInstances", "item_instances", default=[]),
        JsonField("npcTemplateIds", "npc_template_ids", default=[]),
        IntegerField("currency.gold", "currency_gold", default=0),
        IntegerField("currency.silver", "currency_silver", default=0),
        IntegerField("currency.copper", "currency_copper", default=0),
        JsonField("items"),
    ],
    primary_key=("room_id",),
)

MERCHANT_STATES = EntityCodec(
    "merchant_states",
    "Merchant States",
    "merchant-state.json",
    [
        TextField("npcTemplateId", "npc_template_id"),
        TextField("npcInstanceId", "npc_instance_id", default=""),
        JsonField("actualInventory", "actual_inventory", default=[]),
        JsonField("stockConfig", "stock_config", default=[]),
    ],
    primary_key=("npc_template_id",),
)
