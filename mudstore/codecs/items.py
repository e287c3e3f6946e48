"""Item templates and the individual item instances created from them."""

from .base import EntityCodec, HistoryField, IntegerField, JsonField, TextField, TimestampField, now_timestamp

ITEM_TEMPLATES = EntityCodec(
    "item_templates",
    "Item Templates",
    "items.json",
    [
        TextField("id"),
        TextField("name", default=""),
        TextField("description", default=""),
        TextField("type", default="misc"),
        TextField("slot"),
        IntegerField("value", default=0),
        IntegerField("weight"),
        IntegerField("globalLimit", "global_limit"),
        JsonField("stats"),
        JsonField("requirements"),
    ],
    primary_key=("id",),
    update_columns=("name", "description", "type", "value"),
)

ITEM_INSTANCES = EntityCodec(
    "item_instances",
    "Item Instances",
    "itemInstances.json",
    [
        TextField("instanceId", "instance_id"),
        TextField("templateId", "template_id", required=True),
        TimestampField("created", default_factory=lambda _document: now_timestamp()),
        TextField("createdBy", "created_by", default="system"),
        JsonField("properties"),
        HistoryField("history"),
    ],
    primary_key=("instance_id",),
    update_columns=("properties", "history"),
)
