"""Areas group rooms and carry spawn and combat settings."""

from .base import EntityCodec, JsonField, TextField, TimestampField, now_timestamp


def _now(_document):
    return now_timestamp()


AREAS = EntityCodec(
    "areas",
    "Areas",
    "areas.json",
    [
        TextField("id"),
        TextField("name", default=""),
        TextField("description", default=""),
        JsonField("levelRange", "level_range", default={"min": 1, "max": 10}),
        JsonField("flags"),
        JsonField("combatConfig", "combat_config"),
        JsonField("spawnConfig", "spawn_config", default=[]),
        JsonField("defaultRoomFlags", "default_room_flags"),
        TimestampField("created", default_factory=_now),
        TimestampField("modified", default_factory=_now),
    ],
    primary_key=("id",),
    update_columns=(
        "name",
        "description",
        "level_range",
        "flags",
        "combat_config",
        "spawn_config",
        "default_room_flags",
        "modified",
        "extra_fields",
    ),
)
