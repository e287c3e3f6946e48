"""Single-object configuration documents."""

from .base import BoolField, EntityCodec, IntegerField, JsonField, TextField

DEFAULT_DATA_FILES = {
    "players": "./data/players.json",
    "rooms": "./data/rooms.json",
    "items": "./data/items.json",
    "npcs": "./data/npcs.json",
}

MUD_CONFIG = EntityCodec(
    "mud_config",
    "MUD Config",
    "mud-config.json",
    [
        JsonField("dataFiles", "data_files", default=DEFAULT_DATA_FILES),
        TextField("game.startingRoom", "game_starting_room", default="town-square"),
        IntegerField("game.maxPlayers", "game_max_players", default=100),
        IntegerField("game.idleTimeout", "game_idle_timeout", default=30),
        IntegerField("game.maxPasswordAttempts", "game_max_password_attempts", default=5),
        BoolField("advanced.debugMode", "advanced_debug_mode", default=False),
        BoolField("advanced.allowRegistration", "advanced_allow_registration", default=True),
        IntegerField("advanced.backupInterval", "advanced_backup_interval", default=6),
        TextField("advanced.logLevel", "advanced_log_level", default="info"),
    ],
    singleton_key="singleton",
)

GAMETIMER_CONFIG = EntityCodec(
    "gametimer_config",
    "Game Timer Config",
    "gametimer-config.json",
    [
        IntegerField("tickInterval", "tick_interval", default=6000),
        IntegerField("saveInterval", "save_interval", default=10),
    ],
    singleton_key="singleton",
)
