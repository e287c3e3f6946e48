"""Player accounts."""

from .base import BoolField, EntityCodec, IntegerField, JsonField, TextField, TimestampField, now_timestamp


def _now(_document):
    return now_timestamp()


STAT_NAMES = ("strength", "dexterity", "agility", "constitution", "wisdom", "intelligence", "charisma")

USERS = EntityCodec(
    "users",
    "Users",
    "users.json",
    [
        TextField("username"),
        TextField("passwordHash", "password_hash", default=""),
        TextField("salt", default=""),
        IntegerField("health", default=100),
        IntegerField("maxHealth", "max_health", default=100),
        IntegerField("mana", default=100),
        IntegerField("maxMana", "max_mana", default=100),
        IntegerField("experience", default=0),
        IntegerField("level", default=1),
        *[IntegerField(stat, default=10) for stat in STAT_NAMES],
        JsonField("equipment"),
        TimestampField("joinDate", "join_date", default_factory=_now),
        TimestampField("lastLogin", "last_login", default_factory=_now),
        IntegerField("totalPlayTime", "total_play_time", default=0),
        TextField("currentRoomId", "current_room_id", default="start"),
        JsonField("inventory.items", "inventory_items", default=[]),
        IntegerField("inventory.currency.gold", "inventory_gold", default=0),
        IntegerField("inventory.currency.silver", "inventory_silver", default=0),
        IntegerField("inventory.currency.copper", "inventory_copper", default=0),
        IntegerField("bank.gold", "bank_gold", default=0),
        IntegerField("bank.silver", "bank_silver", default=0),
        IntegerField("bank.copper", "bank_copper", default=0),
        BoolField("inCombat", "in_combat", default=False),
        BoolField("isUnconscious", "is_unconscious", default=False),
        BoolField("isResting", "is_resting", default=False),
        BoolField("isMeditating", "is_meditating", default=False),
        JsonField("flags"),
        JsonField("pendingAdminMessages", "pending_admin_messages"),
        TextField("email"),
        TextField("description"),
    ],
    primary_key=("username",),
    update_columns=("health", "max_health", "mana", "max_mana", "experience", "level", "current_room_id"),
)
