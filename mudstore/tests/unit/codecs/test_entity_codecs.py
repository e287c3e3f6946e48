"""
Tests for the registered entity codecs.

Covers the defaults and column layouts the game server relies on, and that
every sample record survives a trip through its relational row.
"""

from __future__ import annotations

import json

import pytest

from mudstore.codecs import REGISTRY, get_codec
from mudstore.codecs.admin import BUG_REPORTS, SNAKE_SCORES
from mudstore.codecs.areas import AREAS
from mudstore.codecs.game_config import DEFAULT_DATA_FILES, GAMETIMER_CONFIG, MUD_CONFIG
from mudstore.codecs.items import ITEM_INSTANCES
from mudstore.codecs.npcs import NPC_TEMPLATES
from mudstore.codecs.rooms import ROOMS
from mudstore.codecs.users import USERS
from mudstore.exceptions import NotFoundError, SerializationError
from mudstore.tests.fixtures import sample_documents


def _documents_of(codec):
    payload = sample_documents.sample_files()[codec.document_file]
    if codec.is_singleton:
        return [payload]
    if codec.collection_key:
        return payload[codec.collection_key]
    return payload


def test_registry_order_and_lookup():
    """Entities are processed definitions first, singletons last."""
    assert [codec.name for codec in REGISTRY] == [
        "users",
        "rooms",
        "npc_templates",
        "item_templates",
        "item_instances",
        "areas",
        "abilities",
        "room_states",
        "merchant_states",
        "admins",
        "bug_reports",
        "snake_scores",
        "mud_config",
        "gametimer_config",
    ]
    assert get_codec("users") is USERS


def test_get_codec_unknown_name():
    with pytest.raises(NotFoundError):
        get_codec("dragons")


@pytest.mark.parametrize("codec", REGISTRY, ids=lambda codec: codec.name)
def test_sample_records_round_trip(codec):
    """Every sample record comes back from its row in canonical form."""
    for document in _documents_of(codec):
        assert codec.from_row(codec.to_row(document)) == codec.apply_defaults(document)


def test_user_row_flattens_currency_and_flags():
    """Wallet and bank currencies get their own columns; booleans are 0/1."""
    alice = sample_documents.USERS[0]
    row = USERS.to_row(alice)

    assert row["inventory_gold"] == 12
    assert row["inventory_copper"] == 40
    assert row["bank_gold"] == 100
    assert row["is_resting"] == 1
    assert row["in_combat"] == 0
    assert json.loads(row["inventory_items"]) == ["potion-1", "torch-2"]
    assert json.loads(row["extra_fields"]) == {"title": "the Brave"}


def test_user_defaults_for_minimal_record():
    """A freshly created account gets the game's starting values."""
    bob = USERS.apply_defaults(sample_documents.USERS[1])

    assert bob["health"] == 100
    assert bob["maxMana"] == 100
    assert bob["level"] == 1
    assert bob["strength"] == 10
    assert bob["currentRoomId"] == "start"
    assert bob["inventory"] == {"items": [], "currency": {"gold": 0, "silver": 0, "copper": 0}}
    assert bob["bank"] == {"gold": 0, "silver": 0, "copper": 0}
    assert bob["isMeditating"] is False
    assert "email" not in bob


def test_user_missing_timestamps_default_to_now():
    """joinDate and lastLogin default to the current time in canonical form."""
    user = USERS.apply_defaults({"username": "carol"})
    assert user["joinDate"].endswith("Z")
    assert len(user["joinDate"]) == len("2024-01-01T00:00:00.000Z")


def test_user_update_columns_are_the_progress_fields():
    assert set(USERS.update_columns) == {
        "health",
        "max_health",
        "mana",
        "max_mana",
        "experience",
        "level",
        "current_room_id",
    }


def test_room_state_columns_use_game_names():
    """Room npcs and item instances use the relational column names."""
    row = ROOMS.to_row(sample_documents.ROOMS[0])
    assert json.loads(row["npc_template_ids"]) == ["town-guard"]
    assert json.loads(row["item_instances"]) == [{"instanceId": "torch-2", "templateId": "torch"}]
    assert row["currency_gold"] == 5


def test_room_without_state_keeps_layout_fields():
    """Grid and area placement ride along in extra_fields."""
    room = ROOMS.from_row(ROOMS.to_row(sample_documents.ROOMS[1]))
    assert room["areaId"] == "old-town"
    assert (room["gridX"], room["gridY"]) == (3, -1)
    assert room["currency"] == {"gold": 0, "silver": 0, "copper": 0}
    assert "npcs" not in room


def test_npc_legacy_template_defaults():
    """Templates without maxHealth start at full health with default damage."""
    rat = NPC_TEMPLATES.apply_defaults(sample_documents.NPC_TEMPLATES[1])
    assert rat["maxHealth"] == 12
    assert rat["damage"] == [1, 3]
    assert rat["experienceValue"] == 50
    assert "merchant" not in rat


def test_npc_damage_range_columns():
    row = NPC_TEMPLATES.to_row(sample_documents.NPC_TEMPLATES[0])
    assert (row["damage_min"], row["damage_max"]) == (4, 9)
    assert row["merchant"] == 0
    assert NPC_TEMPLATES.from_row(row)["damage"] == [4, 9]


def test_npc_max_health_defaults_from_row_health():
    """A NULL max_health column falls back to the row's health."""
    row = NPC_TEMPLATES.to_row(sample_documents.NPC_TEMPLATES[0])
    row["health"] = 70
    row["max_health"] = None
    assert NPC_TEMPLATES.from_row(row)["maxHealth"] == 70


def test_item_instance_requires_template():
    """An instance without templateId cannot be stored."""
    with pytest.raises(SerializationError) as excinfo:
        ITEM_INSTANCES.to_row({"instanceId": "orphan-1"})
    assert excinfo.value.field == "templateId"
    assert excinfo.value.record_key == "orphan-1"


def test_item_instance_history_timestamps_are_normalised():
    instance = ITEM_INSTANCES.apply_defaults(
        {
            "instanceId": "torch-3",
            "templateId": "torch",
            "created": "2024-01-20T14:00:00+02:00",
            "history": [{"event": "created", "timestamp": "2024-01-20T14:00:00+02:00"}],
        }
    )
    assert instance["created"] == "2024-01-20T12:00:00.000Z"
    assert instance["history"][0]["timestamp"] == "2024-01-20T12:00:00.000Z"
    assert instance["createdBy"] == "system"


def test_area_update_keeps_creation_time():
    """Re-importing an area never rewrites its creation time."""
    assert "created" not in AREAS.update_columns
    assert "modified" in AREAS.update_columns


def test_bug_report_logs_are_split_into_columns():
    report = sample_documents.BUG_REPORTS["reports"][0]
    row = BUG_REPORTS.to_row(report)
    assert row["logs_raw"] == "raw log text"
    assert row["logs_user"] == "user log text"
    assert row["solved"] == 1
    assert row["extra_fields"] is None


def test_bug_report_without_logs_has_no_logs_key():
    report = BUG_REPORTS.from_row(BUG_REPORTS.to_row({"id": "bug-2", "report": "typo"}))
    assert "logs" not in report
    assert report["solved"] is False
    assert report["user"] == "unknown"


def test_snake_scores_are_keyed_by_player_and_date():
    """One player can hold several scores."""
    first, second = (SNAKE_SCORES.to_row(score) for score in sample_documents.SNAKE_SCORES["scores"])
    assert SNAKE_SCORES.primary_key == ("username", "date")
    assert SNAKE_SCORES.key_of(first) != SNAKE_SCORES.key_of(second)
    assert SNAKE_SCORES.key_of(first) == "alice|2024-02-10T20:00:00.000Z"


def test_undated_snake_score_gets_a_stable_key():
    """A score without a date always converts to the same key."""
    first = SNAKE_SCORES.to_row({"username": "carol", "score": 5})
    second = SNAKE_SCORES.to_row({"username": "carol", "score": 9})
    assert first["date"] == second["date"] == "1970-01-01T00:00:00.000Z"
    assert SNAKE_SCORES.key_of(first) == SNAKE_SCORES.key_of(second)


def test_mud_config_defaults_document():
    """A missing game configuration is seeded with the built-in defaults."""
    defaults = MUD_CONFIG.defaults_document()
    assert defaults["dataFiles"] == DEFAULT_DATA_FILES
    assert defaults["game"] == {
        "startingRoom": "town-square",
        "maxPlayers": 100,
        "idleTimeout": 30,
        "maxPasswordAttempts": 5,
    }
    assert defaults["advanced"]["allowRegistration"] is True
    assert defaults["advanced"]["logLevel"] == "info"


def test_singleton_rows_use_fixed_key():
    row = MUD_CONFIG.to_row(sample_documents.MUD_CONFIG)
    assert row["key"] == "singleton"
    assert row["game_max_players"] == 50
    assert row["advanced_allow_registration"] == 0
    assert MUD_CONFIG.is_singleton
    assert MUD_CONFIG.primary_key == ("key",)


def test_gametimer_defaults_document():
    assert GAMETIMER_CONFIG.defaults_document() == {"tickInterval": 6000, "saveInterval": 10}
