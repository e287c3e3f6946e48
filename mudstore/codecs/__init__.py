"""
Entity codec registry.

REGISTRY lists every persisted entity in the order migrations process them:
definitions before the state that refers to them, singletons last.

Usage:
    from mudstore.codecs import REGISTRY, get_codec

    row = get_codec("users").to_row(user_document)
"""

from mudstore.exceptions import NotFoundError

from .abilities import ABILITIES
from .admin import ADMINS, BUG_REPORTS, SNAKE_SCORES
from .areas import AREAS
from .base import MISSING, EntityCodec
from .game_config import GAMETIMER_CONFIG, MUD_CONFIG
from .items import ITEM_INSTANCES, ITEM_TEMPLATES
from .npcs import NPC_TEMPLATES
from .room_state import MERCHANT_STATES, ROOM_STATES
from .rooms import ROOMS
from .users import USERS

__all__ = ["MISSING", "REGISTRY", "EntityCodec", "get_codec"]

REGISTRY: tuple[EntityCodec, ...] = (
    USERS,
    ROOMS,
    NPC_TEMPLATES,
    ITEM_TEMPLATES,
    ITEM_INSTANCES,
    AREAS,
    ABILITIES,
    ROOM_STATES,
    MERCHANT_STATES,
    ADMINS,
    BUG_REPORTS,
    SNAKE_SCORES,
    MUD_CONFIG,
    GAMETIMER_CONFIG,
)

_BY_NAME = {codec.name: codec for codec in REGISTRY}


def get_codec(name: str) -> EntityCodec:
    """
    Look up a registered codec by entity name.

    Raises:
        NotFoundError: If no codec has that name
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise NotFoundError(
            f"No codec registered for entity '{name}'",
            resource_type="entity",
            resource_id=name,
        ) from None
