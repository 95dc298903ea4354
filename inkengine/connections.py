"""
inkengine/connections.py -- Connection vocabulary and connection authoring.

Every connection is a directed edge ``(source_type, source_id) --type-->
(target_type, target_id)``.  The permitted connection types depend on the
*ordered* pair of entity types; pairs without a specific vocabulary fall
back to ``related_to / references / mentions``.

The table is directional and asymmetric: ``character -> location`` has its
own vocabulary while ``location -> character`` uses the fallback.

Usage::

    from inkengine.connections import author_connection, get_connection_types

    get_connection_types("character", "magic")
    # ['uses', 'studies', 'masters', 'created', 'opposes']

    conn = author_connection(
        "character", 1, "location", 4, "lives_in",
        available_entities={"locations": [{"id": 4, "name": "Arcanum City"}]},
        on_add_connection=store.save,
    )
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from inkengine.errors import NotFoundError, ValidationError
from inkengine.models.base import ENTITY_TYPES, EntityConnection

logger = logging.getLogger(__name__)

CONNECTION_TYPES: Mapping[tuple[str, str], tuple[str, ...]] = MappingProxyType({
    ("character", "character"): (
        "friend", "enemy", "ally", "rival", "family", "mentor", "student", "romantic",
    ),
    ("character", "location"): ("lives_in", "from", "visits", "owns", "works_at"),
    ("character", "magic"): ("uses", "studies", "masters", "created", "opposes"),
    ("character", "timeline"): ("participates", "witnesses", "causes", "affected_by"),
    ("location", "location"): ("contains", "adjacent_to", "connected_to", "part_of"),
    ("timeline", "location"): ("occurs_at", "affects", "originates_from"),
})

FALLBACK_CONNECTION_TYPES: tuple[str, ...] = ("related_to", "references", "mentions")

# Entity type -> key of the caller's available-entities listing
COLLECTION_KEYS: Mapping[str, str] = MappingProxyType({
    "character": "characters",
    "location": "locations",
    "timeline": "timeline_events",
    "magic": "magic_systems",
    "lore": "lore_entries",
    "note": "notes",
})

# REST/JSON spelling of the same listing keys
_CAMEL_COLLECTION_KEYS: Mapping[str, str] = MappingProxyType({
    "timeline": "timelineEvents",
    "magic": "magicSystems",
    "lore": "loreEntries",
})


def get_connection_types(source_type: str, target_type: str) -> list[str]:
    """Return the permitted connection types for the ordered pair."""
    return list(CONNECTION_TYPES.get((source_type, target_type), FALLBACK_CONNECTION_TYPES))


def format_connection_type(connection_type: str) -> str:
    """Display label for a connection type (``"lives_in"`` -> ``"lives in"``).

    Only the first underscore is replaced, matching how the connections
    panel has always rendered labels.
    """
    return connection_type.replace("_", " ", 1)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def validate_connection_type(source_type: str, target_type: str, connection_type: Optional[str]) -> None:
    """Raise ``ValidationError`` unless *connection_type* is allowed for the pair."""
    allowed = get_connection_types(source_type, target_type)
    if not connection_type or connection_type not in allowed:
        raise ValidationError("connectionType", allowed, connection_type)


def build_connection(
    source_type: str,
    source_id: int,
    target_type: str,
    target_id: int,
    connection_type: Optional[str],
    description: Optional[str] = None,
    *,
    source_name: Optional[str] = None,
    target_name: Optional[str] = None,
) -> EntityConnection:
    """Validating factory for ``EntityConnection``.

    Raises
    ------
    ValidationError
        If *connection_type* is missing or not in
        ``get_connection_types(source_type, target_type)``, or if an entity
        type is not one of the known variants.
    """
    for field, value in (("sourceType", source_type), ("targetType", target_type)):
        if value not in ENTITY_TYPES:
            raise ValidationError(field, list(ENTITY_TYPES), value)
    validate_connection_type(source_type, target_type, connection_type)
    try:
        return EntityConnection(
            source_type=source_type,
            source_id=source_id,
            target_type=target_type,
            target_id=target_id,
            connection_type=connection_type,
            description=description or None,
            source_name=source_name,
            target_name=target_name,
        )
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error.get("loc") else "connection"
        raise ValidationError(field, [], str(error.get("input") or "")) from exc


# ---------------------------------------------------------------------------
# Authoring
# ---------------------------------------------------------------------------

def _listing_for(available_entities: Mapping[str, Iterable[Any]], entity_type: str) -> Iterable[Any]:
    for key in (COLLECTION_KEYS.get(entity_type), _CAMEL_COLLECTION_KEYS.get(entity_type), entity_type):
        if key and key in available_entities:
            return available_entities[key] or ()
    return ()


def _entry_value(entry: Any, field: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(field)
    return getattr(entry, field, None)


def resolve_entity_name(
    available_entities: Mapping[str, Iterable[Any]],
    entity_type: str,
    entity_id: Any,
) -> str:
    """Look up the display name of an entity in the caller's listing.

    Ids are compared as strings since they usually come from form values.

    Raises
    ------
    NotFoundError
        If no entry of *entity_type* has the given id.
    """
    wanted = str(entity_id)
    for entry in _listing_for(available_entities, entity_type):
        if str(_entry_value(entry, "id")) == wanted:
            name = _entry_value(entry, "name")
            if name is None:
                name = _entry_value(entry, "title")
            return name or ""
    raise NotFoundError(entity_type, entity_id)


def author_connection(
    source_type: str,
    source_id: int,
    target_type: str,
    target_id: int,
    connection_type: Optional[str],
    available_entities: Mapping[str, Iterable[Any]],
    on_add_connection: Optional[Callable[[EntityConnection], Any]] = None,
    description: Optional[str] = None,
    source_name: Optional[str] = None,
) -> EntityConnection:
    """Resolve the target, validate, build the connection and hand it off.

    Parameters
    ----------
    source_type, source_id : str, int
        The entity the connection is authored from.
    target_type, target_id : str, int
        The entity being connected to.  Must appear in *available_entities*.
    connection_type : str
        Must be permitted for ``(source_type, target_type)``.
    available_entities : mapping
        Listing keyed by collection name (``"characters"``,
        ``"timeline_events"`` or ``"timelineEvents"``, ...) or entity type;
        entries need ``id`` and ``name`` or ``title``.
    on_add_connection : callable, optional
        Receives the new ``EntityConnection``.  Persisting it and assigning
        an id is the callback's job.
    description : str, optional
        Free-text note stored on the edge.
    source_name : str, optional
        Display name of the source entity.

    Returns
    -------
    EntityConnection
        The connection passed to the callback.

    Raises
    ------
    NotFoundError
        If the target cannot be resolved.
    ValidationError
        If the connection type is missing or not permitted.
    """
    target_name = resolve_entity_name(available_entities, target_type, target_id)
    connection = build_connection(
        source_type, source_id, target_type, target_id, connection_type, description,
        source_name=source_name, target_name=target_name,
    )
    logger.info(
        "Authored connection %s:%s -%s-> %s:%s",
        source_type, source_id, connection_type, target_type, target_id,
    )
    if on_add_connection is not None:
        on_add_connection(connection)
    return connection


def group_connections_by_target_type(
    connections: Iterable[EntityConnection],
) -> dict[str, list[EntityConnection]]:
    """Group connections by target type, keeping first-seen group order."""
    grouped: dict[str, list[EntityConnection]] = {}
    for connection in connections:
        grouped.setdefault(connection.target_type, []).append(connection)
    return grouped
