"""
inkengine/project.py -- Project snapshots.

A snapshot is the JSON the persistence layer hands over for one project:
the entity collections, the relationship-table rows and the authored
connections, keyed the way the REST endpoints spell them
(``timelineEvents``, ``characterMagicSystems``, ...).

Malformed rows are skipped with a warning instead of rejecting the whole
snapshot, so one bad record never hides a project from search.

Usage::

    from inkengine.project import load_project

    project = load_project("worlds/aldara.json")
    search_across_entities("fire", **project.collections())
"""

from __future__ import annotations

import logging
import os
from itertools import chain
from typing import Any, Iterator, Optional

from pydantic import Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from inkengine.errors import InkEngineError
from inkengine.models.base import (
    Character,
    CharacterMagicSystem,
    CharacterRelationship,
    Entity,
    EntityConnection,
    InkModel,
    Location,
    LocationHierarchy,
    LoreEntityReference,
    LoreEntry,
    MagicSystem,
    Note,
    RelationshipRow,
    TimelineEvent,
    TimelineEventCharacter,
)
from inkengine.utils import safe_read_json, safe_write_json

logger = logging.getLogger(__name__)

_ENTITY_COLLECTIONS: dict[str, type[Entity]] = {
    "characters": Character,
    "locations": Location,
    "timeline_events": TimelineEvent,
    "magic_systems": MagicSystem,
    "lore_entries": LoreEntry,
    "notes": Note,
}

_RELATIONSHIP_COLLECTIONS: dict[str, type[RelationshipRow]] = {
    "character_magic_systems": CharacterMagicSystem,
    "timeline_event_characters": TimelineEventCharacter,
    "character_relationships": CharacterRelationship,
    "lore_entity_references": LoreEntityReference,
    "location_hierarchies": LocationHierarchy,
}

_ITEM_MODELS: dict[str, type[InkModel]] = {
    **_ENTITY_COLLECTIONS,
    **_RELATIONSHIP_COLLECTIONS,
    "connections": EntityConnection,
}


class ProjectData(InkModel):
    """Everything the engine needs to know about one project."""

    id: Optional[int] = None
    title: str = ""

    characters: list[Character] = Field(default_factory=list)
    locations: list[Location] = Field(default_factory=list)
    timeline_events: list[TimelineEvent] = Field(default_factory=list)
    magic_systems: list[MagicSystem] = Field(default_factory=list)
    lore_entries: list[LoreEntry] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)

    character_magic_systems: list[CharacterMagicSystem] = Field(default_factory=list)
    timeline_event_characters: list[TimelineEventCharacter] = Field(default_factory=list)
    character_relationships: list[CharacterRelationship] = Field(default_factory=list)
    lore_entity_references: list[LoreEntityReference] = Field(default_factory=list)
    location_hierarchies: list[LocationHierarchy] = Field(default_factory=list)

    connections: list[EntityConnection] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _drop_malformed_rows(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for name, model in _ITEM_MODELS.items():
            key = to_camel(name) if to_camel(name) in cleaned else name
            items = cleaned.get(key)
            if items is None:
                continue
            if not isinstance(items, list):
                logger.warning("Ignoring '%s': expected a list, got %s", key, type(items).__name__)
                cleaned.pop(key)
                continue
            kept = []
            for index, item in enumerate(items):
                try:
                    kept.append(model.model_validate(item))
                except PydanticValidationError as exc:
                    logger.warning(
                        "Skipping malformed %s[%d]: %s",
                        key, index, exc.errors()[0].get("msg", exc),
                    )
            cleaned[key] = kept
        return cleaned

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def iter_entities(self) -> Iterator[Entity]:
        return chain.from_iterable(getattr(self, name) for name in _ENTITY_COLLECTIONS)

    def iter_relationship_rows(self) -> Iterator[RelationshipRow]:
        return chain.from_iterable(getattr(self, name) for name in _RELATIONSHIP_COLLECTIONS)

    def collections(self) -> dict[str, list[Entity]]:
        """Keyword arguments for ``search_across_entities``."""
        return {name: list(getattr(self, name)) for name in _ENTITY_COLLECTIONS}

    def available_entities(self) -> dict[str, list[dict[str, Any]]]:
        """The id/display-name listing used when authoring connections."""
        listing: dict[str, list[dict[str, Any]]] = {}
        for name, model in _ENTITY_COLLECTIONS.items():
            listing[name] = [
                {"id": entity.id, model.TITLE_FIELD: entity.display_title}
                for entity in getattr(self, name)
                if entity.id is not None
            ]
        return listing

    def add_connection(self, connection: EntityConnection) -> None:
        self.connections.append(connection)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Snapshot I/O
# ---------------------------------------------------------------------------

def load_project(path) -> ProjectData:
    """Load a project snapshot from *path*.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    InkEngineError
        If the file is unreadable or the JSON is not a project object.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Project snapshot not found: {path}")
    data = safe_read_json(path)
    if data is None:
        raise InkEngineError(f"Project snapshot is unreadable: {path}")
    if not isinstance(data, dict):
        raise InkEngineError(f"{path} does not contain a project object")
    try:
        project = ProjectData.model_validate(data)
    except PydanticValidationError as exc:
        raise InkEngineError(f"{path} is not a valid project snapshot: {exc}") from exc
    logger.info(
        "Loaded project '%s' from %s (%d entities, %d connections)",
        project.title, path,
        sum(1 for _ in project.iter_entities()), len(project.connections),
    )
    return project


def save_project(project: ProjectData, path) -> None:
    """Atomically write *project* to *path* as JSON."""
    safe_write_json(path, project.to_json_dict())
    logger.info("Saved project '%s' to %s", project.title, path)
