"""
inkengine/models/ -- Pydantic v2 models for the InkAlchemy engine.

Submodules:
    base        Entity variants, search/tag results, connection edges and
                relationship-table rows.
"""

from inkengine.models.base import (
    ENTITY_MODELS,
    ENTITY_TYPES,
    RELATIONSHIP_MODELS,
    AnyEntity,
    Character,
    CharacterMagicSystem,
    CharacterRelationship,
    Entity,
    EntityConnection,
    EntityType,
    LocationHierarchy,
    Location,
    LoreEntityReference,
    LoreEntry,
    MagicSystem,
    Note,
    RelationshipRow,
    SearchResult,
    TagRecommendation,
    TimelineEvent,
    TimelineEventCharacter,
)

__all__ = [
    "ENTITY_MODELS",
    "ENTITY_TYPES",
    "RELATIONSHIP_MODELS",
    "AnyEntity",
    "Character",
    "CharacterMagicSystem",
    "CharacterRelationship",
    "Entity",
    "EntityConnection",
    "EntityType",
    "Location",
    "LocationHierarchy",
    "LoreEntityReference",
    "LoreEntry",
    "MagicSystem",
    "Note",
    "RelationshipRow",
    "SearchResult",
    "TagRecommendation",
    "TimelineEvent",
    "TimelineEventCharacter",
]
