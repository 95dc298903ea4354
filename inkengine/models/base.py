"""
inkengine/models/base.py -- Pydantic v2 models for entities, results and edges.

Entity rows arrive from the project's REST layer in camelCase
(``imageUrl``, ``projectId``, ``timelineEventId``) and from Python callers in
snake_case; every model accepts both and keeps unknown columns as extras so
that schema additions upstream never break validation here.

The six entity variants form a closed tagged union.  Each variant declares
its own accessor table (``SEARCH_FIELDS``, ``TITLE_FIELD``,
``DESCRIPTION_FIELD``, ``CATEGORY_FIELD``) instead of relying on runtime
"does this field exist" checks.

Usage::

    from inkengine.models.base import Character, ENTITY_MODELS

    hero = Character.model_validate({"id": 1, "name": "Elena", "role": "protagonist"})
    hero.display_title          # "Elena"
    ENTITY_MODELS["character"]  # Character
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EntityType = Literal["character", "location", "timeline", "magic", "lore", "note"]

ENTITY_TYPES: tuple[str, ...] = ("character", "location", "timeline", "magic", "lore", "note")

# Lore content shown in a search result is clipped to this many characters.
LORE_DESCRIPTION_LIMIT = 100


class InkModel(BaseModel):
    """Shared configuration: camelCase aliases, snake_case names, extras kept.

    Numeric values in text columns are read as their string form.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )


def as_text(value: Any) -> str:
    """Flatten a field value to a single string ("" for None)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value if v)
    return str(value)


# ------------------------------------------------------------------
# Entity variants
# ------------------------------------------------------------------

class Entity(InkModel):
    """Common base for the worldbuilding entity variants."""

    entity_type: ClassVar[str] = ""
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ()
    TITLE_FIELD: ClassVar[str] = "name"
    DESCRIPTION_FIELD: ClassVar[str] = "description"
    CATEGORY_FIELD: ClassVar[str] = "category"

    id: Optional[int] = None
    project_id: Optional[int] = None

    def field_text(self, name: str) -> str:
        """Return the text of field *name*, or ``""`` if absent or null."""
        return as_text(getattr(self, name, None))

    @property
    def display_title(self) -> str:
        return self.field_text(self.TITLE_FIELD)

    @property
    def search_description(self) -> Optional[str]:
        return getattr(self, self.DESCRIPTION_FIELD, None)

    @property
    def search_category(self) -> Optional[str]:
        return getattr(self, self.CATEGORY_FIELD, None)


class Character(Entity):
    entity_type: ClassVar[str] = "character"
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("name", "description", "role", "backstory")
    CATEGORY_FIELD: ClassVar[str] = "role"

    name: str = ""
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    description: Optional[str] = None
    appearance: Optional[str] = None
    personality: Optional[str] = None
    backstory: Optional[str] = None
    role: Optional[str] = None
    age: Optional[str] = None
    race: Optional[str] = None
    weapons: Optional[str] = None


class Location(Entity):
    entity_type: ClassVar[str] = "location"
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("name", "description", "geography", "culture")
    CATEGORY_FIELD: ClassVar[str] = "significance"

    name: str = ""
    type: Optional[str] = "Other"
    description: Optional[str] = None
    geography: Optional[str] = None
    culture: Optional[str] = None
    significance: Optional[str] = None


class TimelineEvent(Entity):
    entity_type: ClassVar[str] = "timeline"
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("title", "description", "category", "location")
    TITLE_FIELD: ClassVar[str] = "title"

    title: str = ""
    description: Optional[str] = None
    date: Optional[str] = None
    category: Optional[str] = None
    importance: Optional[str] = "medium"
    location: Optional[str] = None  # location *name*, not an id
    characters: Optional[list[str]] = Field(default_factory=list)  # character names
    order: int = 0


class MagicSystem(Entity):
    entity_type: ClassVar[str] = "magic"
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("name", "description", "rules", "source")

    name: str = ""
    category: Optional[str] = "magic"
    description: Optional[str] = None
    rules: Optional[str] = None
    limitations: Optional[str] = None
    source: Optional[str] = None
    cost: Optional[str] = None


class LoreEntry(Entity):
    entity_type: ClassVar[str] = "lore"
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("title", "content", "category")
    TITLE_FIELD: ClassVar[str] = "title"
    DESCRIPTION_FIELD: ClassVar[str] = "content"

    title: str = ""
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Any] = None

    @property
    def search_description(self) -> Optional[str]:
        """First ``LORE_DESCRIPTION_LIMIT`` characters of the content plus an ellipsis."""
        if self.content is None:
            return None
        return self.content[:LORE_DESCRIPTION_LIMIT] + "..."


class Note(Entity):
    entity_type: ClassVar[str] = "note"
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("title", "content", "category")
    TITLE_FIELD: ClassVar[str] = "title"
    DESCRIPTION_FIELD: ClassVar[str] = "content"

    title: str = ""
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Any] = None


AnyEntity = Union[Character, Location, TimelineEvent, MagicSystem, LoreEntry, Note]

ENTITY_MODELS: dict[str, type[Entity]] = {
    model.entity_type: model
    for model in (Character, Location, TimelineEvent, MagicSystem, LoreEntry, Note)
}


# ------------------------------------------------------------------
# Derived results
# ------------------------------------------------------------------

class SearchResult(InkModel):
    """One ranked hit from the cross-entity search."""

    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    type: EntityType
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    relevance: int = Field(gt=0)
    matched_fields: list[str] = Field(default_factory=list)


class TagRecommendation(InkModel):
    """A candidate tag with its bounded keyword-match confidence."""

    model_config = ConfigDict(extra="forbid")

    tag: str
    confidence: float = Field(ge=0.0, le=0.95)
    matched_keywords: list[str] = Field(default_factory=list, max_length=3)


# ------------------------------------------------------------------
# Connection graph edges
# ------------------------------------------------------------------

class EntityConnection(InkModel):
    """A directed, typed edge between two entities.

    ``source_name`` / ``target_name`` are display names resolved when the
    connection is authored.  ``qualifier`` carries the semantic qualifier
    of the relationship-table row the edge was loaded from (proficiency,
    role, relevance, ...), if any.
    """

    source_type: EntityType
    source_id: int
    target_type: EntityType
    target_id: int
    connection_type: str
    description: Optional[str] = None
    source_name: Optional[str] = None
    target_name: Optional[str] = None
    qualifier: Optional[str] = None

    @property
    def source_key(self) -> tuple[str, int]:
        return (self.source_type, self.source_id)

    @property
    def target_key(self) -> tuple[str, int]:
        return (self.target_type, self.target_id)


# ------------------------------------------------------------------
# Relationship tables
# ------------------------------------------------------------------

ProficiencyLevel = Literal["beginner", "intermediate", "advanced", "master"]
RelationshipType = Literal[
    "friend", "enemy", "ally", "rival", "family", "mentor", "student", "romantic",
]
LoreRelevance = Literal["mentioned", "central", "background"]
HierarchyType = Literal["contains", "part_of", "adjacent_to", "connected_to"]
ReferencedEntityType = Literal["character", "location", "timeline_event", "magic_system"]

# lore_entity_references.entity_type uses table-style names
_REFERENCE_TYPE_TO_ENTITY_TYPE: dict[str, str] = {
    "character": "character",
    "location": "location",
    "timeline_event": "timeline",
    "magic_system": "magic",
}


class RelationshipRow(InkModel):
    """Base for rows of the many-to-many relationship tables."""

    TABLE_NAME: ClassVar[str] = ""

    id: Optional[int] = None

    def to_connection(self) -> EntityConnection:
        raise NotImplementedError


class CharacterMagicSystem(RelationshipRow):
    TABLE_NAME: ClassVar[str] = "character_magic_systems"

    character_id: int
    magic_system_id: int
    proficiency_level: ProficiencyLevel = "beginner"
    notes: Optional[str] = None

    def to_connection(self) -> EntityConnection:
        return EntityConnection(
            source_type="character",
            source_id=self.character_id,
            target_type="magic",
            target_id=self.magic_system_id,
            connection_type="uses",
            description=self.notes,
            qualifier=self.proficiency_level,
        )


class TimelineEventCharacter(RelationshipRow):
    TABLE_NAME: ClassVar[str] = "timeline_event_characters"

    timeline_event_id: int
    character_id: int
    role: Optional[str] = None  # protagonist, antagonist, witness, victim, ...

    def to_connection(self) -> EntityConnection:
        return EntityConnection(
            source_type="character",
            source_id=self.character_id,
            target_type="timeline",
            target_id=self.timeline_event_id,
            connection_type="witnesses" if self.role == "witness" else "participates",
            qualifier=self.role,
        )


class CharacterRelationship(RelationshipRow):
    TABLE_NAME: ClassVar[str] = "character_relationships"

    character_id: int
    related_character_id: int
    relationship_type: RelationshipType
    description: Optional[str] = None
    is_active: bool = True

    def to_connection(self) -> EntityConnection:
        return EntityConnection(
            source_type="character",
            source_id=self.character_id,
            target_type="character",
            target_id=self.related_character_id,
            connection_type=self.relationship_type,
            description=self.description,
        )


class LoreEntityReference(RelationshipRow):
    TABLE_NAME: ClassVar[str] = "lore_entity_references"

    lore_entry_id: int
    entity_type: ReferencedEntityType
    entity_id: int
    relevance: LoreRelevance = "mentioned"
    description: Optional[str] = None

    def to_connection(self) -> EntityConnection:
        return EntityConnection(
            source_type="lore",
            source_id=self.lore_entry_id,
            target_type=_REFERENCE_TYPE_TO_ENTITY_TYPE[self.entity_type],
            target_id=self.entity_id,
            connection_type="references",
            description=self.description,
            qualifier=self.relevance,
        )


class LocationHierarchy(RelationshipRow):
    TABLE_NAME: ClassVar[str] = "location_hierarchies"

    location_id: int
    parent_location_id: int
    hierarchy_type: HierarchyType = "contains"

    def to_connection(self) -> EntityConnection:
        # "contains" reads parent -> child; every other type reads child -> parent
        if self.hierarchy_type == "contains":
            source, target = self.parent_location_id, self.location_id
        else:
            source, target = self.location_id, self.parent_location_id
        return EntityConnection(
            source_type="location",
            source_id=source,
            target_type="location",
            target_id=target,
            connection_type=self.hierarchy_type,
        )


RELATIONSHIP_MODELS: dict[str, type[RelationshipRow]] = {
    model.TABLE_NAME: model
    for model in (
        CharacterMagicSystem,
        TimelineEventCharacter,
        CharacterRelationship,
        LoreEntityReference,
        LocationHierarchy,
    )
}
