"""
Shared pytest fixtures for the InkAlchemy engine test suite.

Provides:
    - sample_characters / sample_locations / ...: REST-shaped entity rows
    - sample_project_data: a full project snapshot dict (camelCase keys)
    - project_file: the snapshot written to a temporary JSON file
"""

import json
import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure inkengine/ is importable regardless of where pytest is invoked
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


LORE_CONTENT = (
    "When the ember core dims, a child of fire will rise from the ashes of "
    "Korr and carry the last flame across the sea to the drowned temple."
)


# ---------------------------------------------------------------------------
# Entity rows
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_characters():
    return [
        {
            "id": 1,
            "projectId": 1,
            "name": "Elena Brightflame",
            "description": "A young fire mage from Arcanum City",
            "role": "protagonist",
            "backstory": "Orphaned during the war",
            "imageUrl": None,
        },
        {
            "id": 2,
            "projectId": 1,
            "name": "Marcus Vale",
            "description": "A grizzled soldier",
            "role": "mentor",
            "backstory": "Veteran of the siege of Korr",
        },
    ]


@pytest.fixture
def sample_locations():
    return [
        {
            "id": 4,
            "projectId": 1,
            "name": "Arcanum City",
            "type": "City",
            "description": "A city of scholars",
            "geography": "Built on a volcanic ridge",
            "culture": "Scholarly",
            "significance": "Capital",
        },
        {
            "id": 5,
            "projectId": 1,
            "name": "Emberfall Academy",
            "type": "Academy",
            "description": "Where fire mages train",
            "significance": "School",
        },
    ]


@pytest.fixture
def sample_timeline_events():
    return [
        {
            "id": 7,
            "projectId": 1,
            "title": "The Burning of Korr",
            "description": "Fire consumed the city",
            "category": "battle",
            "location": "Korr",
            "characters": ["Marcus Vale"],
            "order": 1,
        },
    ]


@pytest.fixture
def sample_magic_systems():
    return [
        {
            "id": 3,
            "projectId": 1,
            "name": "Fire Magic",
            "category": "magic",
            "description": "Manipulation of flame",
            "rules": "Fire requires fuel",
            "source": "The Ember Core",
        },
    ]


@pytest.fixture
def sample_lore_entries():
    return [
        {
            "id": 9,
            "projectId": 1,
            "title": "The Ember Prophecy",
            "content": LORE_CONTENT,
            "category": "Prophecies",
        },
    ]


@pytest.fixture
def sample_notes():
    return [
        {
            "id": 11,
            "projectId": 1,
            "title": "Fire scene ideas",
            "content": "More fire",
            "category": "Plot",
        },
    ]


# ---------------------------------------------------------------------------
# Project snapshot
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_project_data(
    sample_characters,
    sample_locations,
    sample_timeline_events,
    sample_magic_systems,
    sample_lore_entries,
    sample_notes,
):
    """A complete snapshot in the REST/export shape.

    Connection edges, in load order:
        character 1 -uses-> magic 3
        character 2 -witnesses-> timeline 7
        character 2 -mentor-> character 1
        lore 9 -references-> character 1
        location 5 -part_of-> location 4
        character 1 -lives_in-> location 4
    """
    return {
        "id": 1,
        "title": "The Ember Chronicles",
        "characters": sample_characters,
        "locations": sample_locations,
        "timelineEvents": sample_timeline_events,
        "magicSystems": sample_magic_systems,
        "loreEntries": sample_lore_entries,
        "notes": sample_notes,
        "characterMagicSystems": [
            {"id": 1, "characterId": 1, "magicSystemId": 3, "proficiencyLevel": "advanced"},
        ],
        "timelineEventCharacters": [
            {"id": 1, "timelineEventId": 7, "characterId": 2, "role": "witness"},
        ],
        "characterRelationships": [
            {
                "id": 1,
                "characterId": 2,
                "relatedCharacterId": 1,
                "relationshipType": "mentor",
                "description": "Trained her after the war",
            },
        ],
        "loreEntityReferences": [
            {"id": 1, "loreEntryId": 9, "entityType": "character", "entityId": 1, "relevance": "central"},
        ],
        "locationHierarchies": [
            {"id": 1, "locationId": 5, "parentLocationId": 4, "hierarchyType": "part_of"},
        ],
        "connections": [
            {
                "sourceType": "character",
                "sourceId": 1,
                "targetType": "location",
                "targetId": 4,
                "connectionType": "lives_in",
            },
        ],
    }


@pytest.fixture
def project_file(tmp_path, sample_project_data):
    """Write the sample snapshot to a temporary file and return its path."""
    path = tmp_path / "ember-chronicles.json"
    with open(str(path), "w", encoding="utf-8") as fh:
        json.dump(sample_project_data, fh, indent=2)
    return str(path)


@pytest.fixture
def sample_project(sample_project_data):
    from inkengine.project import ProjectData
    return ProjectData.model_validate(sample_project_data)
