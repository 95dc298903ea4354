"""
inkengine/search.py -- Cross-entity relevance search.

Scores every supplied entity against the query terms with a simple additive
substring formula and returns the best hits across all entity types.

Scoring (per field, per term, all additive):

    field value == term            +10
    field value startswith term     +5
    term is a substring of value    +2

The whole field value is compared as one string -- it is not split into
words -- so on multi-word fields only the substring rule fires reliably.
No stemming is applied.

The search is a pure function over in-memory collections.  It keeps no cache;
callers that run it on every keystroke are expected to debounce themselves.

Usage::

    from inkengine.search import search_across_entities

    results = search_across_entities(
        "fire mage",
        characters=characters,
        magic_systems=magic_systems,
    )
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from inkengine.models.base import (
    Character,
    Entity,
    LoreEntry,
    Location,
    MagicSystem,
    SearchResult,
    TimelineEvent,
    as_text,
)

logger = logging.getLogger(__name__)

MAX_RESULTS = 20

# Queries whose stripped length is at most this are treated as noise.
MIN_QUERY_LENGTH = 1


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------

def _field_value(item: Any, field: str) -> str:
    """Lowercased text of *field* on a model or mapping ("" when absent)."""
    if isinstance(item, Entity):
        return item.field_text(field).lower()
    if isinstance(item, Mapping):
        value = item.get(field)
    else:
        value = getattr(item, field, None)
    return as_text(value).lower()


def score(search_terms: Sequence[str], item: Any, fields: Sequence[str]) -> int:
    """Return the additive relevance of *item* for *search_terms*.

    Parameters
    ----------
    search_terms : sequence of str
        Lowercase query tokens, each longer than one character.
    item : Entity or mapping
        The entity to score.  Missing or null fields count as ``""``.
    fields : sequence of str
        Field names to inspect, in order.

    Returns
    -------
    int
        The summed score over every (field, term) pair.
    """
    relevance = 0
    for field in fields:
        value = _field_value(item, field)
        for term in search_terms:
            if value == term:
                relevance += 10
            elif value.startswith(term):
                relevance += 5
            elif term in value:
                relevance += 2
    return relevance


def matched_fields(search_terms: Sequence[str], item: Any, fields: Sequence[str]) -> list[str]:
    """Return the fields (in *fields* order) containing at least one term."""
    matched: list[str] = []
    for field in fields:
        value = _field_value(item, field)
        if any(term in value for term in search_terms):
            matched.append(field)
    return matched


def normalize_query(query: str) -> list[str]:
    """Lowercase *query*, split on single spaces and drop 0-1 character tokens."""
    return [term for term in query.lower().split(" ") if len(term) > 1]


# ---------------------------------------------------------------------------
# Cross-entity search
# ---------------------------------------------------------------------------

def _coerce(model: type[Entity], item: Any) -> Optional[Entity]:
    """Return *item* as an instance of *model*, or None if it cannot be.

    Columns that fail validation are dropped and the row is validated
    again, so one unreadable column never hides an otherwise matching
    entity.
    """
    if isinstance(item, model):
        return item
    try:
        return model.model_validate(item)
    except PydanticValidationError as exc:
        error = exc
    if isinstance(item, Mapping):
        bad = {str(err["loc"][0]) for err in error.errors() if err.get("loc")}
        for name, info in model.model_fields.items():
            if info.alias in bad:
                bad.add(name)
        logger.debug("Ignoring unreadable %s columns %s", model.entity_type, sorted(bad))
        try:
            return model.model_validate({k: v for k, v in item.items() if k not in bad})
        except PydanticValidationError as exc:
            error = exc
    logger.warning(
        "Skipping malformed %s in search: %s",
        model.entity_type, error.errors()[0].get("msg", error),
    )
    return None


def _search_collection(
    search_terms: Sequence[str],
    model: type[Entity],
    items: Optional[Iterable[Any]],
    results: list[SearchResult],
) -> None:
    if not items:
        return
    for raw in items:
        item = _coerce(model, raw)
        if item is None:
            continue
        relevance = score(search_terms, item, model.SEARCH_FIELDS)
        if relevance <= 0:
            continue
        results.append(SearchResult(
            id=item.id,
            type=model.entity_type,
            title=item.display_title,
            description=item.search_description,
            category=item.search_category,
            relevance=relevance,
            matched_fields=matched_fields(search_terms, item, model.SEARCH_FIELDS),
        ))


def search_across_entities(
    query: Any,
    *,
    characters: Optional[Iterable[Any]] = None,
    locations: Optional[Iterable[Any]] = None,
    timeline_events: Optional[Iterable[Any]] = None,
    magic_systems: Optional[Iterable[Any]] = None,
    lore_entries: Optional[Iterable[Any]] = None,
    notes: Optional[Iterable[Any]] = None,
) -> list[SearchResult]:
    """Search every supplied collection and return the ranked hits.

    Collections are scanned in a fixed order (characters, locations,
    timeline events, magic systems, lore entries) and results are stably
    sorted by descending relevance, so ties keep that scan order.  At most
    ``MAX_RESULTS`` results are returned.

    Notes are accepted so callers can pass a whole project, but they are
    not searched.

    Parameters
    ----------
    query : str
        Free-text query.  Non-string values, or strings whose stripped
        length is one character or less, return ``[]`` immediately.
    characters, locations, timeline_events, magic_systems, lore_entries : iterable, optional
        Entity models or plain dicts (REST row shape).  Missing collections
        are treated as empty.

    Returns
    -------
    list[SearchResult]
        Every result has ``relevance > 0``.
    """
    if not isinstance(query, str) or len(query.strip()) <= MIN_QUERY_LENGTH:
        return []

    search_terms = normalize_query(query)
    if not search_terms:
        return []

    results: list[SearchResult] = []
    _search_collection(search_terms, Character, characters, results)
    _search_collection(search_terms, Location, locations, results)
    _search_collection(search_terms, TimelineEvent, timeline_events, results)
    _search_collection(search_terms, MagicSystem, magic_systems, results)
    _search_collection(search_terms, LoreEntry, lore_entries, results)

    results.sort(key=lambda r: r.relevance, reverse=True)
    logger.debug("Search %r matched %d entities", query, len(results))
    return results[:MAX_RESULTS]
