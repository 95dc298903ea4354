"""
inkengine/tag_recommender.py -- Keyword-driven tag suggestions.

Scores free text against a fixed fantasy/fiction keyword taxonomy and
returns confidence-ranked tag candidates.  Matching is keyword based, not
semantic: a keyword matches wherever it starts at a word boundary, so
``"magic"`` also matches ``"magical"``.

Confidence for a tag with at least one matching keyword::

    min(0.95, total_matches * 0.2 + distinct_keywords * 0.1)

Usage::

    from inkengine.tag_recommender import get_recommended_tags

    get_recommended_tags("The ancient prophecy foretold a great war")
    # ['prophecy', 'ancient', 'war']
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from inkengine.models.base import TagRecommendation

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 8
MAX_MATCHED_KEYWORDS = 3
MAX_CONFIDENCE = 0.95
RECOMMENDATION_THRESHOLD = 0.3
MAX_SUGGESTIONS = 8


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------

TAG_KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "magic": ("magic", "magical", "spell", "enchant", "wizard", "mage", "arcane", "mystical", "sorcery", "enchantment"),
    "ancient": ("ancient", "old", "ages", "centuries", "millennia", "antiquity", "primordial", "elder", "bygone"),
    "war": ("war", "battle", "conflict", "siege", "army", "soldier", "warrior", "combat", "fight", "clash"),
    "prophecy": ("prophecy", "prophecies", "foretold", "predict", "oracle", "vision", "divination", "foreseen"),
    "gods": ("god", "gods", "goddess", "divine", "deity", "celestial", "heavenly", "sacred", "holy"),
    "fire": ("fire", "flame", "burn", "ember", "blaze", "inferno", "heat", "ignite", "scorch"),
    "water": ("water", "ocean", "sea", "river", "lake", "stream", "tide", "wave", "aquatic"),
    "shadow": ("shadow", "dark", "darkness", "shade", "umbra", "eclipse", "twilight", "dusk"),
    "light": ("light", "bright", "radiant", "luminous", "glow", "shine", "beacon", "illuminat"),
    "crystal": ("crystal", "gem", "jewel", "stone", "diamond", "emerald", "ruby", "sapphire"),
    "artifact": ("artifact", "relic", "treasure", "item", "object", "tool", "weapon", "crown"),
    "temple": ("temple", "shrine", "sanctuary", "cathedral", "church", "monastery", "altar"),
    "kingdom": ("kingdom", "realm", "empire", "land", "territory", "domain", "nation", "country"),
    "forest": ("forest", "woods", "tree", "woodland", "grove", "jungle", "wilderness"),
    "mountain": ("mountain", "peak", "summit", "cliff", "hill", "ridge", "highland"),
    "desert": ("desert", "sand", "dune", "oasis", "wasteland", "barren", "arid"),
    "legend": ("legend", "legendary", "myth", "mythical", "tale", "story", "saga", "epic"),
    "hero": ("hero", "champion", "savior", "protagonist", "chosen", "destined"),
    "villain": ("villain", "evil", "dark lord", "antagonist", "corrupt", "malevolent"),
    "power": ("power", "strength", "might", "force", "energy", "ability", "skill"),
    "academy": ("academy", "school", "university", "college", "institution", "learning", "education"),
    "ritual": ("ritual", "ceremony", "rite", "tradition", "custom", "practice", "observance"),
    "curse": ("curse", "cursed", "hex", "jinx", "doom", "bane", "affliction"),
    "blessing": ("blessing", "blessed", "grace", "favor", "benediction", "gift"),
    "spirit": ("spirit", "ghost", "soul", "wraith", "phantom", "essence", "ethereal"),
    "dragon": ("dragon", "drake", "wyrm", "serpent", "beast", "creature", "monster"),
    "festival": ("festival", "celebration", "feast", "holiday", "ceremony", "gathering"),
    "order": ("order", "organization", "guild", "brotherhood", "sisterhood", "society"),
    "scroll": ("scroll", "tome", "book", "manuscript", "text", "writing", "document"),
    "tower": ("tower", "spire", "citadel", "fortress", "castle", "stronghold"),
    "moon": ("moon", "lunar", "moonlight", "crescent", "eclipse", "celestial"),
    "star": ("star", "stellar", "constellation", "cosmic", "astral", "heavens"),
    "elemental": ("elemental", "element", "primal", "natural", "essence"),
    "portal": ("portal", "gateway", "passage", "doorway", "entrance", "threshold"),
    "treasure": ("treasure", "gold", "silver", "riches", "wealth", "fortune", "hoard"),
    "wisdom": ("wisdom", "knowledge", "lore", "learning", "insight", "understanding"),
    "healing": ("healing", "heal", "cure", "medicine", "remedy", "restoration", "recovery"),
})

CATEGORY_BASE_TAGS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "History": ("ancient", "war", "legend", "kingdom", "hero"),
    "Religion": ("gods", "temple", "ritual", "blessing", "order"),
    "Artifacts": ("artifact", "crystal", "treasure", "power", "magic"),
    "Prophecies": ("prophecy", "vision", "future", "destiny", "oracle"),
    "Institutions": ("academy", "order", "learning", "knowledge", "wisdom"),
    "Customs": ("festival", "tradition", "ceremony", "culture", "celebration"),
    "Politics": ("kingdom", "power", "ruler", "law", "governance"),
    "Culture": ("tradition", "custom", "society", "people", "heritage"),
    "Geography": ("mountain", "forest", "desert", "kingdom", "territory"),
    "Legends": ("legend", "myth", "hero", "ancient", "tale"),
})

# Compiled once per process.  re.ASCII keeps \b on ASCII word characters.
_KEYWORD_PATTERNS: Mapping[str, re.Pattern] = MappingProxyType({
    keyword: re.compile(r"\b" + re.escape(keyword), re.IGNORECASE | re.ASCII)
    for keywords in TAG_KEYWORDS.values()
    for keyword in keywords
})


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

def analyze_content_for_tags(
    content: Optional[str],
    title: Optional[str] = "",
    category: Optional[str] = "",
) -> list[TagRecommendation]:
    """Score *content* (plus title and category) against the taxonomy.

    Parameters
    ----------
    content : str
        The body text.  Blank, missing or non-string content returns ``[]``.
    title : str, optional
        Prepended to the analysed text.
    category : str, optional
        Appended to the analysed text.

    Returns
    -------
    list[TagRecommendation]
        At most ``MAX_RECOMMENDATIONS`` candidates, highest confidence
        first.  Ties keep taxonomy order.
    """
    if not isinstance(content, str) or not content.strip():
        return []

    full_text = f"{title or ''} {content} {category or ''}".lower()

    recommendations: list[TagRecommendation] = []
    for tag, keywords in TAG_KEYWORDS.items():
        matched: list[str] = []
        total_matches = 0
        for keyword in keywords:
            count = len(_KEYWORD_PATTERNS[keyword].findall(full_text))
            if count:
                matched.append(keyword)
                total_matches += count

        if not matched:
            continue

        confidence = min(MAX_CONFIDENCE, (total_matches * 0.2) + (len(matched) * 0.1))
        recommendations.append(TagRecommendation(
            tag=tag,
            confidence=confidence,
            matched_keywords=matched[:MAX_MATCHED_KEYWORDS],
        ))

    recommendations.sort(key=lambda r: r.confidence, reverse=True)
    logger.debug(
        "Tag analysis found %d candidate tags in %d characters",
        len(recommendations), len(full_text),
    )
    return recommendations[:MAX_RECOMMENDATIONS]


def get_recommended_tags(
    content: Optional[str],
    title: Optional[str] = "",
    category: Optional[str] = "",
) -> list[str]:
    """Return the names of tags whose confidence exceeds the threshold."""
    return [
        rec.tag
        for rec in analyze_content_for_tags(content, title, category)
        if rec.confidence > RECOMMENDATION_THRESHOLD
    ]


def get_category_base_tags(category: Optional[str]) -> list[str]:
    """Return the seed tags for a lore *category* ([] if unrecognised)."""
    if not isinstance(category, str):
        return []
    return list(CATEGORY_BASE_TAGS.get(category, ()))


# ---------------------------------------------------------------------------
# Tag editor helpers
# ---------------------------------------------------------------------------

def suggest_tags(
    content: Optional[str],
    title: Optional[str] = "",
    category: Optional[str] = "",
    existing: Iterable[str] = (),
) -> list[str]:
    """Category seed tags followed by content recommendations.

    Duplicates and tags already in *existing* (compared case-insensitively)
    are dropped; first occurrence wins.
    """
    seen = {tag.lower() for tag in existing}
    suggestions: list[str] = []
    for tag in get_category_base_tags(category) + get_recommended_tags(content, title, category):
        key = tag.lower()
        if key in seen:
            continue
        seen.add(key)
        suggestions.append(tag)
    return suggestions


def filter_suggestions(
    suggestions: Iterable[str],
    partial: Optional[str],
    existing: Iterable[str] = (),
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """Typeahead filter: suggestions containing *partial*, minus *existing*."""
    if not isinstance(partial, str) or not partial.strip():
        return []
    needle = partial.lower()
    taken = set(existing)
    filtered = [
        s for s in suggestions
        if needle in s.lower() and s not in taken
    ]
    return filtered[:limit]
