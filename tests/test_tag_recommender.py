"""
Tests for inkengine/tag_recommender.py -- keyword tag recommendations.
"""

import pytest

from inkengine.tag_recommender import (
    CATEGORY_BASE_TAGS,
    MAX_RECOMMENDATIONS,
    TAG_KEYWORDS,
    analyze_content_for_tags,
    filter_suggestions,
    get_category_base_tags,
    get_recommended_tags,
    suggest_tags,
)


class TestTaxonomy:
    """The keyword taxonomy is fixed configuration."""

    def test_tag_count(self):
        assert len(TAG_KEYWORDS) == 37

    def test_keyword_lists_sized(self):
        for tag, keywords in TAG_KEYWORDS.items():
            assert 4 <= len(keywords) <= 10, tag

    def test_taxonomy_is_read_only(self):
        with pytest.raises(TypeError):
            TAG_KEYWORDS["new"] = ("x",)


class TestAnalyzeContent:
    """Tests for analyze_content_for_tags."""

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_blank_content_returns_empty(self, content):
        assert analyze_content_for_tags(content, "Anything", "History") == []

    @pytest.mark.parametrize("content", [123, 4.5, ["fire"], {"text": "fire"}])
    def test_non_string_content_returns_empty(self, content):
        assert analyze_content_for_tags(content) == []
        assert get_recommended_tags(content) == []

    def test_non_string_title_and_category_tolerated(self):
        assert [r.tag for r in analyze_content_for_tags("fire", title=7, category=None)] == ["fire"]

    def test_prophecy_example(self):
        recs = analyze_content_for_tags("The ancient prophecy foretold a great war", "", "")
        by_tag = {r.tag: r for r in recs}

        assert [r.tag for r in recs] == ["prophecy", "ancient", "war"]
        assert by_tag["prophecy"].matched_keywords == ["prophecy", "foretold"]
        assert by_tag["ancient"].matched_keywords == ["ancient"]
        assert by_tag["war"].matched_keywords == ["war"]
        assert by_tag["prophecy"].confidence == pytest.approx(0.6)
        assert by_tag["war"].confidence == pytest.approx(0.3)
        assert all(r.confidence <= 0.95 for r in recs)

    def test_prefix_matches_at_word_boundary(self):
        recs = analyze_content_for_tags("A magical spell")
        magic = recs[0]
        assert magic.tag == "magic"
        # "magic" matches inside "magical" too: 3 matches, 3 keywords
        assert magic.matched_keywords == ["magic", "magical", "spell"]
        assert magic.confidence == pytest.approx(0.9)

    def test_no_match_inside_words(self):
        assert analyze_content_for_tags("pyromagic") == []

    def test_confidence_capped(self):
        recs = analyze_content_for_tags("magic magic magic magic magic")
        assert recs[0].confidence == 0.95

    def test_matched_keywords_limited_to_three_in_taxonomy_order(self):
        recs = analyze_content_for_tags("wizard enchant spell magical magic")
        assert recs[0].tag == "magic"
        assert recs[0].matched_keywords == ["magic", "magical", "spell"]

    def test_title_and_category_are_analysed(self):
        recs = analyze_content_for_tags("a quiet evening", title="Dragon", category="Legends")
        tags = [r.tag for r in recs]
        assert "dragon" in tags
        assert "legend" in tags

    def test_case_insensitive(self):
        assert [r.tag for r in analyze_content_for_tags("FIRE")] == ["fire"]

    def test_capped_at_eight(self):
        content = "magic ancient war prophecy god fire water shadow light crystal"
        recs = analyze_content_for_tags(content)
        assert len(recs) == MAX_RECOMMENDATIONS == 8

    def test_ties_keep_taxonomy_order(self):
        recs = analyze_content_for_tags("dragon fire")
        assert [r.tag for r in recs] == ["fire", "dragon"]

    def test_multi_word_keyword(self):
        recs = analyze_content_for_tags("the dark lord returns")
        villain = {r.tag: r for r in recs}["villain"]
        assert villain.matched_keywords == ["dark lord"]

    def test_confidence_monotonic_in_matches(self):
        one = analyze_content_for_tags("fire")[0].confidence
        two = analyze_content_for_tags("fire fire")[0].confidence
        two_keywords = analyze_content_for_tags("fire flame")[0].confidence
        assert one < two < two_keywords


class TestRecommendedTags:
    """Tests for get_recommended_tags."""

    def test_prophecy_example(self):
        tags = get_recommended_tags("The ancient prophecy foretold a great war")
        assert tags[0] == "prophecy"
        assert {"ancient", "war"} <= set(tags)

    def test_subset_of_analysis_above_threshold(self):
        content = "The temple priests perform a sacred ritual under the moon"
        analysed = {r.tag: r.confidence for r in analyze_content_for_tags(content)}
        for tag in get_recommended_tags(content):
            assert analysed[tag] > 0.3

    def test_preserves_order(self):
        content = "fire fire fire flame and a dragon"
        recs = [r.tag for r in analyze_content_for_tags(content) if r.confidence > 0.3]
        assert get_recommended_tags(content) == recs

    def test_blank(self):
        assert get_recommended_tags("") == []


class TestCategoryBaseTags:
    """Tests for get_category_base_tags."""

    def test_religion(self):
        assert get_category_base_tags("Religion") == ["gods", "temple", "ritual", "blessing", "order"]

    def test_unknown(self):
        assert get_category_base_tags("Unknown") == []

    def test_case_sensitive_lookup(self):
        assert get_category_base_tags("religion") == []

    def test_none(self):
        assert get_category_base_tags(None) == []

    @pytest.mark.parametrize("category", [3, ["History"]])
    def test_non_string(self, category):
        assert get_category_base_tags(category) == []

    def test_every_category_has_five_tags(self):
        assert len(CATEGORY_BASE_TAGS) == 10
        for tags in CATEGORY_BASE_TAGS.values():
            assert len(tags) == 5

    def test_returns_a_copy(self):
        tags = get_category_base_tags("History")
        tags.append("extra")
        assert get_category_base_tags("History") == ["ancient", "war", "legend", "kingdom", "hero"]


class TestTagEditorHelpers:
    """Tests for suggest_tags and filter_suggestions."""

    def test_suggest_combines_base_and_recommended(self):
        tags = suggest_tags("A dragon guards the hoard", category="History")
        assert tags[:5] == ["ancient", "war", "legend", "kingdom", "hero"]
        assert "dragon" in tags
        assert len(tags) == len(set(tags))

    def test_suggest_skips_existing(self):
        tags = suggest_tags("A dragon", category="History", existing=["War", "dragon"])
        assert "war" not in tags
        assert "dragon" not in tags

    def test_filter_matches_substring(self):
        suggestions = ["magic", "dragon", "magma", "mage"]
        assert filter_suggestions(suggestions, "MAG") == ["magic", "magma", "mage"]

    def test_filter_skips_existing(self):
        assert filter_suggestions(["magic", "magma"], "mag", existing=["magic"]) == ["magma"]

    def test_filter_limit(self):
        suggestions = [f"tag{i}" for i in range(20)]
        assert len(filter_suggestions(suggestions, "tag")) == 8

    def test_filter_blank_input(self):
        assert filter_suggestions(["magic"], "  ") == []

    def test_filter_non_string_input(self):
        assert filter_suggestions(["magic"], 5) == []

    def test_suggest_non_string_content(self):
        assert suggest_tags(42, category="Religion") == [
            "gods", "temple", "ritual", "blessing", "order",
        ]
