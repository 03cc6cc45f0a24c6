"""
tests/search/test_query_builder.py

Unit tests for IndexQueryBuilder and StoreQueryBuilder.

Both builders are pure functions of a SearchSpec, so tests inspect the
produced query documents directly.
"""

from typing import Any, Dict, List

import pytest

from app.models.search_models import SearchFilters
from app.search.intent import IntentExtractor, IntentType, QueryIntent
from app.search.query_builder import (
    INDEX_SORT,
    VISIBLE_ONLY,
    IndexQueryBuilder,
    SearchSpec,
    StoreQueryBuilder,
)

HIDDEN_EXCLUSION = {"bool": {"must_not": [{"term": {"isHidden": True}}]}}


# ── Helpers ────────────────────────────────────────────────────────────────────

def _spec(text: str = "", field: str | None = None, **filters) -> SearchSpec:
    intent = QueryIntent.literal(text) if field else IntentExtractor().extract(text)
    return SearchSpec(intent=intent, explicit_field=field, filters=SearchFilters(**filters))


def _bool(body: Dict[str, Any]) -> Dict[str, Any]:
    return body["query"]["bool"]


def _and(query: Dict[str, Any]) -> List[Dict[str, Any]]:
    return query["$and"] if "$and" in query else [query]


# ── IndexQueryBuilder ──────────────────────────────────────────────────────────

class TestIndexQueryBuilder:

    def test_hidden_exclusion_always_present(self) -> None:
        """Every query, even an empty one, filters out hidden records."""
        for spec in (_spec(), _spec("Endgame"), _spec("Tom Hanks", field="actor"), _spec(year=2019)):
            assert HIDDEN_EXCLUSION in _bool(IndexQueryBuilder().build(spec))["filter"]

    def test_empty_spec_browses_everything_visible(self) -> None:
        """No text and no filters leaves only the hidden exclusion (match-all semantics)."""
        query = _bool(IndexQueryBuilder().build(_spec()))
        assert query["filter"] == [HIDDEN_EXCLUSION]
        assert "must" not in query
        assert "should" not in query

    def test_sort_is_score_then_rating_then_views(self) -> None:
        body = IndexQueryBuilder().build(_spec("Endgame"))
        assert body["sort"] == INDEX_SORT
        assert body["sort"][0] == "_score"

    def test_highlight_uses_em_tags(self) -> None:
        body = IndexQueryBuilder().build(_spec("Endgame"))
        assert body["highlight"]["pre_tags"] == ["<em>"]
        assert set(body["highlight"]["fields"]) == {"name", "origin_name", "content"}

    def test_explicit_actor_is_single_targeted_match(self) -> None:
        """actor:Tom Hanks → one match on actor, no multi-field scoring."""
        query = _bool(IndexQueryBuilder().build(_spec("Tom Hanks", field="actor")))
        assert query["must"] == [{"match": {"actor": {"query": "Tom Hanks", "fuzziness": "AUTO"}}}]
        assert "should" not in query

    def test_explicit_year_is_numeric_term(self) -> None:
        query = _bool(IndexQueryBuilder().build(_spec("2019", field="year")))
        assert query["must"] == [{"term": {"year": 2019}}]

    def test_explicit_category_is_nested(self) -> None:
        clause = _bool(IndexQueryBuilder().build(_spec("hanh-dong", field="category")))["must"][0]
        assert clause["nested"]["path"] == "category"
        shoulds = clause["nested"]["query"]["bool"]["should"]
        assert {"match": {"category.slug": "hanh-dong"}} in shoulds

    def test_explicit_keyword_field_is_term(self) -> None:
        query = _bool(IndexQueryBuilder().build(_spec("avengers-endgame", field="slug")))
        assert query["must"] == [{"term": {"slug": "avengers-endgame"}}]

    def test_explicit_content_is_boosted(self) -> None:
        query = _bool(IndexQueryBuilder().build(_spec("time travel", field="content")))
        assert query["must"][0]["match"]["content"]["boost"] == 5

    def test_free_text_multi_match_with_additive_boosts(self) -> None:
        query = _bool(IndexQueryBuilder().build(_spec("Endgame")))
        multi = query["must"][0]["multi_match"]
        assert multi["fields"][0] == "name^4"
        assert "content^1" in multi["fields"]
        assert multi["fuzziness"] == "AUTO"
        phrase_fields = {next(iter(c["match_phrase"])) for c in query["should"]}
        assert {"name", "origin_name", "actor", "director"} <= phrase_fields

    def test_description_mode_boosts_content(self) -> None:
        query = _bool(IndexQueryBuilder().build(_spec("time travel heist", search_description=True)))
        assert "content^3" in query["must"][0]["multi_match"]["fields"]
        contents = [c for c in query["should"] if "content" in c.get("match_phrase", c.get("match", {}))]
        assert contents

    def test_original_and_processed_both_boosted(self) -> None:
        """When stopwords were removed, phrase boosts cover both spellings."""
        query = _bool(IndexQueryBuilder().build(_spec("xem phim Avengers Endgame vietsub")))
        texts = {c["match_phrase"]["name"]["query"] for c in query["should"] if "name" in c["match_phrase"]}
        assert texts == {"xem phim Avengers Endgame vietsub", "Avengers Endgame"}

    def test_extracted_year_is_hard_filter(self) -> None:
        query = _bool(IndexQueryBuilder().build(_spec("phim hành động năm 2019")))
        assert {"term": {"year": 2019}} in query["filter"]

    def test_general_intent_adds_no_intent_filters(self) -> None:
        query = _bool(IndexQueryBuilder().build(_spec("Inception")))
        assert query["filter"] == [HIDDEN_EXCLUSION]

    def test_explicit_field_ignores_intent_values(self) -> None:
        """A prefixed query never adds extracted filters."""
        spec = SearchSpec(
            intent=QueryIntent(original="x", processed="x", intent=IntentType.YEAR, year=2000),
            explicit_field="name",
        )
        assert _bool(IndexQueryBuilder().build(spec))["filter"] == [HIDDEN_EXCLUSION]

    def test_caller_filters_layered(self) -> None:
        query = _bool(IndexQueryBuilder().build(
            _spec("Endgame", year=2019, category="hanh-dong", country="au-my", type="single", status="completed")
        ))
        filters = query["filter"]
        assert {"term": {"year": 2019}} in filters
        assert {"term": {"type": "single"}} in filters
        assert {"term": {"status": "completed"}} in filters
        nested_paths = {f["nested"]["path"] for f in filters if "nested" in f}
        assert nested_paths == {"category", "country"}


# ── StoreQueryBuilder ──────────────────────────────────────────────────────────

class TestStoreQueryBuilder:

    def test_empty_spec_is_visible_only(self) -> None:
        built = StoreQueryBuilder().build(_spec())
        assert built.filter == VISIBLE_ONLY
        assert built.sort is None

    def test_hidden_exclusion_always_present(self) -> None:
        for spec in (_spec("Endgame"), _spec("Tom Hanks", field="actor"), _spec(year=2019)):
            assert VISIBLE_ONLY in _and(StoreQueryBuilder().build(spec).filter)

    def test_free_text_searches_all_text_fields(self) -> None:
        clauses = _and(StoreQueryBuilder().build(_spec("Endgame")).filter)
        ors = next(c["$or"] for c in clauses if "$or" in c)
        fields = {next(iter(c)) for c in ors}
        assert fields == {"name", "origin_name", "content", "actor", "director", "category.name", "country.name"}

    def test_regex_is_escaped(self) -> None:
        """User text is matched literally, not as a regular expression."""
        clauses = _and(StoreQueryBuilder().build(_spec("Tom (Hanks)", field="actor")).filter)
        assert {"actor": {"$regex": r"Tom\ \(Hanks\)", "$options": "i"}} in clauses

    def test_explicit_year(self) -> None:
        assert {"year": 2019} in _and(StoreQueryBuilder().build(_spec("2019", field="year")).filter)

    def test_explicit_keyword_is_equality(self) -> None:
        clauses = _and(StoreQueryBuilder().build(_spec("single", field="type")).filter)
        assert {"type": "single"} in clauses

    def test_category_matches_name_or_slug(self) -> None:
        clauses = _and(StoreQueryBuilder().build(_spec(category="hanh-dong")).filter)
        entry = next(c for c in clauses if "$or" in c)
        assert {"category.slug": "hanh-dong"} in entry["$or"]

    def test_intent_filters_mirror_index(self) -> None:
        clauses = _and(StoreQueryBuilder().build(_spec("phim thể loại kinh dị năm 2020")).filter)
        assert {"year": 2020} in clauses
        assert any(
            "$or" in c and {"category.slug": "Kinh Dị"} in c["$or"] for c in clauses
        )

    def test_intent_query_matches_any_original_word(self) -> None:
        """The text predicate uses the words the index multi_match sees, not the leftover."""
        clauses = _and(StoreQueryBuilder().build(_spec("phim năm 2019")).filter)
        ors = next(c["$or"] for c in clauses if "$or" in c)

        assert {"content": {"$regex": "phim", "$options": "i"}} in ors
        assert {"name": {"$regex": "2019", "$options": "i"}} in ors
        assert not any(r"năm\ 2019" in c[f]["$regex"] for c in ors for f in c)
        assert {"year": 2019} in clauses

    def test_plain_query_stays_one_substring(self) -> None:
        clauses = _and(StoreQueryBuilder().build(_spec("Endgame")).filter)
        ors = next(c["$or"] for c in clauses if "$or" in c)
        assert {c[f]["$regex"] for c in ors for f in c} == {"Endgame"}

    @pytest.mark.parametrize("field", ["name", "origin_name", "director", "content"])
    def test_text_fields_are_regex(self, field) -> None:
        clauses = _and(StoreQueryBuilder().build(_spec("abc", field=field)).filter)
        assert {field: {"$regex": "abc", "$options": "i"}} in clauses
