"""
tests/search/test_duration.py

Unit tests for runtime derivation and duration-bucket filtering.
"""

import pytest

from app.core.exceptions import InvalidSearchParameterError
from app.models.search_models import RankedHit
from app.search.duration import (
    derive_duration,
    estimate_total,
    filter_by_duration,
)


class TestDeriveDuration:

    def test_explicit_duration_wins(self) -> None:
        assert derive_duration({"duration": 45, "time": "120 phút"}) == 45

    def test_time_string_leading_int(self) -> None:
        assert derive_duration({"time": "181 phút"}) == 181

    def test_runtime_used_when_others_missing(self) -> None:
        assert derive_duration({"runtime": "95"}) == 95

    def test_episode_current_minutes(self) -> None:
        assert derive_duration({"episode_current": "Tập 12 - 45 phút"}) == 45

    def test_unparseable_falls_back_to_default(self) -> None:
        assert derive_duration({"time": "?? phút", "episode_current": "Full"}) == 90

    def test_zero_is_ignored(self) -> None:
        """Non-positive values are treated as missing."""
        assert derive_duration({"duration": 0, "time": "30 phút"}) == 30

    def test_reads_model_extras(self) -> None:
        """RankedHit carries record fields as extras; they are readable too."""
        hit = RankedHit(id="1", time="50 phút/tập")
        assert derive_duration(hit) == 50


class TestFilterByDuration:

    HITS = [
        {"name": "Short", "time": "24 phút"},
        {"name": "Medium", "time": "60 phút"},
        {"name": "Boundary", "time": "120 phút"},
        {"name": "Long", "time": "181 phút"},
        {"name": "Unknown"},
    ]

    @pytest.mark.parametrize(
        "bucket, low, high",
        [("short", 0, 59), ("medium", 60, 120), ("long", 121, 99999)],
    )
    def test_every_kept_hit_is_in_range(self, bucket, low, high) -> None:
        kept = filter_by_duration(self.HITS, bucket)
        assert kept
        assert all(low <= derive_duration(h) <= high for h in kept)

    def test_unknown_defaults_into_medium(self) -> None:
        names = [h["name"] for h in filter_by_duration(self.HITS, "medium")]
        assert names == ["Medium", "Boundary", "Unknown"]

    def test_unknown_bucket_rejected(self) -> None:
        with pytest.raises(InvalidSearchParameterError):
            filter_by_duration(self.HITS, "epic")


class TestEstimateTotal:

    def test_scales_by_keep_ratio(self) -> None:
        assert estimate_total(total=100, fetched=20, kept=5) == 25

    def test_rounds_up(self) -> None:
        assert estimate_total(total=10, fetched=3, kept=1) == 4

    def test_empty_page_keeps_total(self) -> None:
        assert estimate_total(total=7, fetched=0, kept=0) == 7
