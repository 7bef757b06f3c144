#!/usr/bin/env python3
"""
Time-Decay Score Tests

Tests the Hacker News style score used everywhere videos are ranked:

    score = (views + 1) / (max(1, age_hours) + 2) ** 1.8

Scenarios:
----------
1. Monotonic in views for a fixed age
2. Monotonic decay with age, constant inside the 1-hour floor
3. Zero views at zero age is finite and positive
4. Future publish times floor to one hour instead of failing
5. A 1-hour-old video beats a 1-week-old one with the same views
6. Negative views and unparseable timestamps are rejected

Run:
----
    pytest algorithm/tests/test_scores.py -v
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from algorithm.errors import InvalidInput
from algorithm.utils.scores import age_hours, hacker_news_score, to_datetime, to_epoch_ms

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)
HOUR_MS = 3_600_000
WEEK_MS = 604_800_000


class TestFormula:
    """The formula itself, at a fixed `now`."""

    def test_matches_reference_values(self):
        published = NOW - timedelta(hours=10)
        expected = 1001 / math.pow(12, 1.8)
        assert hacker_news_score(1000, published, NOW) == pytest.approx(expected)

    def test_returns_float_not_integer(self):
        score = hacker_news_score(5, NOW - timedelta(hours=3), NOW)
        assert isinstance(score, float)
        assert score != int(score)

    def test_gravity_is_tunable(self):
        published = NOW - timedelta(hours=24)
        gentle = hacker_news_score(1000, published, NOW, gravity=1.2)
        steep = hacker_news_score(1000, published, NOW, gravity=2.5)
        assert gentle > steep

    def test_deterministic_with_explicit_now(self):
        published = "2026-10-18T08:30:00Z"
        assert hacker_news_score(42, published, NOW) == hacker_news_score(42, published, NOW)


class TestMonotonicity:
    """Ordering properties the ranking relies on."""

    @pytest.mark.parametrize("views1,views2", [(0, 1), (10, 11), (999, 1_000_000)])
    def test_more_views_score_higher(self, views1, views2):
        published = NOW - timedelta(hours=5)
        assert hacker_news_score(views1, published, NOW) < hacker_news_score(views2, published, NOW)

    def test_older_scores_lower(self):
        published_ms = NOW_MS - 48 * HOUR_MS
        scores = [
            hacker_news_score(5000, published_ms, NOW_MS + offset * HOUR_MS)
            for offset in range(0, 72, 6)
        ]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_constant_inside_one_hour_floor(self):
        published_ms = NOW_MS
        at_0 = hacker_news_score(100, published_ms, NOW_MS)
        at_30min = hacker_news_score(100, published_ms, NOW_MS + HOUR_MS // 2)
        at_1h = hacker_news_score(100, published_ms, NOW_MS + HOUR_MS)
        assert at_0 == at_30min == at_1h
        assert hacker_news_score(100, published_ms, NOW_MS + 2 * HOUR_MS) < at_1h

    def test_hour_old_beats_week_old(self):
        fresh = hacker_news_score(1_000_000, NOW_MS - HOUR_MS, NOW_MS)
        stale = hacker_news_score(1_000_000, NOW_MS - WEEK_MS, NOW_MS)
        assert fresh > stale


class TestEdgeCases:

    def test_zero_views_zero_age_finite_positive(self):
        score = hacker_news_score(0, NOW, NOW)
        assert math.isfinite(score)
        assert score > 0
        assert score == pytest.approx(1 / math.pow(3, 1.8))

    def test_future_publish_time_floors_to_one_hour(self):
        future = NOW + timedelta(days=2)
        assert hacker_news_score(10, future, NOW) == hacker_news_score(10, NOW, NOW)

    def test_missing_views_scored_as_zero(self):
        assert hacker_news_score(None, NOW, NOW) == hacker_news_score(0, NOW, NOW)

    def test_negative_views_rejected(self):
        with pytest.raises(InvalidInput):
            hacker_news_score(-1, NOW, NOW)

    @pytest.mark.parametrize("bad", ["5", float("nan"), float("inf"), True, [3]])
    def test_non_numeric_or_non_finite_views_rejected(self, bad):
        with pytest.raises(InvalidInput):
            hacker_news_score(bad, NOW, NOW)

    @pytest.mark.parametrize("bad", ["yesterday", "", "2026-13-45", None, float("nan")])
    def test_unparseable_timestamp_rejected(self, bad):
        with pytest.raises(InvalidInput):
            hacker_news_score(10, bad, NOW)

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInput, ValueError)

    def test_default_now_is_wall_clock(self):
        published = datetime.now(timezone.utc) - timedelta(hours=3)
        score = hacker_news_score(100, published)
        assert score == pytest.approx(101 / math.pow(5, 1.8), rel=1e-3)


class TestTimestampParsing:

    def test_all_forms_agree(self):
        iso = "2026-10-19T12:00:00Z"
        assert to_epoch_ms(iso) == NOW_MS
        assert to_epoch_ms(NOW) == NOW_MS
        assert to_epoch_ms(NOW_MS) == NOW_MS

    def test_naive_datetime_is_utc(self):
        assert to_datetime(datetime(2026, 10, 19, 12, 0)) == NOW

    def test_offset_is_respected(self):
        assert to_datetime("2026-10-19T14:00:00+02:00") == NOW

    def test_age_hours_floor(self):
        assert age_hours(NOW_MS, NOW_MS) == 1.0
        assert age_hours(NOW_MS - 5 * HOUR_MS, NOW_MS) == 5.0
