"""Tests for preference analysis and cold-start blending."""

from datetime import timedelta

import pytest

from conftest import FIXED_NOW, make_entry
from smart_discovery.constants import PRIOR_RATING
from smart_discovery.models import MediaType
from smart_discovery.services.recommendations import analyze


def now():
    return FIXED_NOW


class TestColdStartAverageRating:
    """Tests for averageRating below the minimum sample size."""

    def test_empty_library_returns_prior(self):
        prefs = analyze([], now=now)
        assert prefs.average_rating == PRIOR_RATING

    def test_unrated_items_return_prior(self):
        items = [make_entry("1"), make_entry("2"), make_entry("3")]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == PRIOR_RATING

    @pytest.mark.parametrize(
        "count, expected",
        [(1, 3.4), (2, 3.8), (3, 4.2), (4, 4.6)],
    )
    def test_five_star_ratings_blend_with_prior(self, count: int, expected: float):
        """Prior weight shrinks by 20% per library item."""
        items = [make_entry(str(i), 5) for i in range(count)]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == pytest.approx(expected)

    def test_prior_pulls_low_rating_up(self):
        prefs = analyze([make_entry("1", 1)], now=now)
        assert prefs.average_rating == pytest.approx(2.6)
        assert 1.0 < prefs.average_rating < 3.0

    def test_prior_pulls_high_rating_down(self):
        prefs = analyze([make_entry("1", 5)], now=now)
        assert 3.0 < prefs.average_rating < 5.0

    def test_weights_use_total_items_not_rated_items(self):
        """One 5-star rating among 4 items: 0.2 * 3.0 + 0.8 * 5.0."""
        items = [make_entry("1", 5), make_entry("2"), make_entry("3"), make_entry("4")]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == pytest.approx(4.6)


class TestWarmAverageRating:
    """Tests for averageRating at or above the minimum sample size."""

    def test_equal_ratings_same_timestamp_have_no_prior(self):
        items = [make_entry(str(i), 5) for i in range(5)]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == pytest.approx(5.0)

    def test_equal_timestamps_give_simple_mean(self):
        items = [make_entry(str(i), r) for i, r in enumerate([1, 2, 3, 4, 5])]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == pytest.approx(3.0)

    def test_threshold_counts_unrated_items(self):
        """Five items with two ratings skip the prior entirely."""
        items = [
            make_entry("1", 5),
            make_entry("2", 5),
            make_entry("3"),
            make_entry("4"),
            make_entry("5"),
        ]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == pytest.approx(5.0)

    def test_four_items_blend_but_five_do_not(self):
        four = analyze([make_entry(str(i), 5) for i in range(4)], now=now)
        five = analyze([make_entry(str(i), 5) for i in range(5)], now=now)
        assert four.average_rating < five.average_rating

    def test_recent_ratings_weigh_more(self):
        old = FIXED_NOW - timedelta(days=365)
        items = [make_entry(str(i), 1, rated_at=old) for i in range(3)]
        items += [make_entry("new-1", 5), make_entry("new-2", 5)]

        prefs = analyze(items, now=now)

        simple_mean = (3 * 1 + 2 * 5) / 5
        assert prefs.average_rating > simple_mean
        assert prefs.average_rating <= 5.0

    def test_half_life_weighting(self):
        """A 90-day-old rating counts half as much as a fresh one."""
        aged = FIXED_NOW - timedelta(days=90)
        items = [
            make_entry("fresh", 5),
            make_entry("aged", 2, rated_at=aged),
            make_entry("3"),
            make_entry("4"),
            make_entry("5"),
        ]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == pytest.approx((5 * 1.0 + 2 * 0.5) / 1.5)

    def test_future_timestamps_are_not_boosted(self):
        future = FIXED_NOW + timedelta(days=30)
        items = [make_entry("1", 1, rated_at=future)] + [make_entry(str(i), 5) for i in range(2, 6)]
        prefs = analyze(items, now=now)
        assert prefs.average_rating == pytest.approx((1 + 4 * 5) / 5)


class TestMediaTypesAndSets:
    """Tests for media type ratios, favorites and dismissed items."""

    def test_default_media_types_for_empty_library(self):
        prefs = analyze([], now=now)
        assert prefs.preferred_media_types == {MediaType.MOVIE: 0.5, MediaType.TV: 0.5}

    def test_media_type_ratios(self):
        items = [make_entry("1", 5), make_entry("2"), make_entry("3", 3, "tv")]
        prefs = analyze(items, now=now)

        assert prefs.preferred_media_types[MediaType.MOVIE] == pytest.approx(2 / 3)
        assert prefs.preferred_media_types[MediaType.TV] == pytest.approx(1 / 3)
        assert sum(prefs.preferred_media_types.values()) == pytest.approx(1.0)

    def test_single_media_type_library(self):
        prefs = analyze([make_entry("1", media_type="tv")], now=now)
        assert prefs.preferred_media_types == {MediaType.MOVIE: 0.0, MediaType.TV: 1.0}

    def test_favorite_genres_start_empty(self):
        prefs = analyze([make_entry("1", 5)], now=now)
        assert prefs.favorite_genres == {}

    def test_not_interested_ids(self):
        dismissed = [make_entry("not-1"), make_entry("not-2", media_type="tv")]
        prefs = analyze([], dismissed, now=now)
        assert prefs.not_interested_ids == {"movie:not-1", "tv:not-2"}

    def test_favorites_inferred_from_flags(self):
        items = [
            make_entry("fav-1", 5, is_favorite=True),
            make_entry("fav-2", 4, "tv", is_favorite=True),
            make_entry("not-fav", 3),
        ]
        prefs = analyze(items, now=now)
        assert prefs.favorite_ids == {"movie:fav-1", "tv:fav-2"}

    def test_explicit_favorites_override_flags(self):
        items = [make_entry("flagged", 5, is_favorite=True)]
        prefs = analyze(items, favorites=[make_entry("explicit", media_type="tv")], now=now)
        assert prefs.favorite_ids == {"tv:explicit"}

    def test_average_stays_within_rating_scale(self):
        items = [make_entry(str(i), 1) for i in range(6)]
        prefs = analyze(items, now=now)
        assert 1.0 <= prefs.average_rating <= 5.0
