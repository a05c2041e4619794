"""Tests for the cumulative courier rating average."""

import pytest
from marketplace.courier.rating import aggregate_rating, aggregate_ratings, validate_rating
from protean.exceptions import ValidationError


class TestAggregateRating:
    def test_first_rating_from_nothing(self):
        assert aggregate_rating(None, 0, 4) == (4.0, 1)

    def test_absent_rating_ignores_stale_count(self):
        assert aggregate_rating(None, 7, 5) == (5.0, 1)

    def test_running_average(self):
        rating, count = aggregate_rating(4.0, 1, 2)
        assert rating == pytest.approx(3.0)
        assert count == 2

    def test_count_increments_by_one(self):
        _, count = aggregate_rating(4.5, 10, 1)
        assert count == 11


class TestAggregateRatings:
    def test_sequence_matches_one_at_a_time(self):
        batched = aggregate_ratings(None, 0, [5, 1, 3])
        stepwise = aggregate_rating(*aggregate_rating(*aggregate_rating(None, 0, 5), 1), 3)
        assert batched == stepwise

    def test_split_batches_agree(self):
        first = aggregate_ratings(None, 0, [5, 1])
        rating, count = aggregate_ratings(*first, [3])
        assert rating == pytest.approx(3.0)
        assert count == 3

    def test_empty_sequence_is_unchanged(self):
        assert aggregate_ratings(4.2, 5, []) == (4.2, 5)


class TestValidateRating:
    @pytest.mark.parametrize("rating", [1, 3, 5])
    def test_in_range(self, rating):
        validate_rating(rating)

    @pytest.mark.parametrize("rating", [0, 6, -1, None])
    def test_out_of_range(self, rating):
        with pytest.raises(ValidationError) as exc_info:
            validate_rating(rating)
        assert "rating" in exc_info.value.messages
