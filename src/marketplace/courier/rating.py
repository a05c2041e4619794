"""Rating aggregator — running average of the ratings a courier receives.

The average is cumulative: every rating ever applied keeps its full weight,
nothing decays or is removed. Applying ratings one at a time or in batches
gives the same ``(rating, count)`` pair.
"""

from protean.exceptions import ValidationError

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating):
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError({"rating": [f"Rating must be between {MIN_RATING} and {MAX_RATING}"]})


def aggregate_rating(current_rating, current_count, new_rating):
    """Fold ``new_rating`` into the running average.

    An absent rating is treated as ``(0, 0)``. Returns
    ``(updated_rating, updated_count)``.
    """
    if current_rating is None:
        rating, count = 0.0, 0
    else:
        rating, count = current_rating, current_count or 0

    updated_count = count + 1
    updated_rating = (rating * count + new_rating) / updated_count
    return updated_rating, updated_count


def aggregate_ratings(current_rating, current_count, new_ratings):
    """Fold a sequence of ratings, in order."""
    rating, count = current_rating, current_count
    for new_rating in new_ratings:
        rating, count = aggregate_rating(rating, count, new_rating)
    return rating, count
