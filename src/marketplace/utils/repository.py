"""Repository helpers shared by command handlers and read functions."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from marketplace.errors import NotFound

DEFAULT_MAX_LIMIT = 100


def get_or_raise(aggregate_cls, identifier, message=None):
    """Load an aggregate by id, translating a miss into ``NotFound``."""
    if not identifier:
        raise NotFound(message or f"{aggregate_cls.__name__} not found")
    try:
        return current_domain.repository_for(aggregate_cls).get(str(identifier))
    except ObjectNotFoundError:
        raise NotFound(message or f"{aggregate_cls.__name__} not found") from None


def bounded_limit(limit, default, maximum=DEFAULT_MAX_LIMIT):
    """Resolve a caller-supplied result size into a bounded one.

    ``None`` means the default; values above ``maximum`` are clamped; values
    below 1 are rejected.
    """
    if limit is None:
        return default
    if limit < 1:
        raise ValidationError({"limit": ["Limit must be at least 1"]})
    return min(limit, maximum)


def fetch_all(query, page_size=DEFAULT_MAX_LIMIT):
    """Materialise every row of ``query``, paging past the provider's default cap."""
    results = []
    offset = 0
    while True:
        page = query.limit(page_size).offset(offset).all().items
        results.extend(page)
        if len(page) < page_size:
            return results
        offset += page_size
