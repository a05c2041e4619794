"""Synchronous command dispatch for callers outside the domain.

Optimistic-locking failures surface from the unit of work's commit, after the
handler has returned, so they are translated here rather than in handlers.
"""

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from marketplace.errors import Conflict

logger = structlog.get_logger(__name__)

CONCURRENT_MODIFICATION = "The record was modified concurrently, please retry"


def dispatch(command):
    """Process ``command`` and return its handler's result.

    A stale write that loses the version check raises ``Conflict``, the same
    error a state precondition failure raises.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        logger.warning(
            "Concurrent modification rejected",
            command=command.__class__.__name__,
            detail=str(exc),
        )
        raise Conflict(CONCURRENT_MODIFICATION) from exc
