"""Marketplace bounded context — delivery orders, courier fanout, and wallet ledger.

Handles the order lifecycle (CQRS), courier onboarding and rating, the
deposit ledger that credits user balances, and the notification records
couriers and clients see as orders move through their states.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
