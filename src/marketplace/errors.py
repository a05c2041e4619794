"""Request-level failures surfaced to callers of marketplace operations.

Field and range problems use Protean's ``ValidationError`` (a dict of field
messages). The classes here cover the remaining categories: who the caller
is, what they may touch, whether the record exists, and whether the record's
current state allows the requested transition.
"""


class MarketplaceError(Exception):
    """Base class for marketplace failures that carry an error code."""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(MarketplaceError):
    """No caller could be resolved for the request."""

    code = "unauthenticated"


class Forbidden(MarketplaceError):
    """The caller is known but not allowed to act on the resource."""

    code = "forbidden"


class InvalidRole(Forbidden):
    """The caller does not hold the role the operation requires."""

    code = "invalid_role"


class NotFound(MarketplaceError):
    """The referenced order, transaction, notification or user is absent."""

    code = "not_found"


class Conflict(MarketplaceError):
    """The record's current state does not allow the requested transition."""

    code = "conflict"
