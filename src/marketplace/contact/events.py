"""Domain events for the ContactMessage aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="ContactMessage")
class ContactMessageReceived:
    """A visitor left a message through the contact form."""

    __version__ = 1

    contact_message_id = Identifier(required=True)
    email = String(required=True)
    submitted_at = DateTime(required=True)
