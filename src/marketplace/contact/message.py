"""ContactMessage aggregate — a message left through the public contact form.

Anyone may submit one; only admins read them.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text

from marketplace.contact.events import ContactMessageReceived
from marketplace.domain import marketplace


@marketplace.aggregate
class ContactMessage:
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    message: Text(required=True)
    submitted_at: DateTime()

    @invariant.post
    def email_must_look_like_an_address(self):
        if self.email and "@" not in self.email:
            raise ValidationError({"email": ["Invalid email address"]})

    @invariant.post
    def message_cannot_be_blank(self):
        if self.message is not None and not self.message.strip():
            raise ValidationError({"message": ["Message cannot be blank"]})

    @classmethod
    def submit(cls, first_name, last_name, email, message):
        now = datetime.now(UTC)
        contact_message = cls(
            first_name=first_name,
            last_name=last_name,
            email=(email or "").strip().lower(),
            message=message,
            submitted_at=now,
        )
        contact_message.raise_(
            ContactMessageReceived(
                contact_message_id=str(contact_message.id),
                email=contact_message.email,
                submitted_at=now,
            )
        )
        return contact_message
