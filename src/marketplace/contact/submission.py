"""Contact form submission — command and handler."""

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from marketplace.contact.message import ContactMessage
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="ContactMessage")
class SubmitContactMessage:
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    message: Text(required=True)


@marketplace.command_handler(part_of=ContactMessage)
class ContactMessageHandler:
    @handle(SubmitContactMessage)
    def submit_contact_message(self, command):
        contact_message = ContactMessage.submit(
            first_name=command.first_name,
            last_name=command.last_name,
            email=command.email,
            message=command.message,
        )
        current_domain.repository_for(ContactMessage).add(contact_message)
        logger.info("Contact message received", contact_message_id=str(contact_message.id))
        return str(contact_message.id)
