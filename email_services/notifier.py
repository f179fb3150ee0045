import asyncio
import logging
from typing import Optional, Set

from email_services.email_client import EmailClient
from email_services.render import render_registration_email
from models.vendor_registration import VendorRegistration
from settings.config import get_settings

logger = logging.getLogger(__name__)


class RegistrationNotifier:
    """
    Fire-and-forget applicant emails for approval decisions.

    dispatch() renders the message from the committed registration and schedules the SMTP
    send as a background task; send failures are logged and never reach the caller.
    """

    def __init__(self, client: Optional[EmailClient] = None):
        self._client = client or EmailClient()
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, event: str, registration: VendorRegistration) -> None:
        if not get_settings().NOTIFICATIONS_ENABLED:
            return
        recipient = registration.contact_email
        if not recipient:
            logger.warning("Registration %s has no contact email; skipping %s notice", registration.id, event)
            return

        subject, html = render_registration_email(
            event,
            business_name=registration.business_name,
            contact_name=registration.contact_person_name,
            reason=registration.rejection_reason,
        )
        task = asyncio.get_running_loop().create_task(self._send(recipient, subject, html, str(registration.id), event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send(self, recipient: str, subject: str, html: str, registration_id: str, event: str) -> None:
        try:
            await self._client.send_email(to=[recipient], subject=subject, html_body=html)
            logger.info("Sent %s notice for registration %s", event, registration_id)
        except Exception:
            logger.exception("Failed to send %s notice for registration %s", event, registration_id)

    async def drain(self) -> None:
        """
        Wait for in-flight sends (used on shutdown).
        """
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


_notifier: Optional[RegistrationNotifier] = None


def get_notifier() -> RegistrationNotifier:
    """
    FastAPI dependency returning the process-wide notifier.
    """
    global _notifier
    if _notifier is None:
        _notifier = RegistrationNotifier()
    return _notifier
