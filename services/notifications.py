"""Best-effort notifications sent after a committed transition."""
import logging

from flask import current_app

from models.slot import Slot
from services.errors import TransientError
from utils.emailer import email_configured, send_email

logger = logging.getLogger(__name__)


class NotificationEvent:
    BOOKING_REQUESTED = "booking_requested"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_CANCELED = "booking_canceled"


_SUBJECTS = {
    NotificationEvent.BOOKING_REQUESTED: "New booking request",
    NotificationEvent.BOOKING_APPROVED: "Your booking has been approved",
    NotificationEvent.BOOKING_REJECTED: "Your booking has been rejected",
    NotificationEvent.BOOKING_CANCELED: "Booking canceled",
}


def render_message(event: str, slot: Slot):
    subject = _SUBJECTS.get(event, "Booking update")
    lines = [
        f"Booking #{slot.id}",
        f"Infrastructure: {slot.infrastructure_id}",
        f"Date: {slot.booking_date.isoformat()}",
        f"Time: {slot.start_time.strftime('%H:%M')} - {slot.end_time.strftime('%H:%M')}",
        f"Status: {slot.status}",
    ]
    if slot.user_email:
        lines.append(f"Requested by: {slot.user_email}")
    if slot.purpose:
        lines.append(f"Purpose: {slot.purpose}")
    return subject, "\n".join(lines)


class NotificationDispatcher:
    def notify(self, event: str, slot: Slot, recipients):
        raise NotImplementedError


class EmailNotificationDispatcher(NotificationDispatcher):
    def notify(self, event: str, slot: Slot, recipients):
        recipients = sorted({r for r in recipients if r})
        if not recipients:
            return
        if not email_configured():
            logger.debug("Email not configured, dropping %s for booking %s", event, slot.id)
            return

        subject, body = render_message(event, slot)
        ok, err = send_email(recipients, subject, body)
        if not ok:
            raise TransientError(f"Email delivery failed: {err}")


def init_notifications(app, dispatcher: NotificationDispatcher = None):
    app.extensions["notification_dispatcher"] = dispatcher or EmailNotificationDispatcher()


def notify_safely(event: str, slot: Slot, recipients):
    dispatcher = current_app.extensions.get("notification_dispatcher")
    if dispatcher is None:
        return
    try:
        dispatcher.notify(event, slot, list(recipients))
    except TransientError as exc:
        logger.warning("Notification %s for booking %s not delivered: %s", event, slot.id, exc)
    except Exception:
        logger.exception("Notification %s for booking %s failed", event, slot.id)
