import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def notify_admin(subject, message):
    """
    Sends a plain-text notification to ADMIN_NOTIFICATION_EMAIL. Returns
    whether it was sent; mail failures are logged only.
    """
    recipient = settings.ADMIN_NOTIFICATION_EMAIL
    if not recipient:
        logger.info(f"ADMIN_NOTIFICATION_EMAIL not set, skipping '{subject}'")
        return False

    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [recipient])
        logger.info(f"Admin notification sent: {subject}")
        return True
    except Exception as e:
        logger.error(f"Failed to send admin notification '{subject}': {e}")
        return False
