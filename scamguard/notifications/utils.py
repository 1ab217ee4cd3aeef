"""
Outgoing email. Delivery is simulated: messages are written to the log.
"""

import logging
from scamguard.core.config import settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, body: str) -> None:
    logger.info(
        "Simulated email from %s <%s> to %s | subject=%r | body=%r",
        settings.APP_NAME, settings.SENDER_EMAIL, to, subject, body,
    )
