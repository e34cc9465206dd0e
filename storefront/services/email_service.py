# ==============================================================================
# EMAIL SERVICE - Transactional Email Delivery
# ==============================================================================
# Logs messages outside production; sends over SMTP in production
# ==============================================================================

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from functools import partial
from typing import Optional

from storefront.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Transactional email sender.

    When email is disabled or the app is not running in production,
    messages are logged and reported as sent. Otherwise they go out
    over SMTP with STARTTLS on the default executor. Delivery failures
    are logged and reported as ``False``, never raised.
    """

    def __init__(self, config: Optional[Settings] = None) -> None:
        self._config = config or default_settings

    @property
    def is_live(self) -> bool:
        """Whether messages are actually delivered."""
        return self._config.EMAIL_ENABLED and self._config.is_production

    async def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email.

        Args:
            to: Recipient address
            subject: Subject line
            body: Message body

        Returns:
            True if the message was sent (or logged in mock mode)
        """
        if not self.is_live:
            logger.info(f"[mock email] to={to} subject={subject!r}")
            return True

        message = EmailMessage()
        message["From"] = self._config.EMAIL_FROM
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(self._deliver, message))
            logger.info(f"Email sent to {to}: {subject!r}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._config.SMTP_HOST, self._config.SMTP_PORT, timeout=30) as smtp:
            smtp.starttls()
            if self._config.SMTP_USER:
                smtp.login(self._config.SMTP_USER, self._config.SMTP_PASSWORD)
            smtp.send_message(message)
