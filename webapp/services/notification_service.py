"""Verification notifications: tell a new account how to confirm its e-mail."""

from __future__ import annotations

import html
import logging
from urllib.parse import urlencode

from webapp.core.errors import NotificationError
from webapp.core.mailer import send_email, smtp_configured
from webapp.core.utils import absolute_url

logger = logging.getLogger(__name__)


def verification_path(email: str, token: str) -> str:
    return "/validateEmail?" + urlencode({"email": email, "token": token})


class VerificationPublisher:
    """Publish the (email, token, display name) triple as a verification e-mail."""

    subject = "Verify your e-mail address"

    def publish(self, email: str, token: str, display_name: str | None) -> None:
        if not smtp_configured():
            logger.warning("Mail transport not configured, skipping verification message for %s", email)
            return
        name = (display_name or "").strip() or "User"
        link = absolute_url(verification_path(email, token))
        if not send_email(self.subject, email, self._html(name, link), self._text(name, link)):
            raise NotificationError(f"Failed to send verification e-mail to {email}")
        logger.info("Published verification message for %s", email)

    def _text(self, name: str, link: str) -> str:
        return (
            f"Hello {name},\n\n"
            f"Confirm your e-mail address by opening this link within one minute:\n{link}\n"
        )

    def _html(self, name: str, link: str) -> str:
        safe_link = html.escape(link, quote=True)
        return f"""
        <p>Hello {html.escape(name)},</p>
        <p>Confirm your e-mail address by clicking the link below. It expires after one minute.</p>
        <p><a href="{safe_link}">Verify my e-mail</a></p>
        <p>If the link does not work, paste this address in your browser:</p>
        <p>{safe_link}</p>
        """
