"""
Transactional e-mail.

Sends account confirmation and company invitation messages over SMTP with
``aiosmtplib``. Delivery problems are logged and reported as ``False``; they
never fail the request that triggered the mail.
"""

from __future__ import annotations

from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from buildboss.core.logging_config import get_logger
from buildboss.server.core.config import SMTPConfig, settings

logger = get_logger(__name__)

SMTP_TIMEOUT_SECONDS = 30


class EmailService:
    """SMTP sender for the platform's transactional messages."""

    def __init__(self, config: Optional[SMTPConfig] = None, frontend_url: Optional[str] = None) -> None:
        self.config = config or settings.smtp
        self.frontend_url = (frontend_url or settings.frontend_url).rstrip("/")

    async def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        """Send one message; returns whether the SMTP server accepted it."""
        if not self.config.is_configured:
            logger.info(f"SMTP is not configured, skipping e-mail '{subject}' to {to}")
            return False

        message = EmailMessage()
        message["From"] = self.config.from_email
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text or subject)
        message.add_alternative(html, subtype="html")

        config = self.config
        try:
            await aiosmtplib.send(
                message,
                hostname=config.host,
                port=config.port,
                username=config.user or None,
                password=config.password or None,
                use_tls=config.secure,
                start_tls=not config.secure,
                timeout=SMTP_TIMEOUT_SECONDS,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send e-mail '{subject}' to {to}: {e}")
            return False
        logger.info(f"E-mail '{subject}' sent to {to}")
        return True

    async def send_confirmation_email(self, email: str, token: str, first_name: Optional[str] = None) -> bool:
        """Mail the link that confirms a newly registered address."""
        url = f"{self.frontend_url}/confirm-email/{token}"
        greeting = f"Witaj {first_name}!" if first_name else "Witaj w BuildBoss!"
        html = (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            f'<h2 style="color: #2563eb;">{greeting}</h2>'
            "<p>Dziękujemy za rejestrację. Aby aktywować swoje konto, kliknij poniższy link:</p>"
            f'<p style="text-align: center;"><a href="{url}">Potwierdź adres email</a></p>'
            '<p style="color: #666; font-size: 14px;">Jeśli nie rejestrowałeś się w BuildBoss, zignoruj tę wiadomość.</p>'
            "</div>"
        )
        return await self.send(email, "Potwierdź swój adres email - BuildBoss", html, text=url)

    async def send_invitation_email(self, email: str, company_name: str, inviter_name: str) -> bool:
        """Tell a user they were invited to join a company."""
        url = f"{self.frontend_url}/dashboard"
        html = (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            f'<h2 style="color: #2563eb;">Zaproszenie do firmy {company_name}</h2>'
            f"<p>{inviter_name} zaprasza Cię do współpracy w firmie <strong>{company_name}</strong>.</p>"
            f'<p style="text-align: center;"><a href="{url}">Zobacz zaproszenie</a></p>'
            "</div>"
        )
        return await self.send(email, f"Zaproszenie do firmy {company_name} - BuildBoss", html, text=url)


def get_email_service() -> EmailService:
    """FastAPI dependency returning the configured e-mail sender."""
    return EmailService()
