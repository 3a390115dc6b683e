"""Unit tests for the SMTP e-mail service."""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from buildboss.server.core.config import SMTPConfig
from buildboss.server.services.email import EmailService

SEND = "buildboss.server.services.email.aiosmtplib.send"


@pytest.fixture
def configured() -> EmailService:
    config = SMTPConfig(host="smtp.example.com", port=587, user="mailer", password="pw")
    return EmailService(config=config, frontend_url="https://app.buildboss.pl/")


class TestSend:
    @pytest.mark.asyncio
    async def test_skipped_when_not_configured(self):
        service = EmailService(config=SMTPConfig(), frontend_url="http://localhost:3000")
        with patch(SEND, new_callable=AsyncMock) as mock_send:
            assert await service.send("a@example.com", "Subject", "<p>x</p>") is False
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_starttls_and_login(self, configured):
        with patch(SEND, new_callable=AsyncMock) as mock_send:
            assert await configured.send("a@example.com", "Subject", "<p>x</p>") is True

        mock_send.assert_awaited_once()
        message = mock_send.call_args.args[0]
        options = mock_send.call_args.kwargs
        assert message["To"] == "a@example.com"
        assert message["Subject"] == "Subject"
        assert message["From"] == "BuildBoss <noreply@buildboss.pl>"
        assert options["hostname"] == "smtp.example.com"
        assert options["port"] == 587
        assert options["username"] == "mailer"
        assert options["password"] == "pw"
        assert options["start_tls"] is True
        assert options["use_tls"] is False

    @pytest.mark.asyncio
    async def test_implicit_tls_without_credentials(self):
        service = EmailService(config=SMTPConfig(host="smtp.example.com", port=465, secure=True))
        with patch(SEND, new_callable=AsyncMock) as mock_send:
            assert await service.send("a@example.com", "Subject", "<p>x</p>") is True
        options = mock_send.call_args.kwargs
        assert options["use_tls"] is True
        assert options["start_tls"] is False
        assert options["username"] is None
        assert options["password"] is None

    @pytest.mark.asyncio
    async def test_html_and_text_parts(self, configured):
        with patch(SEND, new_callable=AsyncMock) as mock_send:
            await configured.send("a@example.com", "Subject", "<p>hello</p>", text="hello")
        message = mock_send.call_args.args[0]
        parts = [part.get_content_type() for part in message.iter_parts()]
        assert parts == ["text/plain", "text/html"]

    @pytest.mark.asyncio
    async def test_smtp_failure_reported_as_false(self, configured):
        error = aiosmtplib.SMTPConnectError("busy")
        with patch(SEND, new_callable=AsyncMock, side_effect=error):
            assert await configured.send("a@example.com", "Subject", "<p>x</p>") is False

    @pytest.mark.asyncio
    async def test_network_failure_reported_as_false(self, configured):
        with patch(SEND, new_callable=AsyncMock, side_effect=ConnectionRefusedError()):
            assert await configured.send("a@example.com", "Subject", "<p>x</p>") is False


class TestTemplates:
    @pytest.mark.asyncio
    async def test_confirmation_link(self, configured):
        with patch.object(configured, "send", return_value=True) as mock_send:
            await configured.send_confirmation_email("a@example.com", "tok123", "Jan")
        to, subject, html = mock_send.call_args[0]
        assert to == "a@example.com"
        assert "https://app.buildboss.pl/confirm-email/tok123" in html
        assert "Jan" in html
        assert mock_send.call_args[1]["text"] == "https://app.buildboss.pl/confirm-email/tok123"

    @pytest.mark.asyncio
    async def test_invitation(self, configured):
        with patch.object(configured, "send", return_value=True) as mock_send:
            await configured.send_invitation_email("a@example.com", "Budex", "Jan Kowalski")
        _, subject, html = mock_send.call_args[0]
        assert "Budex" in subject
        assert "Jan Kowalski" in html
