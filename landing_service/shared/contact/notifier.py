"""Notification transports for new contact form submissions (SMTP or local mail command)."""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

from landing_service.shared.config import Settings
from landing_service.shared.contact.errors import NotificationError
from landing_service.shared.contact.schemas import ContactRequest
from landing_service.shared.input_validation import sanitize_header, sanitize_text

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 20


@dataclass(frozen=True)
class NotificationMessage:
    """Transport-neutral message: {to, from, subject, html, text, replyTo?}."""
    to: str
    sender: str
    subject: str
    html: str
    text: str
    reply_to: Optional[str] = None


class Notifier(Protocol):
    async def send(self, message: NotificationMessage) -> None:
        """Deliver message or raise NotificationError."""
        ...


def build_notification(contact: ContactRequest, to: str, sender: str) -> NotificationMessage:
    """
    Build the notification for a submission.

    Every submitted field is HTML-escaped before it goes into any part of
    the message (subject, HTML body, text body, reply-to). Header values are
    also stripped of control characters.
    """
    name = sanitize_text(contact.name)
    email = sanitize_text(contact.email)
    subject = sanitize_text(contact.subject)
    message = sanitize_text(contact.message)
    html_message = message.replace("\n", "<br>\n")

    html_body = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2 style="margin-top: 0;">New contact form submission</h2>
    <p><strong>Name:</strong> {name}</p>
    <p><strong>Email:</strong> {email}</p>
    <p><strong>Subject:</strong> {subject}</p>
    <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 20px 0;">
    <p>{html_message}</p>
</body>
</html>
"""

    text_body = f"""
New contact form submission from the landing page:

Name: {name}
Email: {email}
Subject: {subject}

Message:
{message}

---
Reply directly to this email to respond to {name} ({email}).
"""

    return NotificationMessage(
        to=to,
        sender=sender,
        subject=f"Contact Form: {sanitize_header(sanitize_text(contact.subject, max_length=200))}",
        html=html_body,
        text=text_body,
        reply_to=sanitize_header(email) or None,
    )


def build_mime_message(message: NotificationMessage) -> MIMEMultipart:
    msg = MIMEMultipart('alternative')
    msg['From'] = message.sender
    msg['To'] = message.to
    if message.reply_to:
        msg['Reply-To'] = message.reply_to  # Allow replying directly to the sender
    msg['Subject'] = message.subject

    # Attach both versions, plain text first
    msg.attach(MIMEText(message.text, 'plain', 'utf-8'))
    msg.attach(MIMEText(message.html, 'html', 'utf-8'))
    return msg


class SmtpNotifier:
    """Sends notifications through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        secure: bool = False,
        timeout: float = SMTP_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.timeout = timeout

    def _send_sync(self, message: NotificationMessage) -> None:
        msg = build_mime_message(message)
        if self.secure:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                server.login(self.user, self.password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()  # Enable encryption
                server.login(self.user, self.password)
                server.send_message(msg)

    async def send(self, message: NotificationMessage) -> None:
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery failed: {str(e)}") from e


class MailCommandNotifier:
    """Pipes the plain text body into a local `mail` command."""

    def __init__(self, command: str = "mail"):
        self.command = command

    async def send(self, message: NotificationMessage) -> None:
        args = [self.command, "-s", message.subject, message.to]
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise NotificationError(f"Could not run {self.command}: {str(e)}") from e

        try:
            _, stderr = await process.communicate(message.text.encode("utf-8"))
        except asyncio.CancelledError:
            # Timed out by the caller; don't leave the child running
            try:
                process.kill()
            except ProcessLookupError:
                pass
            raise
        finally:
            if process.returncode is None:
                await process.wait()
        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() or f"exit status {process.returncode}"
            raise NotificationError(f"{self.command} failed: {detail}")


def create_notifier(settings: Settings) -> Optional[Notifier]:
    """Build the configured transport, or None when notifications are disabled."""
    if not settings.notify_enabled:
        return None
    if settings.notify_transport == "mail":
        return MailCommandNotifier(settings.mail_command)
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        secure=settings.smtp_secure,
        timeout=settings.notify_timeout_seconds,
    )
