"""
SMTP email dispatch client.

Renders Jinja2 templates and sends them via SMTP (Mailhog locally, any SMTP
relay in production).

Decision: Every failure leaves this module as a SendError with a kind. The
rules follow SMTP reply classes: 5xx replies, refused senders/recipients,
invalid addresses and template errors are PERMANENT; 4xx replies, dropped
connections and timeouts are TRANSIENT.
"""

import logging
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any

import aiosmtplib
from email_validator import EmailNotValidError, validate_email
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from src.application.email_service import EmailDispatchClient, EmailTemplate
from src.application.exceptions import SendError, SendErrorKind

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


def format_timestamp(value: datetime) -> str:
    """Jinja2 filter for timestamps shown to users, labelled with their zone."""
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").rstrip()


def build_template_environment(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    env = Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=True,  # Prevent XSS in HTML emails
        undefined=StrictUndefined,  # A missing variable is a render error, not a blank
    )
    env.filters["timestamp"] = format_timestamp
    return env


def classify_smtp_error(error: Exception) -> SendErrorKind:
    """Decide whether an aiosmtplib/socket error is worth retrying."""
    if isinstance(error, aiosmtplib.SMTPRecipientsRefused):
        codes = [recipient.code for recipient in error.recipients]
        if codes and all(code >= 500 for code in codes):
            return SendErrorKind.PERMANENT
        return SendErrorKind.TRANSIENT
    if isinstance(error, aiosmtplib.SMTPResponseException):
        return SendErrorKind.PERMANENT if error.code >= 500 else SendErrorKind.TRANSIENT
    return SendErrorKind.TRANSIENT


class SmtpEmailDispatchClient(EmailDispatchClient):
    """
    EmailDispatchClient that sends emails via SMTP.

    A new SMTP connection is opened per message, so one instance can be
    shared by concurrent workers.
    """

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_username: str | None = None,
        smtp_password: str | None = None,
        from_email: str = "noreply@example.com",
        use_tls: bool = False,
        timeout: float = 10.0,
        templates_dir: Path = TEMPLATES_DIR,
    ):
        """
        Initialize the SMTP client.

        Args:
            smtp_host: SMTP server hostname
            smtp_port: SMTP server port
            smtp_username: SMTP authentication username (optional for Mailhog)
            smtp_password: SMTP authentication password (optional for Mailhog)
            from_email: Sender email address
            use_tls: Connect with implicit TLS
            timeout: Socket timeout for each SMTP command
            templates_dir: Where `<template_id>.html` / `.txt` live
        """
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.from_email = from_email
        self.use_tls = use_tls
        self.timeout = timeout
        self.jinja_env = build_template_environment(templates_dir)

        logger.info(
            f"SMTP email client initialized: {smtp_host}:{smtp_port} "
            f"(auth: {'yes' if smtp_username else 'no'})"
        )

    def render(self, template: EmailTemplate, to: str, variables: dict[str, Any]) -> MIMEMultipart:
        """
        Build the MIME message (plain text fallback + HTML).

        Raises:
            SendError: PERMANENT if a template is missing or fails to render
        """
        try:
            text_content = self.jinja_env.get_template(f"{template.template_id}.txt").render(
                variables
            )
            html_content = self.jinja_env.get_template(f"{template.template_id}.html").render(
                variables
            )
        except TemplateError as e:
            raise SendError(SendErrorKind.PERMANENT, f"template {template.template_id}: {e}") from e

        message = MIMEMultipart("alternative")
        message["Subject"] = template.subject
        message["From"] = self.from_email
        message["To"] = to
        message.attach(MIMEText(text_content, "plain", _charset="utf-8"))
        message.attach(MIMEText(html_content, "html", _charset="utf-8"))
        return message

    async def send(self, template: EmailTemplate, to: str, variables: dict[str, Any]) -> None:
        """
        Render and send one email.

        Raises:
            SendError: TRANSIENT or PERMANENT, see module docstring
        """
        try:
            validate_email(to, check_deliverability=False)
        except EmailNotValidError as e:
            raise SendError(SendErrorKind.PERMANENT, f"invalid recipient {to!r}: {e}") from e

        message = self.render(template, to, variables)

        try:
            logger.info(f"Sending {template.template_id} email to {to} via SMTP")
            async with aiosmtplib.SMTP(
                hostname=self.smtp_host,
                port=self.smtp_port,
                use_tls=self.use_tls,
                timeout=self.timeout,
            ) as smtp:
                if self.smtp_username and self.smtp_password:
                    await smtp.login(self.smtp_username, self.smtp_password)
                await smtp.send_message(message)
        except (aiosmtplib.SMTPException, OSError) as e:
            kind = classify_smtp_error(e)
            logger.error(f"Failed to send {template.template_id} email to {to} ({kind.value}): {e}")
            raise SendError(kind, str(e)) from e

        logger.info(f"Email {template.template_id} sent successfully to {to}")
