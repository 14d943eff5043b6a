"""
Email Service for UniRecords
============================
Templated notifications keyed by event type:
- Welcome / account provisioning
- Password reset
- Admission, leave, grievance, thesis status changes
- Fee payment confirmation

Delivers through SendGrid when an API key is configured and falls back to
SMTP otherwise. ``send_email`` never raises; it returns False on failure so
callers decide whether a lost email matters.
"""

import aiosmtplib
import asyncio
import enum
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Any, Dict, Optional, Tuple
from datetime import datetime
from html import escape

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from unirecords.core.config import settings
from unirecords.core.logging_config import logger


class NotificationEvent(str, enum.Enum):
    WELCOME = "welcome"
    PASSWORD_RESET = "password_reset"
    ADMISSION_STATUS = "admission_status"
    ENROLLMENT = "enrollment"
    LEAVE_STATUS = "leave_status"
    GRIEVANCE_STATUS = "grievance_status"
    THESIS_STATUS = "thesis_status"
    FEE_PAYMENT = "fee_payment"


# event -> (subject, body paragraphs); bodies are str.format templates
TEMPLATES: Dict[NotificationEvent, Tuple[str, Tuple[str, ...]]] = {
    NotificationEvent.WELCOME: (
        "Welcome to {app_name}",
        (
            "Your {role} account has been created.",
            "Sign in with {email}{password_line}.",
        ),
    ),
    NotificationEvent.PASSWORD_RESET: (
        "Reset your password - {app_name}",
        (
            "We received a request to reset your password.",
            "Open this link to choose a new one: {reset_url}",
            "The link expires in {expires_minutes} minutes. If you did not ask for it, ignore this email.",
        ),
    ),
    NotificationEvent.ADMISSION_STATUS: (
        "Your application {application_number} is now {status}",
        (
            "The status of your application for {program} has changed to {status}.",
            "{remarks}",
        ),
    ),
    NotificationEvent.ENROLLMENT: (
        "Enrollment confirmed - {registration_number}",
        (
            "Congratulations, you are enrolled in {program}.",
            "Registration number: {registration_number}",
            "Sign in with {email} and temporary password {password}, then change it.",
        ),
    ),
    NotificationEvent.LEAVE_STATUS: (
        "Leave request {status}",
        (
            "Your {leave_type} leave from {start_date} to {end_date} was {status}.",
            "{comments}",
        ),
    ),
    NotificationEvent.GRIEVANCE_STATUS: (
        "Grievance update: {subject}",
        (
            "Your grievance is now {status}.",
            "{comments}",
        ),
    ),
    NotificationEvent.THESIS_STATUS: (
        "Thesis status update: {title}",
        (
            "Your thesis status is now {status}.",
            "{review_feedback}",
        ),
    ),
    NotificationEvent.FEE_PAYMENT: (
        "Payment received - receipt {receipt_number}",
        (
            "We received {amount_paid} towards your {fee_type} fee for semester {semester}.",
            "Current status: {status}. Receipt number: {receipt_number}.",
        ),
    ),
}


class _Defaults(dict):
    """str.format_map helper: unknown placeholders render empty"""

    def __missing__(self, key):
        return ""


def render_template(event: NotificationEvent, context: Dict[str, Any]) -> Tuple[str, str, str]:
    """Return (subject, html, text) for an event"""
    subject_tpl, paragraphs = TEMPLATES[event]
    values = _Defaults(app_name=settings.APP_NAME, **context)
    subject = subject_tpl.format_map(values)
    lines = [p.format_map(values) for p in paragraphs]
    lines = [line for line in lines if line.strip()]
    name = context.get("name") or "there"

    text_content = "\n\n".join([f"Hi {name},", *lines, f"- The {settings.APP_NAME} Team"])
    html_content = (
        "<!DOCTYPE html><html><body style=\"font-family: sans-serif; color: #333;\">"
        f"<p>Hi {escape(str(name))},</p>"
        + "".join(f"<p>{escape(line)}</p>" for line in lines)
        + f"<p style=\"font-size: 12px; color: #6b7280;\">&copy; {datetime.utcnow().year} {escape(settings.APP_NAME)}</p>"
        "</body></html>"
    )
    return subject, html_content, text_content


class EmailService:
    """Async email service using SendGrid or SMTP"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.sendgrid_api_key = settings.SENDGRID_API_KEY
        self.use_sendgrid = settings.USE_SENDGRID and bool(self.sendgrid_api_key)

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        if self.use_sendgrid:
            return True
        return bool(self.smtp_user and self.smtp_password)

    @property
    def provider(self) -> str:
        if self.use_sendgrid:
            return "sendgrid"
        return "smtp" if self.is_configured else "none"

    async def notify(self, event: NotificationEvent, to_email: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """Render the template for `event` and send it"""
        subject, html_content, text_content = render_template(event, context or {})
        sent = await self.send_email(to_email, subject, html_content, text_content)
        if not sent:
            logger.warning(f"[Email] {event.value} notification to {to_email} was not delivered")
        return sent

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise.
        """
        if not self.is_configured:
            logger.warning("[Email] Email service not configured, skipping email send")
            return False

        if self.use_sendgrid:
            return await self._send_via_sendgrid(to_email, subject, html_content, text_content)
        return await self._send_via_smtp(to_email, subject, html_content, text_content)

    async def _send_via_sendgrid(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send email via SendGrid API"""
        try:
            message = Mail(
                from_email=Email(self.from_email, self.from_name),
                to_emails=To(to_email),
                subject=subject,
                html_content=Content("text/html", html_content)
            )

            if text_content:
                message.add_content(Content("text/plain", text_content))

            sg = SendGridAPIClient(self.sendgrid_api_key)
            # SendGrid's client is synchronous
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, sg.send, message)

            if response.status_code in [200, 201, 202]:
                logger.info(f"[Email/SendGrid] Sent to {to_email}: {subject}")
                return True
            logger.error(f"[Email/SendGrid] Failed with status {response.status_code}: {response.body}")
            return False

        except Exception as e:
            logger.error(f"[Email/SendGrid] Failed to send email to {to_email}: {e}")
            return False

    async def _send_via_smtp(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send email via SMTP"""
        try:
            message = MIMEMultipart("alternative")
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email
            message["Subject"] = subject

            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True
            )

            logger.info(f"[Email/SMTP] Sent to {to_email}: {subject}")
            return True

        except Exception as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False


email_service = EmailService()


def get_email_service() -> EmailService:
    return email_service
