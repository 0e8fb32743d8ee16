"""Delivery of verification and reset codes over email or SMS."""

import enum
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from twilio.rest import Client

from app.config import Settings, get_settings
from app.errors import DispatchFailed
from app.models.user import User
from app.services.identifiers import Channel

logger = logging.getLogger("talent_onboarding")

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "messages"


class Purpose(str, enum.Enum):
    """What a dispatched code authorizes."""

    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"


SUBJECTS = {
    Purpose.VERIFICATION: "Verify your account",
    Purpose.PASSWORD_RESET: "Reset your password",
}


def humanize_minutes(minutes: int) -> str:
    """Render a code lifetime for message bodies, e.g. ``24 hours``."""
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"


class SmtpEmailSender:
    """Sends multipart email through an SMTP relay.

    When the email service is disabled the message is written to the log
    instead, which is how codes are read during local development.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.enabled = settings.EMAIL_SERVICE_ENABLED
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.MAIL_FROM

    def send(self, to: str, subject: str, html: str, text: str) -> None:
        if not self.enabled:
            logger.info("EMAIL SERVICE DISABLED: would send %r to %s: %s", subject, to, text)
            return

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            server.starttls()
            if self.username:
                server.login(self.username, self.password or "")
            server.send_message(message)


class TwilioSmsSender:
    """Sends SMS through Twilio. Logs the message when SMS is disabled."""

    def __init__(self, settings: Settings | None = None, client: Client | None = None) -> None:
        settings = settings or get_settings()
        self.enabled = settings.SMS_SERVICE_ENABLED
        self.account_sid = settings.TWILIO_ACCOUNT_SID
        self.auth_token = settings.TWILIO_AUTH_TOKEN
        self.from_number = settings.TWILIO_FROM_NUMBER
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send(self, to: str, body: str) -> None:
        if not self.enabled:
            logger.info("SMS SERVICE DISABLED: would send to %s: %s", to, body)
            return
        message = self.client.messages.create(body=body, from_=self.from_number, to=to)
        logger.info("SMS queued with Twilio (sid=%s)", message.sid)


class ChannelDispatcher:
    """Renders a code message and sends it through exactly one channel."""

    def __init__(
        self,
        email_sender: SmtpEmailSender | None = None,
        sms_sender: TwilioSmsSender | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.email_sender = email_sender or SmtpEmailSender(self.settings)
        self.sms_sender = sms_sender or TwilioSmsSender(self.settings)
        self.templates = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(["html"]),
        )

    def render(self, purpose: Purpose, extension: str, **context) -> str:
        return self.templates.get_template(f"{purpose.value}.{extension}").render(**context).strip()

    def send_code(self, user: User, channel: Channel, code: str, purpose: Purpose) -> None:
        """Deliver ``code`` to the user's address on ``channel``.

        Raises DispatchFailed if the provider rejects or cannot be reached.
        The caller has already committed the code, so a failure here is
        recoverable by requesting a new one.
        """
        context = {
            "first_name": user.first_name,
            "code": code,
            "app_name": self.settings.APP_NAME,
            "expires_in": humanize_minutes(self.settings.VERIFICATION_CODE_EXPIRE_MINUTES),
        }
        text = self.render(purpose, "txt", **context)

        try:
            if channel == Channel.EMAIL:
                html = self.render(purpose, "html", **context)
                self.email_sender.send(user.email, SUBJECTS[purpose], html, text)
            else:
                self.sms_sender.send(user.phone_number, text)
        except Exception as exc:
            logger.error(
                "Failed to deliver %s code to user %s via %s: %s",
                purpose.value,
                user.id,
                channel.value,
                exc,
            )
            raise DispatchFailed() from exc

        logger.info("Delivered %s code to user %s via %s", purpose.value, user.id, channel.value)


_dispatcher: ChannelDispatcher | None = None


def get_dispatcher() -> ChannelDispatcher:
    """Get singleton dispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = ChannelDispatcher()
    return _dispatcher
