"""
Email adapter for the waitlist backend.

The Notifier keeps a single authenticated SMTP session per process and reuses
it across requests. Port 465 uses implicit TLS, any other port STARTTLS; the
server certificate is always validated.
"""

from __future__ import annotations

from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
import logging
import os
import smtplib
import ssl
import threading

from jinja2 import Environment, FileSystemLoader

from .config import Settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates", "email")
jinja_env = Environment(loader=FileSystemLoader(TEMPLATES_DIR), autoescape=True)


class NotificationError(Exception):
    """Raised when an email could not be handed to the SMTP server."""


def render_email_template(name: str, **context) -> str:
    template = jinja_env.get_template(name)
    return template.render(current_year=datetime.now().year, **context)


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


class Notifier:
    """Sends the subscriber confirmation and the admin alert over SMTP."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._server: smtplib.SMTP | None = None
        self._lock = threading.Lock()

    # -------------------------------------- session --------------------------------------
    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        if not s.smtp_configured:
            raise NotificationError("Email configuration is incomplete")
        context = ssl.create_default_context()
        if s.smtp_port == 465:
            server = smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout, context=context)
        else:
            server = smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout)
        try:
            if s.smtp_port != 465:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
            server.login(s.smtp_user, s.smtp_password)
        except (smtplib.SMTPException, OSError):
            self._quietly_close(server)
            raise
        logger.info("SMTP session opened with %s:%s", s.smtp_host, s.smtp_port)
        return server

    def _session(self) -> smtplib.SMTP:
        if self._server is not None:
            try:
                status, _ = self._server.noop()
                if status == 250:
                    return self._server
            except (smtplib.SMTPException, OSError):
                pass
            logger.info("SMTP session dropped; reconnecting")
            self._quietly_close(self._server)
            self._server = None
        self._server = self._connect()
        return self._server

    @staticmethod
    def _quietly_close(server: smtplib.SMTP) -> None:
        try:
            server.quit()
        except (smtplib.SMTPException, OSError):
            server.close()

    def close(self) -> None:
        with self._lock:
            if self._server is not None:
                self._quietly_close(self._server)
                self._server = None

    # -------------------------------------- sending --------------------------------------
    def _sender(self, display_name: str) -> str:
        return formataddr((display_name, self.settings.smtp_from or self.settings.smtp_user))

    def send(self, *, sender: str, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to_email
        msg.attach(MIMEText(text_body or html_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        envelope_from = self.settings.smtp_from or self.settings.smtp_user
        with self._lock:
            try:
                server = self._session()
                server.sendmail(envelope_from, [to_email], msg.as_string())
            except NotificationError:
                raise
            except (smtplib.SMTPException, OSError, UnicodeError) as exc:
                # smtplib sends commands as ASCII; non-ASCII addresses fail with UnicodeEncodeError
                if self._server is not None:
                    self._quietly_close(self._server)
                    self._server = None
                raise NotificationError(f"Failed to send email to {to_email}: {exc}") from exc

    def send_user_confirmation(self, email: str) -> None:
        brand = self.settings.brand_name
        html_body = render_email_template("confirmation.html", brand=brand, email=email)
        text_body = (
            f"Thank you for joining the {brand} waitlist!\n\n"
            "You'll be the first to hear about launches, pre-launch offers and limited pieces.\n\n"
            f"The {brand} Team"
        )
        self.send(
            sender=self._sender(brand),
            to_email=email,
            subject=f"Welcome to {brand}'s Exclusive Waitlist",
            html_body=html_body,
            text_body=text_body,
        )

    def send_admin_alert(self, admin_address: str, email: str, timestamp: datetime) -> None:
        when = format_timestamp(timestamp)
        html_body = render_email_template("admin_alert.html", email=email, timestamp=when)
        self.send(
            sender=self._sender(f"{self.settings.brand_name} System"),
            to_email=admin_address,
            subject="New Waitlist Entry",
            html_body=html_body,
            text_body=f"New waitlist signup\nEmail: {email}\nTime: {when}",
        )
