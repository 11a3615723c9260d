import os
import smtplib
from email.message import EmailMessage
from typing import Optional

from utils.state import State


class MailDeliveryError(Exception):
    """The SMTP server refused or dropped the message."""


class SmtpMailer:
    def __init__(self, host: str, port: int, username: str, password: str):
        self.host = host
        self.port = port
        self.username = username
        self.password = password

    def send(self, to: str, subject: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = f'"TERRA GUARD" <{self.username}>'
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("Open this message in an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(str(e)) from e


def get_mailer() -> Optional[SmtpMailer]:
    """FastAPI dependency; ``None`` when SMTP credentials are missing."""
    username = os.getenv("EMAIL_USER")
    password = os.getenv("EMAIL_PASS")
    if not (username and password):
        State.logger.warning("SMTP credentials are not configured")
        return None
    return SmtpMailer(
        host=os.getenv("EMAIL_HOST", "smtp.gmail.com"),
        port=int(os.getenv("EMAIL_PORT", "587")),
        username=username,
        password=password,
    )
