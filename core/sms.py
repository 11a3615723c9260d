import os
from functools import lru_cache
from typing import Optional

from twilio.rest import Client

from utils.state import State


class TwilioSmsSender:
    """Sends plain-text SMS through the Twilio messages API."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        self.client = Client(account_sid, auth_token)
        self.from_number = from_number

    def send(self, to: str, body: str) -> str:
        message = self.client.messages.create(
            body=body,
            from_=self.from_number,
            to=to,
        )
        return message.sid


@lru_cache()
def _twilio_sender(account_sid: str, auth_token: str, from_number: str) -> TwilioSmsSender:
    State.logger.info("Twilio client initialized")
    return TwilioSmsSender(account_sid, auth_token, from_number)


def get_sms_sender() -> Optional[TwilioSmsSender]:
    """FastAPI dependency; ``None`` when Twilio is not configured."""
    account_sid = os.getenv("TWILIO_ACCOUNT_SID")
    auth_token = os.getenv("TWILIO_AUTH_TOKEN")
    from_number = os.getenv("TWILIO_PHONE_NUMBER")
    if not (account_sid and auth_token and from_number):
        State.logger.warning("Twilio credentials are not configured")
        return None
    return _twilio_sender(account_sid, auth_token, from_number)
