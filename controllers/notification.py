"""
Flood alert targeting and SMS broadcast.

An alert is only sent for a forecast between one and seven calendar days out
with a flooding probability of at least 60%. Recipients are the users whose
stored location contains the requested location (case-insensitive). Sending is
best effort: each recipient is tried once, failures are logged and skipped.
"""

import datetime
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from controllers.users import find_users_by_location
from core.errors import InternalError, NotFoundError, ValidationError
from utils.state import State

MIN_DAYS_AHEAD = 1
MAX_DAYS_AHEAD = 7
MIN_PERCENTAGE = 60
MAX_PERCENTAGE = 100

ALERT_TEMPLATE = (
    "Flood Alert: {percentage}% chance of flooding expected in {location} "
    "between now and {date}. Please stay alert and safe!"
)


@dataclass
class DispatchResult:
    matched: int = 0
    sent: int = 0
    skipped: int = 0
    failed: List[str] = field(default_factory=list)


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_forecast_date(value: str) -> datetime.date:
    """Calendar date of an ISO ``YYYY-MM-DD`` string or ISO datetime."""
    try:
        return datetime.datetime.fromisoformat(value).date()
    except (TypeError, ValueError):
        raise ValidationError("Date must be a valid ISO date")


def days_ahead(target: datetime.date, today: datetime.date) -> int:
    return (target - today).days


def validate_alert_request(
    location: Optional[str],
    percentage: Optional[float],
    date: Optional[str],
    today: datetime.date = None,
) -> datetime.date:
    """
    Check an alert request in order: presence, date window, probability.

    Returns:
        datetime.date: the parsed forecast date.

    Raises:
        ValidationError: on the first failed check.
    """
    if _is_missing(location) or percentage is None or _is_missing(date):
        raise ValidationError("Location, percentage, and date are required")

    target = parse_forecast_date(date)
    ahead = days_ahead(target, today or datetime.date.today())
    if ahead < MIN_DAYS_AHEAD or ahead > MAX_DAYS_AHEAD:
        raise ValidationError(
            f"Date must be between {MIN_DAYS_AHEAD}-{MAX_DAYS_AHEAD} days ahead"
        )

    # also rejects NaN
    if not (MIN_PERCENTAGE <= percentage <= MAX_PERCENTAGE):
        raise ValidationError(
            f"Percentage must be between {MIN_PERCENTAGE}-{MAX_PERCENTAGE}"
        )
    return target


def build_alert_message(location: str, percentage: float, date: str) -> str:
    return ALERT_TEMPLATE.format(
        percentage=f"{percentage:g}", location=location, date=date
    )


async def broadcast(users, message: str, sms_sender) -> DispatchResult:
    result = DispatchResult(matched=len(users))
    for user in users:
        if not user.phone_number:
            result.skipped += 1
            continue
        try:
            await run_in_threadpool(sms_sender.send, user.phone_number, message)
            result.sent += 1
        except Exception as e:
            result.failed.append(user.phone_number)
            State.logger.error(f"Failed to send SMS to {user.phone_number}: {str(e)}")
    return result


async def notify_users(
    location: Optional[str],
    percentage: Optional[float],
    date: Optional[str],
    db: Session,
    sms_sender,
    today: datetime.date = None,
) -> DispatchResult:
    """
    Validate an alert request and text every matching user.

    Raises:
        ValidationError: invalid request, raised before touching the database.
        NotFoundError: no user location matches.
        InternalError: matches exist but no SMS sender is configured.
    """
    validate_alert_request(location, percentage, date, today=today)

    users = find_users_by_location(location, db)
    if not users:
        raise NotFoundError("No users found for this location")
    if sms_sender is None:
        raise InternalError("SMS provider is not configured")

    message = build_alert_message(location, percentage, date)
    result = await broadcast(users, message, sms_sender)
    State.logger.info(
        f"Flood alert for '{location}': matched={result.matched} sent={result.sent} "
        f"skipped={result.skipped} failed={len(result.failed)}"
    )
    return result
