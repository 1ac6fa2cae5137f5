"""Appointment slot generation and booking.

Offers a handful of one-hour consultation slots over the next five
business days and forwards a chosen slot, the customer's contact details
and the chat transcript to the scheduling webhook.

Slot selection is random. Pass a seeded ``numpy.random.Generator`` as
``rng`` to get repeatable output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
import requests

from . import config
from .logging_config import get_logger

logger = get_logger(__name__)

AVAILABLE_HOURS = (9, 10, 11, 14, 15, 16)
SLOTS_PER_DAY = 3
BUSINESS_DAYS = 5
APPOINTMENT_DURATION = timedelta(hours=1)
DAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


class AppointmentError(Exception):
    """Base class for appointment booking failures."""


class MissingAppointmentInfoError(AppointmentError, ValueError):
    def __init__(self, message: str = 'Missing required appointment information'):
        super().__init__(message)


class InvalidEmailError(AppointmentError, ValueError):
    def __init__(self, message: str = 'Invalid email address'):
        super().__init__(message)


class SchedulingFailedError(AppointmentError):
    """The scheduling webhook answered with a non-success status."""

    def __init__(self, status_code: Optional[int] = None, message: str = 'Failed to schedule appointment'):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Slot:
    time: datetime
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {'time': self.time.isoformat(), 'type': self.type}


@dataclass
class DaySlots:
    day_name: str
    slots: List[Slot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'day_name': self.day_name, 'slots': [slot.to_dict() for slot in self.slots]}


AvailableSlotMap = Dict[str, DaySlots]


def validate_email(email: Any) -> bool:
    return bool(EMAIL_PATTERN.match(str(email).lower()))


def _shuffle(items: List[Any], rng: np.random.Generator) -> List[Any]:
    """Fisher-Yates shuffle in place."""
    for i in range(len(items) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        items[i], items[j] = items[j], items[i]
    return items


def _slot_type(hour: int) -> str:
    return 'morning' if hour < 12 else 'afternoon'


def generate_available_slots(
    current_time: datetime,
    rng: Optional[np.random.Generator] = None,
) -> AvailableSlotMap:
    """Build the map of bookable slots for the next five business days.

    Days are walked from midnight of ``current_time``. Weekends are
    skipped, as are hours at or before ``current_time``; a day left with no
    candidates does not count towards the five. Each populated day offers
    up to three hours picked at random from 9, 10, 11, 14, 15 and 16.

    Args:
        current_time: The moment the slots are generated for
        rng: Random source for the shuffle (defaults to an unseeded generator)

    Returns:
        Dictionary mapping ``YYYY-MM-DD`` to :class:`DaySlots`
    """
    rng = rng if rng is not None else np.random.default_rng()
    available: AvailableSlotMap = {}
    day = current_time.replace(hour=0, minute=0, second=0, microsecond=0)

    while len(available) < BUSINESS_DAYS:
        if day.weekday() < 5:
            candidates = []
            for hour in AVAILABLE_HOURS:
                slot_time = day.replace(hour=hour)
                if slot_time > current_time:
                    candidates.append(Slot(time=slot_time, type=_slot_type(hour)))

            if candidates:
                _shuffle(candidates, rng)
                available[day.date().isoformat()] = DaySlots(
                    day_name=DAY_NAMES[day.weekday()],
                    slots=candidates[:SLOTS_PER_DAY],
                )
        day += timedelta(days=1)

    return available


def fetch_available_slots(
    now: Optional[datetime] = None,
    rng: Optional[np.random.Generator] = None,
) -> AvailableSlotMap:
    """Slots for the current moment, or an empty map if generation fails."""
    try:
        return generate_available_slots(now or datetime.now(), rng=rng)
    except Exception:
        logger.exception("Error generating available slots")
        return {}


def format_time_slot(moment: datetime) -> str:
    """Short label for a slot button, e.g. ``9:00 AM``."""
    hour = moment.hour % 12 or 12
    meridiem = 'AM' if moment.hour < 12 else 'PM'
    return f"{hour}:{moment.minute:02d} {meridiem}"


def format_date_for_webhook(moment: datetime) -> str:
    """Format as ``MM/DD/YYYY hh:mm AM`` for the scheduling webhook."""
    hour = moment.hour % 12 or 12
    meridiem = 'AM' if moment.hour < 12 else 'PM'
    return f"{moment.month:02d}/{moment.day:02d}/{moment.year:04d} {hour:02d}:{moment.minute:02d} {meridiem}"


def format_conversation(messages: Iterable[Mapping[str, Any]]) -> str:
    return '\n\n'.join(f"{msg.get('sender', '')}: {msg.get('text', '')}" for msg in messages)


def _coerce_slot_time(selected_slot: Union[datetime, Slot, str]) -> datetime:
    if isinstance(selected_slot, Slot):
        return selected_slot.time
    if isinstance(selected_slot, datetime):
        return selected_slot
    ts = pd.to_datetime(selected_slot, errors='coerce')
    if pd.isna(ts):
        raise MissingAppointmentInfoError(f"Invalid appointment slot: {selected_slot!r}")
    return ts.to_pydatetime()


@dataclass(frozen=True)
class AppointmentRequest:
    selected_slot: datetime
    user_email: str
    user_name: str
    conversation: str = ''

    @property
    def end_time(self) -> datetime:
        return self.selected_slot + APPOINTMENT_DURATION

    def to_payload(self) -> Dict[str, str]:
        """Body expected by the scheduling webhook."""
        return {
            'email': self.user_email,
            'name': self.user_name,
            'startDate': format_date_for_webhook(self.selected_slot),
            'endDate': format_date_for_webhook(self.end_time),
            'conversation': self.conversation,
        }


def build_appointment_request(
    selected_slot: Union[datetime, Slot, str, None],
    user_email: Optional[str],
    user_name: Optional[str],
    messages: Sequence[Mapping[str, Any]] = (),
) -> AppointmentRequest:
    """Validate booking input and assemble the request.

    Raises:
        MissingAppointmentInfoError: slot, email or name is empty
        InvalidEmailError: email is malformed
    """
    if not selected_slot or not user_email or not user_name:
        raise MissingAppointmentInfoError()
    if not validate_email(user_email):
        raise InvalidEmailError()

    return AppointmentRequest(
        selected_slot=_coerce_slot_time(selected_slot),
        user_email=user_email,
        user_name=user_name,
        conversation=format_conversation(messages),
    )


def schedule_appointment(
    selected_slot: Union[datetime, Slot, str, None],
    user_email: Optional[str],
    user_name: Optional[str],
    messages: Sequence[Mapping[str, Any]] = (),
    *,
    webhook_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """Book a one-hour appointment through the scheduling webhook.

    Input is validated before anything is sent. There is no retry; the
    caller decides whether to let the user try again.

    Args:
        selected_slot: Start of the appointment
        user_email: Contact email
        user_name: Contact name
        messages: Chat transcript as ``{'sender': ..., 'text': ...}`` dicts
        webhook_url: Overrides ``BUDGETEASE_SCHEDULE_WEBHOOK_URL``
        session: Optional requests session to send through
        timeout: Request timeout in seconds (defaults to config)

    Returns:
        ``{'success': True, 'start_date': <formatted start>}``

    Raises:
        MissingAppointmentInfoError, InvalidEmailError: bad input
        SchedulingFailedError: webhook returned a non-2xx status
        requests.RequestException: the request itself failed
    """
    appointment = build_appointment_request(selected_slot, user_email, user_name, messages)

    url = webhook_url or config.SCHEDULE_WEBHOOK_URL
    if not url:
        raise AppointmentError('Scheduling webhook URL is not configured')

    payload = appointment.to_payload()
    sender = session or requests
    try:
        response = sender.post(
            url,
            json=payload,
            timeout=timeout if timeout is not None else config.REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Error scheduling appointment: %s", e)
        raise

    if not response.ok:
        logger.error(
            "Scheduling webhook returned %s for %s",
            response.status_code,
            appointment.user_email,
        )
        raise SchedulingFailedError(status_code=response.status_code)

    logger.info("Appointment scheduled for %s", payload['startDate'])
    return {
        'success': True,
        'start_date': payload['startDate'],
    }
