"""Tests for budgetease.appointments."""

from __future__ import annotations

import json
from datetime import datetime

import numpy as np
import pytest
import requests
import responses

from budgetease import appointments, config
from budgetease.appointments import (
    AVAILABLE_HOURS,
    AppointmentError,
    InvalidEmailError,
    MissingAppointmentInfoError,
    SchedulingFailedError,
    Slot,
    fetch_available_slots,
    format_date_for_webhook,
    format_time_slot,
    generate_available_slots,
    schedule_appointment,
    validate_email,
)

WEBHOOK = 'https://hooks.example.com/schedule'
MONDAY_MORNING = datetime(2026, 10, 19, 10, 30)


def _conversation():
    return [
        {'sender': 'bot', 'text': 'Hi Ana!'},
        {'sender': 'user', 'text': 'Can we book a consultation?'},
    ]


@pytest.mark.parametrize('now', [
    MONDAY_MORNING,
    datetime(2026, 10, 23, 17, 0),   # Friday after hours
    datetime(2026, 10, 24, 8, 0),    # Saturday
    datetime(2026, 10, 25, 23, 59),  # Sunday night
    datetime(2026, 12, 30, 16, 0),   # across a year boundary
])
def test_slot_map_shape(now):
    slots = generate_available_slots(now, rng=np.random.default_rng(7))

    assert len(slots) == 5
    for key, day in slots.items():
        day_date = datetime.strptime(key, '%Y-%m-%d')
        assert day_date.weekday() < 5
        assert day.day_name == day_date.strftime('%A')
        assert 1 <= len(day.slots) <= 3
        hours = [slot.time.hour for slot in day.slots]
        assert len(set(hours)) == len(hours)
        for slot in day.slots:
            assert slot.time > now
            assert slot.time.date() == day_date.date()
            assert slot.time.hour in AVAILABLE_HOURS
            assert slot.type == ('morning' if slot.time.hour < 12 else 'afternoon')


def test_today_is_included_when_hours_remain():
    slots = generate_available_slots(MONDAY_MORNING, rng=np.random.default_rng(1))
    assert list(slots) == ['2026-10-19', '2026-10-20', '2026-10-21', '2026-10-22', '2026-10-23']


def test_day_without_remaining_hours_is_skipped():
    slots = generate_available_slots(datetime(2026, 10, 23, 16, 0), rng=np.random.default_rng(1))
    assert list(slots) == ['2026-10-26', '2026-10-27', '2026-10-28', '2026-10-29', '2026-10-30']


def test_late_afternoon_leaves_single_slot_today():
    slots = generate_available_slots(datetime(2026, 10, 19, 15, 30), rng=np.random.default_rng(3))
    today = slots['2026-10-19']
    assert [slot.time.hour for slot in today.slots] == [16]
    assert today.day_name == 'Monday'


def test_day_slots_to_dict_uses_snake_case():
    slots = generate_available_slots(MONDAY_MORNING, rng=np.random.default_rng(5))
    day = slots['2026-10-20'].to_dict()

    assert set(day) == {'day_name', 'slots'}
    assert day['day_name'] == 'Tuesday'
    assert all(set(slot) == {'time', 'type'} for slot in day['slots'])


def test_seeded_generators_give_identical_slots():
    first = generate_available_slots(MONDAY_MORNING, rng=np.random.default_rng(42))
    second = generate_available_slots(MONDAY_MORNING, rng=np.random.default_rng(42))
    assert first == second


def test_fetch_available_slots_returns_empty_map_on_error(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError('clock broke')

    monkeypatch.setattr(appointments, 'generate_available_slots', boom)
    assert fetch_available_slots() == {}


def test_fetch_available_slots_uses_supplied_time():
    slots = fetch_available_slots(now=MONDAY_MORNING, rng=np.random.default_rng(0))
    assert '2026-10-19' in slots


@pytest.mark.parametrize('email, expected', [
    ('ana@example.com', True),
    ('Ana.Lopez@Example.CO', True),
    ('not-an-email', False),
    ('ana@example', False),
    ('ana @example.com', False),
    ('', False),
])
def test_validate_email(email, expected):
    assert validate_email(email) is expected


def test_formatting_helpers():
    assert format_date_for_webhook(datetime(2026, 10, 20, 14, 0)) == '10/20/2026 02:00 PM'
    assert format_date_for_webhook(datetime(2026, 1, 5, 9, 0)) == '01/05/2026 09:00 AM'
    assert format_date_for_webhook(datetime(2026, 1, 5, 0, 15)) == '01/05/2026 12:15 AM'
    assert format_time_slot(datetime(2026, 10, 20, 14, 0)) == '2:00 PM'
    assert format_time_slot(datetime(2026, 10, 20, 9, 0)) == '9:00 AM'


@responses.activate
def test_schedule_appointment_posts_to_webhook():
    responses.add(responses.POST, WEBHOOK, json={'accepted': True}, status=200)

    result = schedule_appointment(
        datetime(2026, 10, 20, 9, 0), 'ana@example.com', 'Ana', _conversation(), webhook_url=WEBHOOK
    )

    assert result == {'success': True, 'start_date': '10/20/2026 09:00 AM'}
    assert len(responses.calls) == 1
    body = json.loads(responses.calls[0].request.body)
    assert body == {
        'email': 'ana@example.com',
        'name': 'Ana',
        'startDate': '10/20/2026 09:00 AM',
        'endDate': '10/20/2026 10:00 AM',
        'conversation': 'bot: Hi Ana!\n\nuser: Can we book a consultation?',
    }


@responses.activate
def test_schedule_appointment_accepts_slot_and_iso_string():
    responses.add(responses.POST, WEBHOOK, status=204)
    responses.add(responses.POST, WEBHOOK, status=200)

    slot = Slot(time=datetime(2026, 10, 21, 15, 0), type='afternoon')
    assert schedule_appointment(slot, 'ana@example.com', 'Ana', webhook_url=WEBHOOK)['start_date'] == (
        '10/21/2026 03:00 PM'
    )
    assert schedule_appointment('2026-10-22T11:00:00', 'ana@example.com', 'Ana', webhook_url=WEBHOOK)[
        'start_date'
    ] == '10/22/2026 11:00 AM'


@responses.activate
def test_invalid_email_rejected_before_network():
    with pytest.raises(InvalidEmailError, match='Invalid email address'):
        schedule_appointment(MONDAY_MORNING, 'not-an-email', 'Ana', webhook_url=WEBHOOK)
    assert len(responses.calls) == 0


@responses.activate
@pytest.mark.parametrize('slot, email, name', [
    (None, 'ana@example.com', 'Ana'),
    (MONDAY_MORNING, '', 'Ana'),
    (MONDAY_MORNING, 'ana@example.com', None),
])
def test_missing_information_rejected(slot, email, name):
    with pytest.raises(MissingAppointmentInfoError, match='Missing required appointment information'):
        schedule_appointment(slot, email, name, webhook_url=WEBHOOK)
    assert len(responses.calls) == 0


def test_unparseable_slot_is_a_validation_error():
    with pytest.raises(ValueError):
        schedule_appointment('whenever', 'ana@example.com', 'Ana', webhook_url=WEBHOOK)


@responses.activate
def test_webhook_error_status_raises():
    responses.add(responses.POST, WEBHOOK, json={'error': 'nope'}, status=500)

    with pytest.raises(SchedulingFailedError, match='Failed to schedule appointment') as excinfo:
        schedule_appointment(MONDAY_MORNING, 'ana@example.com', 'Ana', webhook_url=WEBHOOK)
    assert excinfo.value.status_code == 500
    assert len(responses.calls) == 1


@responses.activate
def test_network_failure_propagates():
    responses.add(responses.POST, WEBHOOK, body=requests.ConnectionError('connection refused'))

    with pytest.raises(requests.ConnectionError):
        schedule_appointment(MONDAY_MORNING, 'ana@example.com', 'Ana', webhook_url=WEBHOOK)


def test_unconfigured_webhook_raises(monkeypatch):
    monkeypatch.setattr(config, 'SCHEDULE_WEBHOOK_URL', None)
    with pytest.raises(AppointmentError, match='not configured'):
        schedule_appointment(MONDAY_MORNING, 'ana@example.com', 'Ana')


@responses.activate
def test_configured_webhook_is_used(monkeypatch):
    monkeypatch.setattr(config, 'SCHEDULE_WEBHOOK_URL', WEBHOOK)
    responses.add(responses.POST, WEBHOOK, status=200)

    assert schedule_appointment(MONDAY_MORNING, 'ana@example.com', 'Ana')['success'] is True
