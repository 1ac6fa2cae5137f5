"""Tests for budgetease.assistant."""

from __future__ import annotations

import json

import pandas as pd
import pytest
import requests
import responses

from budgetease.assistant import (
    NO_BUDGETS,
    NO_TRANSACTIONS,
    CompletionClient,
    CompletionError,
    build_assistant_prompt,
    format_ai_response,
    is_scheduling_request,
    summarize_budgets,
    summarize_transactions,
    welcome_message,
)
from budgetease.budget_progress import Budget

API_URL = 'https://llm.example.com/v1/models/test:generateContent'
PROFILE = {'name': 'Ana', 'current_balance': 1520.5, 'monthly_income': 4200, 'total_savings': 800}


def _completion(text):
    return {'candidates': [{'content': {'parts': [{'text': text}]}}]}


@pytest.mark.parametrize('text, expected', [
    ('Can I schedule a call?', True),
    ('I need an APPOINTMENT', True),
    ('Could we book a time next week', True),
    ('Let us meet', True),
    ('free consultation please', True),
    ('How much did I spend on food?', False),
    ('', False),
])
def test_is_scheduling_request(text, expected):
    assert is_scheduling_request(text) is expected


def test_format_ai_response():
    raw = "**Tip:** save more.Start today\n\n\n\nGood luck  "
    assert format_ai_response(raw) == "Tip: save more. Start today\n\nGood luck"


def test_welcome_message_uses_profile_figures():
    message = welcome_message(PROFILE)
    assert message.startswith('Hi Ana!')
    assert '$1,520.50' in message
    assert '$4,200.00' in message


def test_summaries():
    transactions = pd.DataFrame([
        {'date': '2026-10-15T08:00:00', 'description': 'Groceries', 'amount': -54.2},
    ])
    assert summarize_transactions(transactions) == '2026-10-15: Groceries - -$54.20'
    assert summarize_transactions(None) == ''

    budgets = [
        Budget('Emergency', savings_goal=1000, current_saved=450, period='yearly'),
        {'category': 'Mystery'},
    ]
    assert summarize_budgets(budgets) == (
        'Emergency: $450.00 of $1,000.00 saved (45.0%)\nMystery: no savings data'
    )


def test_prompt_falls_back_when_no_data():
    prompt = build_assistant_prompt(None, None, [], [], 'Hello')
    assert 'the user' in prompt
    assert NO_TRANSACTIONS in prompt
    assert NO_BUDGETS in prompt
    assert prompt.rstrip().endswith('Be encouraging but realistic.')


def test_prompt_includes_history_and_message():
    messages = [{'sender': 'bot', 'text': 'Hi'}, {'sender': 'user', 'text': 'Budget help'}]
    prompt = build_assistant_prompt(PROFILE, [], [], messages, 'How am I doing?')
    assert 'Budget Planning Assistant for Ana' in prompt
    assert 'Previous messages: bot: Hi\nuser: Budget help' in prompt
    assert 'User message: How am I doing?' in prompt


@responses.activate
def test_completion_client_returns_first_candidate():
    responses.add(responses.POST, API_URL, json=_completion('Save 20% of income.'), status=200)

    client = CompletionClient(api_url=API_URL, api_key='secret')
    assert client.complete('prompt text') == 'Save 20% of income.'

    request = responses.calls[0].request
    assert 'key=secret' in request.url
    assert json.loads(request.body) == {'contents': [{'parts': [{'text': 'prompt text'}]}]}


@responses.activate
def test_completion_client_http_error():
    responses.add(responses.POST, API_URL, json={'error': 'quota'}, status=429)

    with pytest.raises(requests.HTTPError):
        CompletionClient(api_url=API_URL, api_key='secret').complete('prompt')


@responses.activate
def test_completion_client_empty_candidates():
    responses.add(responses.POST, API_URL, json={'candidates': []}, status=200)

    with pytest.raises(CompletionError):
        CompletionClient(api_url=API_URL).complete('prompt')


@responses.activate
def test_reply_formats_model_output():
    responses.add(responses.POST, API_URL, json=_completion('**Nice** work.Keep going'), status=200)

    reply = CompletionClient(api_url=API_URL).reply('How am I doing?', profile=PROFILE)
    assert reply == 'Nice work. Keep going'
