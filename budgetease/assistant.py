"""Chat assistant helpers.

Builds the prompt sent to the text-completion endpoint from a user's
profile, recent transactions and budgets, and cleans up the reply. Messages
that ask for a meeting are routed to appointment scheduling instead of the
completion endpoint; :func:`is_scheduling_request` makes that call.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import pandas as pd
import requests

from . import config
from .budget_progress import Budget, calculate_budget_progress
from .formatting import as_float, format_currency
from .logging_config import get_logger

logger = get_logger(__name__)

SCHEDULING_KEYWORDS = ('schedule', 'appointment', 'book a time', 'meet', 'consultation')

NO_TRANSACTIONS = 'No recent transactions available'
NO_BUDGETS = 'No budget categories set up yet'


class CompletionError(RuntimeError):
    """The completion endpoint answered without any usable text."""


def is_scheduling_request(text: str) -> bool:
    lowered = (text or '').lower()
    return any(keyword in lowered for keyword in SCHEDULING_KEYWORDS)


def format_ai_response(text: str) -> str:
    """Strip markdown emphasis and tidy spacing in a model reply."""
    cleaned = text.replace('*', '')
    cleaned = re.sub(r'\n{3,}', '\n\n', cleaned)
    cleaned = re.sub(r'\.(?=\S)', '. ', cleaned)
    return cleaned.strip()


def welcome_message(profile: Mapping[str, Any]) -> str:
    name = profile.get('name') or 'there'
    balance = format_currency(as_float(profile.get('current_balance')))
    income = format_currency(as_float(profile.get('monthly_income')))
    return (
        f"Hi {name}! I'm your BudgetEase assistant. I can help you with:\n\n"
        f"1. Managing your finances - Your current balance is {balance} "
        f"with a monthly income of {income}.\n"
        "2. Setting up meetings with our team - Just ask to schedule a consultation.\n\n"
        "How can I assist you today?"
    )


def summarize_transactions(transactions: Union[pd.DataFrame, Iterable[Mapping[str, Any]], None]) -> str:
    """One ``date: description - $amount`` line per transaction."""
    if transactions is None:
        return ''
    if isinstance(transactions, pd.DataFrame):
        records = transactions.to_dict('records')
    else:
        records = list(transactions)

    lines = []
    for txn in records:
        day = str(txn.get('date', '')).split('T')[0]
        amount = format_currency(as_float(txn.get('amount')))
        lines.append(f"{day}: {txn.get('description', '')} - {amount}")
    return '\n'.join(lines)


def summarize_budgets(budgets: Iterable[Union[Budget, Mapping[str, Any]]]) -> str:
    lines = []
    for item in budgets:
        budget = item if isinstance(item, Budget) else Budget.from_record(item)
        result = calculate_budget_progress(budget)
        if not result.available:
            lines.append(f"{budget.category}: no savings data")
            continue
        lines.append(
            f"{budget.category}: {format_currency(budget.current_saved)} of "
            f"{format_currency(budget.savings_goal)} saved ({result.progress:.1f}%)"
        )
    return '\n'.join(lines)


def build_assistant_prompt(
    profile: Optional[Mapping[str, Any]],
    transactions: Union[pd.DataFrame, Iterable[Mapping[str, Any]], None],
    budgets: Iterable[Union[Budget, Mapping[str, Any]]],
    messages: Sequence[Mapping[str, Any]],
    user_message: str,
) -> str:
    profile = profile or {}
    history = '\n'.join(f"{m.get('sender', '')}: {m.get('text', '')}" for m in messages)
    return f"""You are a dual-purpose AI assistant for BudgetEase:

1. Budget Planning Assistant for {profile.get('name') or 'the user'}:
Current financial status:
- Current balance: {format_currency(as_float(profile.get('current_balance')))}
- Monthly income: {format_currency(as_float(profile.get('monthly_income')))}
- Total savings: {format_currency(as_float(profile.get('total_savings')))}

Recent transactions:
{summarize_transactions(transactions) or NO_TRANSACTIONS}

Current budgets:
{summarize_budgets(budgets) or NO_BUDGETS}

2. Customer Service:
- You can help schedule consultations with the BudgetEase team

Previous messages: {history}
User message: {user_message}

Provide clear, specific advice without using asterisks. Reference actual numbers from their financial data when relevant. Be encouraging but realistic."""


class CompletionClient:
    """Minimal client for a generateContent-style completion endpoint."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.api_url = api_url or config.COMPLETION_API_URL
        self.api_key = api_key or config.COMPLETION_API_KEY
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT

    def complete(self, prompt: str) -> str:
        """Send ``prompt`` and return the first candidate's text.

        Raises:
            requests.HTTPError: non-2xx response
            CompletionError: response carried no candidate text
        """
        params = {'key': self.api_key} if self.api_key else None
        body = {'contents': [{'parts': [{'text': prompt}]}]}
        try:
            response = self.session.post(self.api_url, params=params, json=body, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Completion request failed: %s", e)
            raise

        data = response.json()
        try:
            text = data['candidates'][0]['content']['parts'][0]['text']
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            raise CompletionError('Completion response contained no text')
        return text

    def reply(
        self,
        user_message: str,
        *,
        profile: Optional[Mapping[str, Any]] = None,
        transactions: Union[pd.DataFrame, Iterable[Mapping[str, Any]], None] = None,
        budgets: Iterable[Union[Budget, Mapping[str, Any]]] = (),
        messages: Sequence[Mapping[str, Any]] = (),
    ) -> str:
        prompt = build_assistant_prompt(profile, transactions, budgets, messages, user_message)
        return format_ai_response(self.complete(prompt))

