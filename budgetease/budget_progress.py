"""Budget progress and savings-goal calculations.

A budget tracks how much has been put aside towards a savings goal for a
category. :func:`calculate_budget_progress` derives the numbers shown on a
budget card: percent saved, amount remaining, whether the goal is met and
how much still has to be saved each month.

The result is a tagged value. ``ComputedProgress`` carries real metrics;
``ProgressUnavailable`` marks a budget whose numbers are missing, so callers
can tell "no data" apart from "nothing saved yet" while still rendering
zeros when they don't care.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import pandas as pd

from .logging_config import get_logger

logger = get_logger(__name__)

PERIOD_MONTHLY = 'monthly'
PERIOD_YEARLY = 'yearly'
BUDGET_PERIODS = {PERIOD_MONTHLY, PERIOD_YEARLY}

DEFAULT_MONTHS_REMAINING = 12
MAX_PROGRESS = 100.0

TABLE_COLUMNS = [
    'Category',
    'Period',
    'Savings Goal',
    'Current Saved',
    'Progress (%)',
    'Remaining',
    'Monthly Required',
    'Status',
]


def _coerce_number(value: Any) -> Optional[float]:
    """Convert a stored numeric value to float, or None when it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if pd.isna(value) else float(value)
    if isinstance(value, str) and not value.strip():
        return None
    number = pd.to_numeric(pd.Series([value]), errors='coerce').iloc[0]
    if pd.isna(number):
        return None
    return float(number)


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        logger.debug("Ignoring unparseable budget start date %r", value)
        return None
    return ts.date()


def _coerce_version(value: Any) -> int:
    number = _coerce_number(value)
    if number is None or not math.isfinite(number):
        return 0
    return int(number)


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


@dataclass(frozen=True)
class Budget:
    """A savings budget for one category."""

    category: str
    savings_goal: Optional[float]
    current_saved: Optional[float]
    start_date: Optional[date] = None
    period: str = PERIOD_MONTHLY
    id: Optional[Union[int, str]] = None
    user_id: Optional[str] = None
    version: int = 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Budget':
        """Build a Budget from a stored document.

        Accepts both the document store's camelCase keys (``savingsGoal``,
        ``currentSaved``, ``startDate``, ``$id``) and snake_case keys.
        Values that cannot be read as numbers are kept as ``None``.
        """
        return cls(
            category=str(_first(record, 'category') or ''),
            savings_goal=_coerce_number(_first(record, 'savings_goal', 'savingsGoal')),
            current_saved=_coerce_number(_first(record, 'current_saved', 'currentSaved')),
            start_date=_coerce_date(_first(record, 'start_date', 'startDate')),
            period=str(_first(record, 'period') or PERIOD_MONTHLY),
            id=_first(record, 'id', '$id'),
            user_id=_first(record, 'user_id', 'userId'),
            version=_coerce_version(_first(record, 'version')),
        )


@dataclass(frozen=True)
class ComputedProgress:
    """Progress metrics for a budget with usable numbers.

    ``progress`` is capped at 100 for display while ``remaining`` is not,
    so an oversaved budget reports a full bar and a negative remainder.
    """

    progress: float
    remaining: float
    is_completed: bool
    monthly_required: float

    available = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'progress': self.progress,
            'remaining': self.remaining,
            'is_completed': self.is_completed,
            'monthly_required': self.monthly_required,
        }


@dataclass(frozen=True)
class ProgressUnavailable:
    """Progress could not be computed; renders as all zeros."""

    reason: str

    available = False
    progress = 0.0
    remaining = 0.0
    is_completed = False
    monthly_required = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return dict(ZERO_PROGRESS)


BudgetProgress = Union[ComputedProgress, ProgressUnavailable]

ZERO_PROGRESS: Dict[str, Any] = {
    'progress': 0.0,
    'remaining': 0.0,
    'is_completed': False,
    'monthly_required': 0.0,
}


def months_remaining(start_date: Any, now: Optional[datetime] = None) -> int:
    """Months left in the twelve-month savings window that began at ``start_date``.

    Elapsed months are counted by calendar month, across year boundaries.
    The result never drops below 1. Without a usable start date the full
    window of 12 months is assumed.
    """
    start = _coerce_date(start_date)
    if start is None:
        return DEFAULT_MONTHS_REMAINING
    current = now or datetime.now()
    elapsed = (current.year - start.year) * 12 + (current.month - start.month)
    return max(1, DEFAULT_MONTHS_REMAINING - elapsed)


def calculate_budget_progress(
    budget: Union[Budget, Mapping[str, Any], None],
    now: Optional[datetime] = None,
) -> BudgetProgress:
    """Derive progress metrics for a budget.

    Args:
        budget: A :class:`Budget` or a raw budget document
        now: Clock used for the months-remaining calculation (defaults to now)

    Returns:
        ``ComputedProgress`` or ``ProgressUnavailable``. Never raises.

    Example:
        >>> b = Budget('Emergency', savings_goal=1000, current_saved=250, period='yearly')
        >>> calculate_budget_progress(b).progress
        25.0
    """
    if budget is None:
        return ProgressUnavailable('no budget')
    if not isinstance(budget, Budget):
        budget = Budget.from_record(budget)

    goal = budget.savings_goal
    saved = budget.current_saved
    if goal is None or saved is None:
        return ProgressUnavailable('missing savings figures')
    if goal == 0:
        return ProgressUnavailable('zero savings goal')

    progress = saved / goal * 100
    remaining = goal - saved
    is_completed = saved >= goal

    if budget.period == PERIOD_MONTHLY:
        monthly_required = remaining / months_remaining(budget.start_date, now)
    else:
        monthly_required = remaining / 12

    return ComputedProgress(
        progress=min(progress, MAX_PROGRESS),
        remaining=remaining,
        is_completed=is_completed,
        monthly_required=monthly_required,
    )


def budget_progress_table(
    budgets: Iterable[Union[Budget, Mapping[str, Any]]],
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """Summarise progress for several budgets.

    Returns:
        DataFrame with columns: Category, Period, Savings Goal, Current Saved,
        Progress (%), Remaining, Monthly Required, Status
    """
    rows = []
    for item in budgets:
        budget = item if isinstance(item, Budget) else Budget.from_record(item)
        result = calculate_budget_progress(budget, now=now)
        if not result.available:
            status = 'Unavailable'
        elif result.is_completed:
            status = 'Completed'
        else:
            status = 'In Progress'
        rows.append({
            'Category': budget.category,
            'Period': budget.period,
            'Savings Goal': budget.savings_goal,
            'Current Saved': budget.current_saved,
            'Progress (%)': result.progress,
            'Remaining': result.remaining,
            'Monthly Required': result.monthly_required,
            'Status': status,
        })

    if not rows:
        return pd.DataFrame(columns=TABLE_COLUMNS)
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)
