"""Top-level package for BudgetEase.

The primary modules are:

* ``budget_progress`` – progress metrics for savings budgets
* ``appointments`` – consultation slot generation and booking
* ``savings`` – budget recommendations and reward tiers
* ``db`` – SQLite storage for budgets, profiles and transactions
* ``assistant`` – prompt building and the completion client
* ``visualization`` – Plotly figures over the above

A quick look at progress for stored budgets:

```bash
python scripts/show_budget_progress.py
```
"""

from . import appointments  # noqa: F401  # re-exported for convenience
from . import budget_progress  # noqa: F401  # re-exported for convenience
from . import savings  # noqa: F401  # re-exported for convenience
from .appointments import generate_available_slots, schedule_appointment
from .budget_progress import (
    Budget,
    ComputedProgress,
    ProgressUnavailable,
    calculate_budget_progress,
)

__all__ = [
    "appointments",
    "budget_progress",
    "savings",
    "Budget",
    "ComputedProgress",
    "ProgressUnavailable",
    "calculate_budget_progress",
    "generate_available_slots",
    "schedule_appointment",
]
