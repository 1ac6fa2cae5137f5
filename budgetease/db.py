"""SQLite storage for budgets, profiles and transactions.

Savings are changed with :func:`add_savings`, a single ``UPDATE`` that
increments ``current_saved`` in place, or with :func:`update_budget`, which
only applies when the caller's ``version`` still matches the stored row.
Either way two concurrent writers cannot silently overwrite each other.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import pandas as pd

from .budget_progress import PERIOD_MONTHLY, Budget
from .config import DB_PATH, ensure_data_directories
from .logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT,
    category TEXT NOT NULL,
    savings_goal REAL,
    current_saved REAL NOT NULL DEFAULT 0 CHECK (current_saved >= 0),
    start_date TEXT,
    period TEXT NOT NULL DEFAULT 'monthly',
    version INTEGER NOT NULL DEFAULT 0,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS profiles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT,
    email TEXT,
    profile_type TEXT,
    saving_goal TEXT,
    risk_tolerance TEXT,
    monthly_income REAL DEFAULT 0,
    current_balance REAL DEFAULT 0,
    total_savings REAL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    description TEXT,
    category TEXT,
    amount REAL NOT NULL,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_budget_user ON budgets (user_id);
CREATE INDEX IF NOT EXISTS ix_profile_user ON profiles (user_id);
CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, date);
"""

BUDGET_FIELDS = {'category', 'savings_goal', 'current_saved', 'start_date', 'period'}
PROFILE_FIELDS = {
    'name', 'email', 'profile_type', 'saving_goal', 'risk_tolerance',
    'monthly_income', 'current_balance', 'total_savings', 'is_active',
}


class BudgetNotFoundError(KeyError):
    pass


class StaleBudgetError(RuntimeError):
    """The budget changed since the caller read it."""

    def __init__(self, budget_id: int, expected_version: int):
        super().__init__(
            f"Budget {budget_id} is no longer at version {expected_version}; reload and retry"
        )
        self.budget_id = budget_id
        self.expected_version = expected_version


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_iso_date(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    return ts.date().isoformat()


@contextmanager
def connect(db_path: Optional[PathLike] = None) -> Iterator[sqlite3.Connection]:
    if db_path is None:
        ensure_data_directories()
        target = DB_PATH
    else:
        target = Path(db_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(target))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[PathLike] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()


def _row_to_budget(row: sqlite3.Row) -> Budget:
    return Budget.from_record(dict(row))


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


def create_budget(
    category: str,
    savings_goal: float,
    *,
    user_id: Optional[str] = None,
    current_saved: float = 0.0,
    start_date: Any = None,
    period: str = PERIOD_MONTHLY,
    db_path: Optional[PathLike] = None,
) -> Budget:
    if float(current_saved) < 0:
        raise ValueError(f"current_saved cannot be negative: {current_saved!r}")
    timestamp = _now()
    with connect(db_path) as conn:
        cursor = conn.execute(
            """
            INSERT INTO budgets
                (user_id, category, savings_goal, current_saved, start_date, period,
                 version, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?)
            """,
            (
                user_id, category, float(savings_goal), float(current_saved),
                _to_iso_date(start_date), period, timestamp, timestamp,
            ),
        )
        conn.commit()
        budget_id = cursor.lastrowid
    logger.debug("Created budget %s for category %s", budget_id, category)
    return get_budget(budget_id, db_path=db_path)


def get_budget(budget_id: int, db_path: Optional[PathLike] = None) -> Budget:
    with connect(db_path) as conn:
        row = conn.execute("SELECT * FROM budgets WHERE id = ?", (budget_id,)).fetchone()
    if row is None:
        raise BudgetNotFoundError(budget_id)
    return _row_to_budget(row)


def list_budgets(user_id: Optional[str] = None, db_path: Optional[PathLike] = None) -> List[Budget]:
    query = "SELECT * FROM budgets"
    params: tuple = ()
    if user_id is not None:
        query += " WHERE user_id = ?"
        params = (user_id,)
    query += " ORDER BY id"
    with connect(db_path) as conn:
        rows = conn.execute(query, params).fetchall()
    return [_row_to_budget(row) for row in rows]


def add_savings(budget_id: int, amount: float, db_path: Optional[PathLike] = None) -> Budget:
    """Atomically add ``amount`` to a budget's saved total.

    A negative ``amount`` withdraws, but never below zero.

    Raises:
        BudgetNotFoundError: no budget with that id
        ValueError: the withdrawal exceeds the saved total
    """
    amount = float(amount)
    with connect(db_path) as conn:
        cursor = conn.execute(
            """
            UPDATE budgets
            SET current_saved = current_saved + ?,
                version = version + 1,
                updated_at = ?
            WHERE id = ? AND current_saved + ? >= 0
            """,
            (amount, _now(), budget_id, amount),
        )
        conn.commit()
        if cursor.rowcount == 0:
            exists = conn.execute("SELECT 1 FROM budgets WHERE id = ?", (budget_id,)).fetchone()
            if exists is None:
                raise BudgetNotFoundError(budget_id)
            raise ValueError(f"Withdrawing {-amount:.2f} would take budget {budget_id} below zero")
    logger.info("Added %.2f to budget %s", amount, budget_id)
    return get_budget(budget_id, db_path=db_path)


def update_budget(
    budget_id: int,
    expected_version: int,
    db_path: Optional[PathLike] = None,
    **fields: Any,
) -> Budget:
    """Update budget fields if the stored version is still ``expected_version``.

    Raises:
        ValueError: unknown field names
        BudgetNotFoundError: no budget with that id
        StaleBudgetError: someone else updated the budget first
    """
    unknown = set(fields) - BUDGET_FIELDS
    if unknown:
        raise ValueError(f"Unknown budget fields: {', '.join(sorted(unknown))}")
    if 'start_date' in fields:
        fields['start_date'] = _to_iso_date(fields['start_date'])
    if 'current_saved' in fields and float(fields['current_saved']) < 0:
        raise ValueError(f"current_saved cannot be negative: {fields['current_saved']!r}")

    assignments = ", ".join(f"{name} = ?" for name in fields)
    set_clause = f"{assignments}, " if assignments else ""
    with connect(db_path) as conn:
        cursor = conn.execute(
            f"UPDATE budgets SET {set_clause}version = version + 1, updated_at = ? "
            "WHERE id = ? AND version = ?",
            (*fields.values(), _now(), budget_id, expected_version),
        )
        conn.commit()
        if cursor.rowcount == 0:
            exists = conn.execute("SELECT 1 FROM budgets WHERE id = ?", (budget_id,)).fetchone()
            if exists is None:
                raise BudgetNotFoundError(budget_id)
            logger.warning("Rejected stale update of budget %s at version %s", budget_id, expected_version)
            raise StaleBudgetError(budget_id, expected_version)
    return get_budget(budget_id, db_path=db_path)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def create_profile(user_id: str, db_path: Optional[PathLike] = None, **fields: Any) -> Dict[str, Any]:
    unknown = set(fields) - PROFILE_FIELDS
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
    timestamp = _now()
    data = {'is_active': 1, **fields, 'user_id': user_id, 'created_at': timestamp, 'updated_at': timestamp}
    columns = ", ".join(data)
    placeholders = ", ".join("?" for _ in data)
    with connect(db_path) as conn:
        conn.execute(f"INSERT INTO profiles ({columns}) VALUES ({placeholders})", tuple(data.values()))
        conn.commit()
    return get_user_profile(user_id, db_path=db_path)


def get_user_profile(user_id: str, db_path: Optional[PathLike] = None) -> Optional[Dict[str, Any]]:
    """Most recently created active profile for a user."""
    with connect(db_path) as conn:
        row = conn.execute(
            """
            SELECT * FROM profiles
            WHERE user_id = ? AND is_active = 1
            ORDER BY created_at DESC, id DESC
            LIMIT 1
            """,
            (user_id,),
        ).fetchone()
    return dict(row) if row is not None else None


def update_profile(profile_id: int, db_path: Optional[PathLike] = None, **fields: Any) -> Dict[str, Any]:
    unknown = set(fields) - PROFILE_FIELDS
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
    assignments = "".join(f"{name} = ?, " for name in fields)
    with connect(db_path) as conn:
        cursor = conn.execute(
            f"UPDATE profiles SET {assignments}updated_at = ? WHERE id = ?",
            (*fields.values(), _now(), profile_id),
        )
        conn.commit()
        if cursor.rowcount == 0:
            raise KeyError(profile_id)
        row = conn.execute("SELECT * FROM profiles WHERE id = ?", (profile_id,)).fetchone()
    return dict(row)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def add_transaction(
    user_id: str,
    date_value: Any,
    description: str,
    amount: float,
    category: Optional[str] = None,
    db_path: Optional[PathLike] = None,
) -> int:
    iso_date = _to_iso_date(date_value)
    if iso_date is None:
        raise ValueError(f"Invalid transaction date: {date_value!r}")
    with connect(db_path) as conn:
        cursor = conn.execute(
            """
            INSERT INTO transactions (user_id, date, description, category, amount, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (user_id, iso_date, description, category, float(amount), _now()),
        )
        conn.commit()
        return cursor.lastrowid


def recent_transactions(user_id: str, limit: int = 5, db_path: Optional[PathLike] = None) -> pd.DataFrame:
    """Newest transactions first."""
    with connect(db_path) as conn:
        conn.row_factory = None
        return pd.read_sql_query(
            """
            SELECT id, date, description, category, amount
            FROM transactions
            WHERE user_id = ?
            ORDER BY date DESC, id DESC
            LIMIT ?
            """,
            conn,
            params=(user_id, int(limit)),
        )
