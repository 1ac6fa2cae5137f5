#!/usr/bin/env python3
"""Print savings progress for stored budgets."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budgetease import db
from budgetease.budget_progress import budget_progress_table


def main(user_id: Optional[str] = None, db_path: Optional[str] = None) -> int:
    db.init_db(db_path)
    budgets = db.list_budgets(user_id=user_id, db_path=db_path)
    if not budgets:
        print("No budgets found.")
        return 0

    table = budget_progress_table(budgets)
    print(table.to_string(index=False, float_format=lambda v: f"{v:,.2f}"))

    print("\nBy status:")
    print(table['Status'].value_counts().to_string())
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show savings progress for stored budgets.')
    parser.add_argument('--user', dest='user_id', help='Only show budgets for this user id')
    parser.add_argument('--db', dest='db_path', help='SQLite database path (defaults to config)')
    args = parser.parse_args()
    raise SystemExit(main(user_id=args.user_id, db_path=args.db_path))
