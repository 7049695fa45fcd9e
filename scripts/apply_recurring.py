#!/usr/bin/env python3
"""Add this month's recurring fixed expenses to an owner's ledger."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_analytics.config import DB_PATH
from budget_analytics.db import SqliteBudgetStore
from budget_analytics.formatting import format_currency
from budget_analytics.logging_setup import configure_logging
from budget_analytics.services import apply_recurring_expenses


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Materialize recurring expenses for the current month.')
    parser.add_argument('owner', help='Owner whose recurring rules are applied')
    parser.add_argument('--db', type=Path, default=DB_PATH, help='SQLite database path')
    parser.add_argument('--log-level', default=None, help='Logging level (default: BUDGET_LOG_LEVEL or INFO)')
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    created = apply_recurring_expenses(SqliteBudgetStore(args.db), args.owner)
    if not created:
        print("Nothing to add this month.")
        return 0

    for entry in created:
        print(f"{entry.date.isoformat()}  {entry.display_description:<40} {format_currency(entry.amount)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
