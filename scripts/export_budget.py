#!/usr/bin/env python3
"""Export one owner's ledger to a dated CSV file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_analytics.config import DB_PATH, EXPORTS_DIR
from budget_analytics.db import SqliteBudgetStore
from budget_analytics.logging_setup import configure_logging
from budget_analytics.services import export_ledger


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Export a budget ledger as CSV.')
    parser.add_argument('owner', help='Owner whose entries are exported')
    parser.add_argument('--output-dir', type=Path, default=EXPORTS_DIR, help='Directory for the CSV file')
    parser.add_argument('--db', type=Path, default=DB_PATH, help='SQLite database path')
    parser.add_argument('--log-level', default=None, help='Logging level (default: BUDGET_LOG_LEVEL or INFO)')
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    path = export_ledger(SqliteBudgetStore(args.db), args.owner, args.output_dir)
    print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
