from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Union

import pandas as pd

from .config import DB_PATH, ensure_data_directories
from .errors import ConfigurationError, NotAvailable
from .models import BudgetEntry, BudgetLimitConfig, RecurringExpenseRule, validate_rule
from .persistence import BudgetStore

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS budget_entries (
    owner_id TEXT NOT NULL,
    id TEXT NOT NULL,
    entry_date TEXT NOT NULL,
    type TEXT NOT NULL,
    category TEXT NOT NULL,
    amount REAL NOT NULL,
    description TEXT,
    is_recurring INTEGER NOT NULL DEFAULT 0,
    updated_at TEXT,
    PRIMARY KEY (owner_id, id)
);

CREATE INDEX IF NOT EXISTS ix_entry_owner_date ON budget_entries (owner_id, entry_date);

CREATE TABLE IF NOT EXISTS recurring_rules (
    owner_id TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    amount REAL NOT NULL,
    category TEXT NOT NULL,
    day_of_month INTEGER NOT NULL DEFAULT 1,
    PRIMARY KEY (owner_id, id)
);

CREATE TABLE IF NOT EXISTS budget_limits (
    owner_id TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    updated_at TEXT
);
"""

ENTRY_SELECT_SQL = """
SELECT id, entry_date AS date, type, category, amount, description, is_recurring
FROM budget_entries
WHERE owner_id = ?
ORDER BY rowid
"""


class SqliteBudgetStore(BudgetStore):
    """SQLite-backed store; every backend failure surfaces as ``NotAvailable``."""

    def __init__(self, db_path: Union[str, Path, None] = None) -> None:
        self.db_path = Path(db_path) if db_path is not None else DB_PATH
        self._initialized = False

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        try:
            if self.db_path == DB_PATH:
                ensure_data_directories()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        except (OSError, sqlite3.Error) as exc:
            raise NotAvailable(f"Cannot open budget database {self.db_path}: {exc}") from exc
        try:
            if not self._initialized:
                conn.executescript(SCHEMA_SQL)
                conn.commit()
                self._initialized = True
                logger.debug("Initialized budget schema in %s", self.db_path)
            yield conn
        except sqlite3.Error as exc:
            raise NotAvailable(f"Budget database error: {exc}") from exc
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect():
            pass

    # Entries

    def load_entries(self, owner_id: str) -> List[BudgetEntry]:
        with self.connect() as conn:
            df = pd.read_sql_query(ENTRY_SELECT_SQL, conn, params=[owner_id])
        if df.empty:
            return []
        df['is_recurring'] = df['is_recurring'].astype(bool)
        df['description'] = df['description'].where(df['description'].notna(), None)
        return [BudgetEntry.from_record(record) for record in df.to_dict(orient='records')]

    def save_entry(self, owner_id: str, entry: BudgetEntry) -> BudgetEntry:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO budget_entries
                    (owner_id, id, entry_date, type, category, amount, description, is_recurring, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(owner_id, id) DO UPDATE SET
                    entry_date = excluded.entry_date,
                    type = excluded.type,
                    category = excluded.category,
                    amount = excluded.amount,
                    description = excluded.description,
                    is_recurring = excluded.is_recurring,
                    updated_at = excluded.updated_at
                """,
                (
                    owner_id,
                    entry.id,
                    entry.date.isoformat(),
                    entry.type.value,
                    entry.category,
                    float(entry.amount),
                    entry.description,
                    int(entry.is_recurring),
                    datetime.now(timezone.utc).isoformat(timespec='seconds'),
                ),
            )
            conn.commit()
        return entry

    def delete_entry(self, owner_id: str, entry_id: str) -> None:
        with self.connect() as conn:
            conn.execute(
                "DELETE FROM budget_entries WHERE owner_id = ? AND id = ?",
                (owner_id, entry_id),
            )
            conn.commit()

    # Recurring rules

    def load_recurring_rules(self, owner_id: str) -> List[RecurringExpenseRule]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT id, amount, category, day_of_month FROM recurring_rules "
                "WHERE owner_id = ? ORDER BY position",
                (owner_id,),
            ).fetchall()
        return [
            RecurringExpenseRule.from_record(
                {'id': row[0], 'amount': row[1], 'category': row[2], 'day_of_month': row[3]}
            )
            for row in rows
        ]

    def save_recurring_rules(self, owner_id: str, rules: List[RecurringExpenseRule]) -> None:
        validated = [validate_rule(rule) for rule in rules]
        with self.connect() as conn:
            conn.execute("DELETE FROM recurring_rules WHERE owner_id = ?", (owner_id,))
            conn.executemany(
                "INSERT INTO recurring_rules (owner_id, id, position, amount, category, day_of_month) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                [
                    (owner_id, rule.id, position, float(rule.amount), rule.category, int(rule.day_of_month))
                    for position, rule in enumerate(validated)
                ],
            )
            conn.commit()

    # Limits

    def load_limits(self, owner_id: str) -> BudgetLimitConfig:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT payload FROM budget_limits WHERE owner_id = ?", (owner_id,)
            ).fetchone()
        if row is None:
            return BudgetLimitConfig.default()
        try:
            payload: Optional[dict] = json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Stored budget limits for '{owner_id}' are not valid JSON") from exc
        return BudgetLimitConfig.from_dict(payload)

    def save_limits(self, owner_id: str, config: BudgetLimitConfig) -> None:
        payload = json.dumps(config.to_dict(), sort_keys=True)
        with self.connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO budget_limits (owner_id, payload, updated_at) VALUES (?, ?, ?)",
                (owner_id, payload, datetime.now(timezone.utc).isoformat(timespec='seconds')),
            )
            conn.commit()
