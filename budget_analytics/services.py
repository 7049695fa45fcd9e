"""Session-level orchestration between a store and the pure analytics.

The functions here are the only place ``NotAvailable`` is caught: an
unreachable store degrades to an empty ledger, no rules and default limits.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Union

from .errors import NotAvailable
from .models import BudgetEntry, BudgetLimitConfig, RecurringExpenseRule
from .persistence import BudgetStore
from .recurring import materialize_current_month
from .table_view import write_csv_export

logger = logging.getLogger(__name__)


def load_ledger(store: BudgetStore, owner_id: str) -> List[BudgetEntry]:
    try:
        return store.load_entries(owner_id)
    except NotAvailable as exc:
        logger.warning("Ledger unavailable for %s, using an empty one: %s", owner_id, exc)
        return []


def load_rules(store: BudgetStore, owner_id: str) -> List[RecurringExpenseRule]:
    try:
        return store.load_recurring_rules(owner_id)
    except NotAvailable as exc:
        logger.warning("Recurring rules unavailable for %s: %s", owner_id, exc)
        return []


def load_limits(store: BudgetStore, owner_id: str) -> BudgetLimitConfig:
    try:
        return store.load_limits(owner_id)
    except NotAvailable as exc:
        logger.warning("Budget limits unavailable for %s, using defaults: %s", owner_id, exc)
        return BudgetLimitConfig.default()


def apply_recurring_expenses(
    store: BudgetStore,
    owner_id: str,
    now: Union[date, datetime, None] = None,
) -> List[BudgetEntry]:
    """Materialize this month's recurring expenses and persist them.

    Returns the entries actually saved.  Ids already present in the ledger are
    skipped so a rerun after a partial write only fills the gaps.
    """
    now = now or datetime.now()
    ledger = load_ledger(store, owner_id)
    rules = load_rules(store, owner_id)
    if not rules:
        return []

    existing = {entry.id for entry in ledger}
    saved: List[BudgetEntry] = []
    for entry in materialize_current_month(ledger, rules, now):
        if entry.id in existing:
            continue
        saved.append(store.save_entry(owner_id, entry))

    if saved:
        logger.info("Added %d recurring expense(s) for %s", len(saved), owner_id)
    return saved


def export_ledger(
    store: BudgetStore,
    owner_id: str,
    directory: Union[str, Path],
    today: Optional[date] = None,
) -> Path:
    entries = load_ledger(store, owner_id)
    path = write_csv_export(entries, directory, today)
    logger.info("Exported %d entries to %s", len(entries), path)
    return path
