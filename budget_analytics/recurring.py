"""Monthly materialization of recurring fixed expenses into the ledger."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Iterable, List, Union

from .categories import EntryType, category_label
from .models import BudgetEntry, RecurringExpenseRule, ledger_frame

AUTO_SUFFIX = ' (automatique)'


def recurring_entry_id(rule_id: str, year: int, month: int) -> str:
    """Deterministic id of the entry a rule produces for one month."""
    return f"recurring_{rule_id}_{year:04d}_{month:02d}"


def has_materialized(entries: Iterable[BudgetEntry], year: int, month: int) -> bool:
    """True when any recurring entry is already dated in ``(year, month)``."""
    frame = ledger_frame(entries)
    if frame.empty:
        return False
    landed = frame['is_recurring'] & (frame['year'] == year) & (frame['month'] == month)
    return bool(landed.any())


def _entry_date(rule: RecurringExpenseRule, today: date) -> date:
    last_day = calendar.monthrange(today.year, today.month)[1]
    candidate = date(today.year, today.month, min(int(rule.day_of_month), last_day))
    # An elapsed day is booked today rather than in the past.
    if candidate < today:
        return today
    return candidate


def materialize_current_month(
    entries: Iterable[BudgetEntry],
    rules: Iterable[RecurringExpenseRule],
    now: Union[date, datetime],
) -> List[BudgetEntry]:
    """Entries to add for this month's recurring rules, or ``[]`` if already done.

    The guard is month-wide: one recurring entry dated this month means the
    batch already ran, so a rule created later in the month waits for the next
    month.  Rules are assumed valid (see :func:`models.validate_rule`).
    """
    today = now.date() if isinstance(now, datetime) else now
    if has_materialized(entries, today.year, today.month):
        return []

    created: List[BudgetEntry] = []
    for rule in rules:
        created.append(BudgetEntry(
            id=recurring_entry_id(rule.id, today.year, today.month),
            date=_entry_date(rule, today),
            type=EntryType.DEPENSES_FIXES,
            category=rule.category,
            amount=rule.amount,
            description=category_label(EntryType.DEPENSES_FIXES, rule.category) + AUTO_SUFFIX,
            is_recurring=True,
        ))
    return created
